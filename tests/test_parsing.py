"""Text helpers: code fences, input lines, TTS cleanup, file names."""

from jpanki.utils import TextParser


def test_strip_code_fence_with_language():
    raw = '```json\n{"a": 1}\n```'
    assert TextParser.strip_code_fence(raw) == '{"a": 1}'


def test_strip_code_fence_without_language():
    assert TextParser.strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'


def test_strip_code_fence_leaves_plain_json():
    assert TextParser.strip_code_fence('  {"a": 1}  ') == '{"a": 1}'


def test_split_input_lines_drops_blank_lines():
    content = "食べる\r\n\n   \n飲む\n"
    assert TextParser.split_input_lines(content) == ["食べる", "飲む"]


def test_split_input_lines_empty():
    assert TextParser.split_input_lines("") == []
    assert TextParser.split_input_lines("\n\n") == []


def test_clean_for_tts():
    assert TextParser.clean_for_tts("<b>食べ</b>ます&amp;\n  ね") == "食べます& ね"


def test_normalize_unicode_composes_dakuten():
    decomposed = "か\u3099"
    assert TextParser.normalize_unicode(decomposed) == "が"


def test_file_name_handles_both_separators():
    assert TextParser.file_name("/srv/media/jp_0001_polite.png") == "jp_0001_polite.png"
    assert TextParser.file_name("C:\\media\\jp_0001_polite.mp3") == "jp_0001_polite.mp3"
    assert TextParser.file_name("jp_0001_polite.mp3") == "jp_0001_polite.mp3"
    assert TextParser.file_name(None) == ""
