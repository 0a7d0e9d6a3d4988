"""Projection onto the 12 Anki fields."""

from jpanki.models import ANKI_FIELDS
from jpanki.services import map_to_anki_fields

from conftest import make_payload

MEDIA = {
    "imagePolite": "/data/media/jp_0001_polite.png",
    "imageCasual": "/data/media/jp_0001_casual.png",
    "audioPolite": "/data/media/jp_0001_polite.mp3",
    "audioCasual": "/data/media/jp_0001_casual.mp3",
}


def test_field_order_and_keys():
    fields = map_to_anki_fields(make_payload("食べる"), MEDIA)
    assert tuple(fields) == ANKI_FIELDS


def test_polite_and_casual_mapping():
    fields = map_to_anki_fields(make_payload("食べる"), MEDIA)

    assert fields["Expression"] == "食べるます"
    assert fields["ExpressionReading"] == "tabemasu"
    assert fields["ExpressionKana"] == "たべます"
    assert fields["PitchAccent"] == ""
    assert fields["Meaning"] == "I eat"
    assert fields["SentenceJP"] == "食べる"
    assert fields["SentenceJPKana"] == "たべる"
    assert fields["SentenceEN"] == "I eat (casual)"
    assert fields["Notes"] == "Ichidan verb."
    assert fields["Photo"] == "jp_0001_polite.png"
    assert fields["AudioWord"] == "jp_0001_polite.mp3"
    assert fields["AudioSentence"] == "jp_0001_casual.mp3"


def test_sentence_fields_empty_without_casual_form():
    payload = make_payload("食べる")
    payload["has_polite_and_casual"] = False

    fields = map_to_anki_fields(payload, MEDIA)

    assert fields["SentenceJP"] == ""
    assert fields["SentenceJPKana"] == ""
    assert fields["SentenceEN"] == ""
    assert fields["AudioSentence"] == ""


def test_file_fields_never_contain_separators():
    media = {
        "imagePolite": "C:\\cards\\media\\jp_0002_polite.png",
        "audioPolite": "media/jp_0002_polite.mp3",
        "audioCasual": "media/jp_0002_casual.mp3",
    }
    fields = map_to_anki_fields(make_payload("飲む"), media)

    for name in ("Photo", "AudioWord", "AudioSentence"):
        assert "/" not in fields[name]
        assert "\\" not in fields[name]


def test_missing_values_become_empty_strings():
    fields = map_to_anki_fields({"has_polite_and_casual": True}, {})

    assert all(value == "" for value in fields.values())
