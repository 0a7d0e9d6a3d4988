"""Text parsing utilities for consistent text processing across the application."""

import html
import re
import unicodedata
from typing import List


class TextParser:
    """
    Centralized text parsing utilities.

    Single source of truth for LLM response cleanup, input line splitting
    and TTS text normalization.
    """

    # ```json ... ``` or ``` ... ``` wrapping the whole response
    CODE_FENCE_PATTERN = re.compile(r'^```[a-zA-Z]*\s*|\s*```$')

    # HTML tag removal pattern
    HTML_TAG_PATTERN = re.compile(r'<[^>]+>')

    # Whitespace normalization pattern
    WHITESPACE_PATTERN = re.compile(r'\s+')

    # Either path separator, so Windows paths are handled on any platform
    PATH_SEPARATOR_PATTERN = re.compile(r'[\\/]')

    @classmethod
    def normalize_unicode(cls, text: str) -> str:
        """
        Normalize text to NFC form for consistent Unicode handling.

        Japanese kana with dakuten (e.g. が) can arrive either precomposed or
        as base + combining mark; NFC folds both to the precomposed form.
        """
        if not text:
            return ""
        return unicodedata.normalize('NFC', str(text))

    @classmethod
    def strip_code_fence(cls, text: str) -> str:
        """
        Remove Markdown code-fence wrapping from an LLM response.

        Args:
            text: Raw response text

        Returns:
            Text with a leading ```lang and trailing ``` removed, trimmed
        """
        if not text:
            return ""
        return cls.CODE_FENCE_PATTERN.sub('', text.strip()).strip()

    @classmethod
    def split_input_lines(cls, content: str) -> List[str]:
        """
        Split newline-delimited input into non-blank lines.

        Lines keep their original text (minus a trailing carriage return) so
        errors can be reported against exactly what the user submitted.
        """
        if not content:
            return []
        lines = [line.rstrip('\r') for line in content.split('\n')]
        return [line for line in lines if line.strip()]

    @classmethod
    def clean_for_tts(cls, text: str) -> str:
        """
        Clean text for TTS processing.

        Removes HTML, normalizes whitespace and Unicode.
        """
        if not text:
            return ""

        text = html.unescape(str(text))
        text = cls.HTML_TAG_PATTERN.sub('', text)
        text = cls.WHITESPACE_PATTERN.sub(' ', text).strip()
        return cls.normalize_unicode(text)

    @classmethod
    def file_name(cls, path: str) -> str:
        """Return only the file name of a path; empty for empty input."""
        if not path:
            return ""
        return cls.PATH_SEPARATOR_PATTERN.split(str(path))[-1]
