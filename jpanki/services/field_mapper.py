"""Projection of card data and media paths onto the 12 Anki note fields."""

from typing import Any, Dict, Mapping, Optional

from ..models import ANKI_FIELDS
from ..utils.parsing import TextParser


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return str(value) if value else ""


def map_to_anki_fields(
    card_data: Mapping[str, Any],
    media_paths: Optional[Mapping[str, Any]] = None
) -> Dict[str, str]:
    """
    Map LLM card data + media paths to the Anki field layout.

    Sentence fields carry the casual form and are empty unless the phrase
    has both registers. Media fields hold bare file names, as Anki expects
    them in its collection.media folder.

    Args:
        card_data: LLM payload (CardData.to_dict() or the raw JSON)
        media_paths: {imagePolite, imageCasual, audioPolite, audioCasual}

    Returns:
        Dict with the 12 ANKI_FIELDS keys, all strings
    """
    media = media_paths or {}
    has_casual = bool(card_data.get("has_polite_and_casual"))

    fields = {
        "Expression": _text(card_data, "polite_jp"),
        "ExpressionReading": _text(card_data, "polite_reading"),
        "ExpressionKana": _text(card_data, "polite_kana"),
        "PitchAccent": "",
        "Meaning": _text(card_data, "translation_polite"),
        "SentenceJP": _text(card_data, "casual_jp") if has_casual else "",
        "SentenceJPKana": _text(card_data, "casual_kana") if has_casual else "",
        "SentenceEN": _text(card_data, "translation_casual") if has_casual else "",
        "Photo": TextParser.file_name(media.get("imagePolite")),
        "Notes": _text(card_data, "notes"),
        "AudioWord": TextParser.file_name(media.get("audioPolite")),
        "AudioSentence": TextParser.file_name(media.get("audioCasual")) if has_casual else "",
    }
    return {name: fields[name] for name in ANKI_FIELDS}
