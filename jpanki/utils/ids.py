"""Deterministic card identifiers."""

import hashlib

ID_PREFIX = "jp_"


def generate_card_id(source_input: str) -> str:
    """
    Derive a stable card ID from the (trimmed) source text.

    Takes the first 16 bits of the MD5 digest as an unsigned integer and
    formats it as ``jp_`` plus the decimal value zero-padded to 4 digits.
    Values 0-9999 give 4 digits (``jp_0421``); values 10000-65535 are not
    truncated and give 5 digits (``jp_32664``).

    Only 65536 IDs exist, so unrelated inputs can collide; callers must not
    treat the ID as unique.

    Args:
        source_input: Text to derive the ID from

    Returns:
        ID string like "jp_0421" or "jp_32664"
    """
    digest = hashlib.md5(source_input.encode("utf-8")).digest()
    number = int.from_bytes(digest[:2], "big")
    return f"{ID_PREFIX}{number:04d}"
