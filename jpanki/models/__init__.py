"""Data models."""

from .card import (
    ANKI_FIELDS,
    REQUIRED_LLM_FIELDS,
    AWSCredentials,
    CardData,
    CardRecord,
    Credentials,
    MediaPaths,
    Tense,
    utc_timestamp,
)

__all__ = [
    'ANKI_FIELDS',
    'REQUIRED_LLM_FIELDS',
    'AWSCredentials',
    'CardData',
    'CardRecord',
    'Credentials',
    'MediaPaths',
    'Tense',
    'utc_timestamp',
]
