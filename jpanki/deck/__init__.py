"""Deck building module."""

from .builder import AnkiDeckBuilder

__all__ = ['AnkiDeckBuilder']
