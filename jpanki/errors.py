"""
Error taxonomy for card generation.

Every stage of the pipeline raises one of these; callers decide whether to
surface the message (HTTP), record it (bulk mode) or let it propagate (CLI).
"""

from typing import Optional


class CardGenerationError(Exception):
    """Base class for all card generation failures."""


class ConfigError(CardGenerationError):
    """Required credentials or settings are missing."""


class ValidationError(CardGenerationError):
    """Input or LLM output does not satisfy the card data contract."""


class ParseError(CardGenerationError):
    """LLM response could not be parsed as JSON."""

    def __init__(self, message: str, raw_response: str = ""):
        super().__init__(message)
        self.raw_response = raw_response


class UpstreamError(CardGenerationError):
    """An external API call failed or returned an unusable payload."""

    def __init__(self, message: str, service: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.service = service
        self.status = status
