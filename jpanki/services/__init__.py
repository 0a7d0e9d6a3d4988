"""Services layer for business logic separation."""

from .ai_service import AIConfig, AIService, BaseAIProvider, OpenAIProvider
from .field_mapper import map_to_anki_fields
from .media_service import MediaService
from .pipeline import BulkResult, CardPipeline
from .repository import CardRepository

__all__ = [
    "AIConfig",
    "AIService",
    "BaseAIProvider",
    "OpenAIProvider",
    "map_to_anki_fields",
    "MediaService",
    "BulkResult",
    "CardPipeline",
    "CardRepository",
]
