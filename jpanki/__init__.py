"""jpanki - Japanese polite/casual Anki card generator"""

__version__ = "1.0.0"

from .config import Config
from .deck import AnkiDeckBuilder
from .errors import (
    CardGenerationError,
    ConfigError,
    ParseError,
    UpstreamError,
    ValidationError,
)
from .models import CardData, CardRecord, Credentials
from .services import CardPipeline, CardRepository
from .templates import CardTemplates
from .utils import generate_card_id

__all__ = [
    'AnkiDeckBuilder',
    'CardData',
    'CardGenerationError',
    'CardPipeline',
    'CardRecord',
    'CardRepository',
    'CardTemplates',
    'Config',
    'ConfigError',
    'Credentials',
    'ParseError',
    'UpstreamError',
    'ValidationError',
    'generate_card_id',
]
