"""Fetchers module - Media generation with Strategy pattern."""

from .base import BaseFetcher
from .factory import FetcherFactory
from .audio import EdgeTTSAudioFetcher, PollyAudioFetcher
from .images import OpenAIImageFetcher

# Register fetchers with factory
FetcherFactory.register_class(OpenAIImageFetcher, "openai", "image")
FetcherFactory.register_class(PollyAudioFetcher, "polly", "audio")
FetcherFactory.register_class(EdgeTTSAudioFetcher, "edge_tts", "audio")

__all__ = [
    'BaseFetcher',
    'FetcherFactory',
    'EdgeTTSAudioFetcher',
    'PollyAudioFetcher',
    'OpenAIImageFetcher',
]
