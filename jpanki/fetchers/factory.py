"""
Fetcher Factory - Strategy Pattern Implementation for Media Fetchers.

Provides a centralized factory for creating fetchers based on configuration,
enabling easy switching between providers (Polly, Edge TTS, ...).
"""

from typing import Dict, List, Optional, Type

from ..config import Config
from .base import BaseFetcher


class FetcherFactory:
    """
    Factory for creating fetchers based on configuration.

    Supports registration of custom fetchers for extensibility.

    Usage:
        FetcherFactory.register_class(PollyAudioFetcher, "polly", "audio")
        fetcher = FetcherFactory.create("audio", "polly")
    """

    # Registry: {media_type: {provider_name: fetcher_class}}
    _registry: Dict[str, Dict[str, Type[BaseFetcher]]] = {
        "image": {},
        "audio": {},
    }

    @classmethod
    def register_class(
        cls,
        fetcher_cls: Type[BaseFetcher],
        provider: str,
        media_type: str
    ) -> None:
        """Register a fetcher class under a provider name."""
        cls._registry.setdefault(media_type, {})[provider] = fetcher_cls

    @classmethod
    def create(cls, media_type: str, provider: Optional[str] = None, **kwargs) -> BaseFetcher:
        """
        Create a fetcher instance.

        Args:
            media_type: Type of media ("image" or "audio")
            provider: Provider name (defaults to the configured provider)
            **kwargs: Additional arguments for fetcher constructor

        Returns:
            Fetcher instance

        Raises:
            ValueError: If media type or provider not found
        """
        if media_type not in cls._registry:
            raise ValueError(f"Unknown media type: {media_type}")

        provider = provider or cls.default_provider(media_type)
        if provider not in cls._registry[media_type]:
            available = list(cls._registry[media_type].keys())
            raise ValueError(
                f"Unknown {media_type} provider: {provider}. "
                f"Available: {available}"
            )

        return cls._registry[media_type][provider](**kwargs)

    @classmethod
    def default_provider(cls, media_type: str) -> str:
        """Configured provider for a media type."""
        if media_type == "audio":
            return Config.AUDIO_PROVIDER
        return "openai"

    @classmethod
    def get_available_providers(cls, media_type: str) -> List[str]:
        """Get list of available providers for a media type."""
        return list(cls._registry.get(media_type, {}).keys())
