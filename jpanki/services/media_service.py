"""
Media Service - Centralized media generation and management.

Handles image and audio generation and media file bookkeeping.
Uses FetcherFactory for provider abstraction.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Optional

from ..config import Config
from ..fetchers import BaseFetcher, FetcherFactory
from ..models import Credentials
from ..utils.helpers import remove_file
from ..utils.paths import POLITE, MediaPathGenerator

logger = logging.getLogger(__name__)


class MediaService:
    """
    Service for generating and managing media files.

    Provides a high-level interface for card image and audio generation.
    """

    def __init__(
        self,
        media_dir: Optional[str] = None,
        image_fetcher: Optional[BaseFetcher] = None,
        audio_fetcher: Optional[BaseFetcher] = None
    ):
        """
        Initialize media service.

        Args:
            media_dir: Directory for media files (defaults to Config.MEDIA_DIR)
            image_fetcher: Image generator (defaults to the configured provider)
            audio_fetcher: Audio generator (defaults to Config.AUDIO_PROVIDER)
        """
        self.media_dir = Path(media_dir or Config.MEDIA_DIR)
        self._image_fetcher = image_fetcher
        self._audio_fetcher = audio_fetcher

    @property
    def image_fetcher(self) -> BaseFetcher:
        """Lazy-load image fetcher."""
        if self._image_fetcher is None:
            self._image_fetcher = FetcherFactory.create("image")
        return self._image_fetcher

    @property
    def audio_fetcher(self) -> BaseFetcher:
        """Lazy-load audio fetcher."""
        if self._audio_fetcher is None:
            self._audio_fetcher = FetcherFactory.create("audio")
        return self._audio_fetcher

    async def close(self) -> None:
        """Clean up all fetchers."""
        if self._image_fetcher:
            await self._image_fetcher.close()
            self._image_fetcher = None
        if self._audio_fetcher:
            await self._audio_fetcher.close()
            self._audio_fetcher = None

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    def get_image_path(self, card_id: str, register: str = POLITE) -> str:
        """Path for a card image, e.g. media/jp_0421_polite.png."""
        return MediaPathGenerator.image_path(card_id, register, str(self.media_dir))

    def get_audio_path(self, card_id: str, register: str = POLITE) -> str:
        """Path for card audio, e.g. media/jp_0421_polite.mp3."""
        return MediaPathGenerator.audio_path(card_id, register, str(self.media_dir))

    async def generate_image(
        self,
        prompt: str,
        card_id: str,
        register: str = POLITE,
        credentials: Optional[Credentials] = None,
        staging: Optional[str] = None
    ) -> str:
        """
        Generate an image for one register of a card.

        Args:
            prompt: Image generation prompt
            card_id: Card identifier
            register: "polite" or "casual"
            credentials: Optional per-request overrides
            staging: Run token; when set the file goes to a staging name
                that commit_file() later renames onto the final path

        Returns:
            Path to the written image
        """
        credentials = credentials or Credentials()
        output_path = self.get_image_path(card_id, register)
        if staging:
            output_path = MediaPathGenerator.staging_path(output_path, staging)
        return await self.image_fetcher.fetch(prompt, output_path, api_key=credentials.image_key)

    async def generate_audio(
        self,
        text: str,
        card_id: str,
        register: str = POLITE,
        credentials: Optional[Credentials] = None,
        staging: Optional[str] = None
    ) -> str:
        """
        Generate speech for one register of a card.

        Args:
            text: Japanese text to speak
            card_id: Card identifier
            register: "polite" or "casual"
            credentials: Optional per-request overrides
            staging: Run token, as for generate_image()

        Returns:
            Path to the written MP3
        """
        credentials = credentials or Credentials()
        output_path = self.get_audio_path(card_id, register)
        if staging:
            output_path = MediaPathGenerator.staging_path(output_path, staging)
        return await self.audio_fetcher.fetch(text, output_path, aws_credentials=credentials.aws)

    def commit_file(self, staged_path: str, final_path: str) -> str:
        """Move a staged media file onto its final name (replacing any previous file)."""
        os.replace(staged_path, final_path)
        logger.debug("Committed %s", final_path)
        return final_path

    def remove_files(self, paths: Iterable[str]) -> int:
        """
        Delete media files (used to roll back an aborted card).

        Returns:
            Number of files removed
        """
        removed = 0
        for path in paths:
            if remove_file(path):
                removed += 1
                logger.info("Removed partial media file %s", path)
        return removed
