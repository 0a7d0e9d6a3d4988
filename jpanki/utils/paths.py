"""
Media path generation utilities - Single source of truth for file naming.

Every card owns up to four media files in the media directory:
``<id>_polite.png``, ``<id>_casual.png``, ``<id>_polite.mp3``, ``<id>_casual.mp3``.
"""

from pathlib import Path
from typing import Optional

from ..config import Config

POLITE = "polite"
CASUAL = "casual"


class MediaPathGenerator:
    """
    Centralized media file path generator.

    Ensures consistent naming conventions across the pipeline, the CSV
    export and the deck builder.
    """

    # File extensions
    AUDIO_EXT = ".mp3"
    IMAGE_EXT = ".png"
    STAGING_EXT = ".staged"

    @classmethod
    def _get_media_dir(cls, media_dir: Optional[str] = None) -> Path:
        """Get media directory path."""
        return Path(media_dir or Config.MEDIA_DIR)

    @classmethod
    def image(cls, card_id: str, register: str = POLITE) -> str:
        """
        Generate filename for a card image.

        Args:
            card_id: Card identifier (e.g. "jp_0421")
            register: "polite" or "casual"

        Returns:
            Filename like "jp_0421_polite.png"
        """
        return f"{card_id}_{register}{cls.IMAGE_EXT}"

    @classmethod
    def audio(cls, card_id: str, register: str = POLITE) -> str:
        """
        Generate filename for card audio.

        Args:
            card_id: Card identifier
            register: "polite" or "casual"

        Returns:
            Filename like "jp_0421_casual.mp3"
        """
        return f"{card_id}_{register}{cls.AUDIO_EXT}"

    @classmethod
    def image_path(cls, card_id: str, register: str = POLITE, media_dir: Optional[str] = None) -> str:
        """Full path for a card image."""
        return str(cls._get_media_dir(media_dir) / cls.image(card_id, register))

    @classmethod
    def audio_path(cls, card_id: str, register: str = POLITE, media_dir: Optional[str] = None) -> str:
        """Full path for card audio."""
        return str(cls._get_media_dir(media_dir) / cls.audio(card_id, register))


    @classmethod
    def staging_path(cls, final_path: str, token: str) -> str:
        """
        Per-run scratch name for a media file that is not committed yet.

        The pipeline writes here and renames onto final_path only once the
        whole card succeeded, so a failed run never touches existing media.
        """
        return f"{final_path}.{token}{cls.STAGING_EXT}"
