"""Base fetcher class."""

import os
from abc import ABC, abstractmethod

import aiofiles

from ..utils.helpers import remove_file, temp_path_for


class BaseFetcher(ABC):
    """
    Abstract base class for all fetchers.

    Provides lifecycle management, async context manager support and the
    atomic write used by every generator.
    Subclasses should implement fetch() and optionally override close().
    """

    @abstractmethod
    async def fetch(self, source: str, output_path: str, **kwargs) -> str:
        """
        Generate a resource and save it to path.

        Args:
            source: Prompt or text to process
            output_path: Path where to save the result

        Returns:
            output_path once the file is written

        Raises:
            ConfigError: Credentials missing (before any network call)
            UpstreamError: The external service failed
        """
        pass

    async def close(self) -> None:
        """
        Close any open resources (sessions, connections, etc.).

        Subclasses should override this to clean up their resources.
        """
        pass

    async def __aenter__(self) -> "BaseFetcher":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit - ensure resources are closed."""
        await self.close()

    @staticmethod
    async def write_file(output_path: str, content: bytes) -> str:
        """
        Atomic write: write to temp file, then rename over output_path.

        A failed write never leaves a partial file at output_path.
        """
        parent = os.path.dirname(output_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        temp_path = temp_path_for(output_path)
        try:
            async with aiofiles.open(temp_path, 'wb') as f:
                await f.write(content)
            os.replace(temp_path, output_path)
        finally:
            # No-op once the rename succeeded
            remove_file(temp_path)
        return output_path
