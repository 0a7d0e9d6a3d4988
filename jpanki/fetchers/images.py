"""Image fetcher - generate images via the OpenAI images API."""

import asyncio
import base64
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..config import Config
from ..errors import ConfigError, UpstreamError
from .base import BaseFetcher

logger = logging.getLogger(__name__)


# Image format magic bytes for validation
IMAGE_MAGIC_BYTES = {
    b'\xff\xd8\xff': 'jpeg',      # JPEG
    b'\x89PNG': 'png',            # PNG
    b'GIF8': 'gif',               # GIF
}


def detect_image_format(content: bytes) -> Optional[str]:
    """Detect image format from magic bytes."""
    if not content or len(content) < 4:
        return None
    for magic, fmt in IMAGE_MAGIC_BYTES.items():
        if content.startswith(magic):
            return fmt
    # Check WebP specifically (RIFF....WEBP)
    if content[:4] == b'RIFF' and len(content) > 12 and content[8:12] == b'WEBP':
        return 'webp'
    return None


class OpenAIImageFetcher(BaseFetcher):
    """Handle image generation via the OpenAI images endpoint with session pooling."""

    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None):
        """
        Initialize image fetcher.

        Args:
            api_key: Default API key (falls back to IMAGE_API_KEY / OPENAI_API_KEY)
            base_url: API base URL (falls back to OPENAI_API_URL)
        """
        self.api_key = api_key
        self.base_url = (base_url or Config.OPENAI_API_URL or self.DEFAULT_BASE_URL).rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_lock = asyncio.Lock()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create a shared aiohttp session (connection pooling)."""
        async with self._session_lock:
            if self._session is None or self._session.closed:
                timeout = aiohttp.ClientTimeout(total=Config.IMAGE_TIMEOUT)
                self._session = aiohttp.ClientSession(timeout=timeout)
            return self._session

    async def close(self) -> None:
        """Close the aiohttp session. Call this when done with the fetcher."""
        async with self._session_lock:
            if self._session and not self._session.closed:
                await self._session.close()
                self._session = None

    def _resolve_key(self, api_key: Optional[str]) -> str:
        key = api_key or self.api_key or Config.IMAGE_API_KEY or Config.OPENAI_API_KEY
        if not key:
            raise ConfigError("OpenAI API key is required for image generation")
        return key

    async def _request_image(self, prompt: str, api_key: str) -> Dict[str, Any]:
        """Call the generation endpoint and return the first result entry."""
        session = await self._get_session()
        url = f"{self.base_url}/images/generations"
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": Config.IMAGE_MODEL,
            "prompt": prompt,
            "n": 1,
            "size": Config.IMAGE_SIZE,
            "quality": Config.IMAGE_QUALITY,
        }

        try:
            async with session.post(url, headers=headers, json=payload) as response:
                if response.status != 200:
                    body = await response.text()
                    raise UpstreamError(
                        f"OpenAI API error during image generation ({response.status}): {body[:200]}",
                        service="openai-images",
                        status=response.status,
                    )
                data = await response.json()
        except asyncio.TimeoutError:
            raise UpstreamError("OpenAI image generation timeout", service="openai-images")
        except aiohttp.ClientError as e:
            raise UpstreamError(f"OpenAI API error during image generation: {e}", service="openai-images")
        except ValueError as e:
            raise UpstreamError(f"OpenAI image API returned invalid JSON: {e}", service="openai-images")

        results = data.get("data") if isinstance(data, dict) else None
        if not results or not isinstance(results, list) or not isinstance(results[0], dict):
            raise UpstreamError("No image returned from the image API", service="openai-images")
        return results[0]

    async def _download(self, url: str) -> bytes:
        """Download the generated image."""
        session = await self._get_session()
        try:
            async with session.get(url) as response:
                if response.status != 200:
                    raise UpstreamError(
                        f"Failed to download image: {response.reason}",
                        service="openai-images",
                        status=response.status,
                    )
                return await response.read()
        except asyncio.TimeoutError:
            raise UpstreamError("Image download timeout", service="openai-images")
        except aiohttp.ClientError as e:
            raise UpstreamError(f"Failed to download image: {e}", service="openai-images")

    async def fetch(self, source: str, output_path: str, api_key: Optional[str] = None, **kwargs) -> str:
        """
        Generate an image from a prompt and save it locally.

        Args:
            source: Prompt text for image generation
            output_path: Path to save the image
            api_key: Per-request key override

        Returns:
            output_path
        """
        key = self._resolve_key(api_key)
        prompt = str(source or "").strip()

        result = await self._request_image(prompt, key)

        if result.get("b64_json"):
            try:
                content = base64.b64decode(result["b64_json"], validate=True)
            except (ValueError, TypeError) as e:
                raise UpstreamError(f"Invalid base64 image data: {e}", service="openai-images")
        elif result.get("url"):
            content = await self._download(result["url"])
        else:
            raise UpstreamError("No image URL returned from the image API", service="openai-images")

        if not content:
            raise UpstreamError("Downloaded image is empty", service="openai-images")
        if detect_image_format(content) is None:
            logger.warning("Unrecognized image format for %s (magic: %r)", output_path, content[:4])

        return await self.write_file(output_path, content)
