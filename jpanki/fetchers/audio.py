"""Audio fetchers - Japanese TTS via AWS Polly or Edge TTS."""

import asyncio
import functools
import logging
from typing import Any, Callable, Optional

import boto3
import edge_tts
from botocore.exceptions import BotoCoreError, ClientError

from ..config import Config
from ..errors import ConfigError, UpstreamError
from ..models import AWSCredentials
from ..utils.parsing import TextParser
from .base import BaseFetcher

logger = logging.getLogger(__name__)


def _default_polly_client(credentials: AWSCredentials) -> Any:
    return boto3.client(
        "polly",
        region_name=credentials.region or Config.AWS_REGION or "us-east-1",
        aws_access_key_id=credentials.access_key_id,
        aws_secret_access_key=credentials.secret_access_key,
    )


class PollyAudioFetcher(BaseFetcher):
    """Handle audio generation via AWS Polly (neural Japanese voices)."""

    def __init__(
        self,
        voice: Optional[str] = None,
        client_factory: Optional[Callable[[AWSCredentials], Any]] = None
    ):
        """
        Initialize audio fetcher.

        Args:
            voice: Polly voice ID (defaults to Config.POLLY_VOICE, "Takumi")
            client_factory: Builds a Polly client from credentials (tests inject fakes)
        """
        self.voice = voice or Config.POLLY_VOICE
        self._client_factory = client_factory or _default_polly_client

    def _resolve_credentials(self, aws_credentials: Optional[AWSCredentials]) -> AWSCredentials:
        credentials = aws_credentials or AWSCredentials.from_config()
        if not credentials.is_complete:
            raise ConfigError("AWS credentials are required for audio generation")
        return credentials

    def _synthesize(self, client: Any, text: str, voice: str) -> bytes:
        """Blocking Polly call; returns the concatenated audio stream."""
        try:
            response = client.synthesize_speech(
                Text=text,
                OutputFormat="mp3",
                VoiceId=voice,
                Engine=Config.POLLY_ENGINE,
                LanguageCode=Config.LANGUAGE_CODE,
            )
        except (BotoCoreError, ClientError) as e:
            raise UpstreamError(f"AWS Polly error: {e}", service="polly")

        stream = response.get("AudioStream")
        if stream is None:
            raise UpstreamError("AWS Polly error: No audio stream returned from Polly", service="polly")

        try:
            return b"".join(stream.iter_chunks())
        finally:
            stream.close()

    async def fetch(
        self,
        source: str,
        output_path: str,
        voice: Optional[str] = None,
        aws_credentials: Optional[AWSCredentials] = None,
        **kwargs
    ) -> str:
        """
        Synthesize Japanese speech and save it as MP3.

        Args:
            source: Japanese text to speak
            output_path: Path to save MP3
            voice: Voice override
            aws_credentials: Per-request credential override

        Returns:
            output_path
        """
        credentials = self._resolve_credentials(aws_credentials)
        text = TextParser.clean_for_tts(source)
        client = self._client_factory(credentials)

        loop = asyncio.get_running_loop()
        audio = await loop.run_in_executor(
            None,
            functools.partial(self._synthesize, client, text, voice or self.voice),
        )
        if not audio:
            raise UpstreamError("AWS Polly error: empty audio stream", service="polly")

        return await self.write_file(output_path, audio)


class EdgeTTSAudioFetcher(BaseFetcher):
    """Handle audio generation via TTS (Edge TTS). Needs no credentials."""

    def __init__(self, voice: Optional[str] = None):
        self.voice = voice or Config.EDGE_TTS_VOICE

    async def fetch(
        self,
        source: str,
        output_path: str,
        voice: Optional[str] = None,
        volume: str = "+0%",
        **kwargs
    ) -> str:
        """
        Stream speech from Edge TTS and save it as MP3.

        Args:
            source: Japanese text to speak
            output_path: Path to save MP3
            voice: Voice override (e.g. "ja-JP-NanamiNeural")
            volume: Volume adjustment (e.g., "+0%", "+40%")

        Returns:
            output_path
        """
        text = TextParser.clean_for_tts(source)
        communicate = edge_tts.Communicate(text, voice or self.voice, volume=volume)

        chunks = []
        try:
            async for chunk in communicate.stream():
                if chunk["type"] == "audio":
                    chunks.append(chunk["data"])
        except Exception as e:
            raise UpstreamError(f"Edge TTS error: {e}", service="edge_tts")

        if not chunks:
            raise UpstreamError("Edge TTS error: no audio received", service="edge_tts")

        return await self.write_file(output_path, b"".join(chunks))
