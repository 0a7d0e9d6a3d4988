"""Image and audio fetchers with their external clients faked out."""

import asyncio
import base64
import json

import pytest
from botocore.exceptions import ClientError

from jpanki.config import Config
from jpanki.errors import ConfigError, UpstreamError
from jpanki.fetchers import (
    EdgeTTSAudioFetcher,
    FetcherFactory,
    OpenAIImageFetcher,
    PollyAudioFetcher,
)
from jpanki.fetchers import audio as audio_module
from jpanki.fetchers.images import detect_image_format
from jpanki.models import AWSCredentials

from conftest import MP3_BYTES, PNG_BYTES, FakeResponse, FakeSession

AWS = AWSCredentials("AKIA_TEST", "secret", "eu-west-1")


class FakeStream:
    def __init__(self, chunks):
        self.chunks = chunks
        self.closed = False

    def iter_chunks(self):
        return iter(self.chunks)

    def close(self):
        self.closed = True


class FakePollyClient:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def synthesize_speech(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return self.response


# =============================================================================
# IMAGES
# =============================================================================

def test_detect_image_format():
    assert detect_image_format(PNG_BYTES) == "png"
    assert detect_image_format(b"\xff\xd8\xff\xe0" + b"\x00" * 8) == "jpeg"
    assert detect_image_format(b"RIFF\x00\x00\x00\x00WEBPVP8 ") == "webp"
    assert detect_image_format(b"<html>") is None


def test_image_fetcher_requires_key(tmp_path, monkeypatch):
    monkeypatch.setattr(Config, "IMAGE_API_KEY", "")
    monkeypatch.setattr(Config, "OPENAI_API_KEY", "")
    fetcher = OpenAIImageFetcher()

    with pytest.raises(ConfigError):
        asyncio.run(fetcher.fetch("a cat", str(tmp_path / "cat.png")))

    assert fetcher._session is None
    assert not (tmp_path / "cat.png").exists()


def test_image_fetcher_writes_inline_image(tmp_path, monkeypatch):
    fetcher = OpenAIImageFetcher(api_key="sk-test")
    seen = {}

    async def fake_request(prompt, key):
        seen["prompt"], seen["key"] = prompt, key
        return {"b64_json": base64.b64encode(PNG_BYTES).decode()}

    monkeypatch.setattr(fetcher, "_request_image", fake_request)
    output = tmp_path / "media" / "jp_0001_polite.png"

    path = asyncio.run(fetcher.fetch("  a cat  ", str(output), api_key="sk-override"))

    assert path == str(output)
    assert output.read_bytes() == PNG_BYTES
    assert seen == {"prompt": "a cat", "key": "sk-override"}


def test_image_fetcher_downloads_url(tmp_path, monkeypatch):
    fetcher = OpenAIImageFetcher(api_key="sk-test")

    async def fake_request(prompt, key):
        return {"url": "https://images.example/cat.png"}

    async def fake_download(url):
        assert url == "https://images.example/cat.png"
        return PNG_BYTES

    monkeypatch.setattr(fetcher, "_request_image", fake_request)
    monkeypatch.setattr(fetcher, "_download", fake_download)
    output = tmp_path / "cat.png"

    asyncio.run(fetcher.fetch("a cat", str(output)))

    assert output.read_bytes() == PNG_BYTES
    assert [p.name for p in tmp_path.iterdir()] == ["cat.png"]


def test_image_fetcher_missing_url(tmp_path, monkeypatch):
    fetcher = OpenAIImageFetcher(api_key="sk-test")

    async def fake_request(prompt, key):
        return {"revised_prompt": "a cat"}

    monkeypatch.setattr(fetcher, "_request_image", fake_request)

    with pytest.raises(UpstreamError):
        asyncio.run(fetcher.fetch("a cat", str(tmp_path / "cat.png")))
    assert not (tmp_path / "cat.png").exists()


def test_image_fetcher_invalid_base64(tmp_path, monkeypatch):
    fetcher = OpenAIImageFetcher(api_key="sk-test")

    async def fake_request(prompt, key):
        return {"b64_json": "not*base64!"}

    monkeypatch.setattr(fetcher, "_request_image", fake_request)

    with pytest.raises(UpstreamError, match="Invalid base64"):
        asyncio.run(fetcher.fetch("a cat", str(tmp_path / "cat.png")))
    assert not (tmp_path / "cat.png").exists()


@pytest.mark.parametrize("body", [
    json.JSONDecodeError("Expecting value", "<html>", 0),
    ["not", "an", "object"],
    {"data": ["not a result"]},
])
def test_image_fetcher_malformed_body(tmp_path, body):
    fetcher = OpenAIImageFetcher(api_key="sk-test")
    fetcher._session = FakeSession(FakeResponse(body))

    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(fetcher.fetch("a cat", str(tmp_path / "cat.png")))

    assert excinfo.value.service == "openai-images"
    assert not (tmp_path / "cat.png").exists()


# =============================================================================
# AUDIO (POLLY)
# =============================================================================

def test_polly_requires_credentials(tmp_path, monkeypatch):
    monkeypatch.setattr(Config, "AWS_ACCESS_KEY_ID", "")
    monkeypatch.setattr(Config, "AWS_SECRET_ACCESS_KEY", "")
    built = []
    fetcher = PollyAudioFetcher(client_factory=lambda creds: built.append(creds))

    with pytest.raises(ConfigError):
        asyncio.run(fetcher.fetch("ありがとう", str(tmp_path / "a.mp3")))
    assert built == []


def test_polly_writes_concatenated_stream(tmp_path):
    stream = FakeStream([MP3_BYTES[:5], MP3_BYTES[5:]])
    client = FakePollyClient(response={"AudioStream": stream})
    received = []

    def factory(creds):
        received.append(creds)
        return client

    fetcher = PollyAudioFetcher(voice="Takumi", client_factory=factory)
    output = tmp_path / "jp_0001_polite.mp3"

    asyncio.run(fetcher.fetch("<b>ありがとう</b>", str(output), aws_credentials=AWS))

    assert output.read_bytes() == MP3_BYTES
    assert stream.closed
    assert received == [AWS]
    call = client.calls[0]
    assert call["Text"] == "ありがとう"
    assert call["VoiceId"] == "Takumi"
    assert call["OutputFormat"] == "mp3"
    assert call["Engine"] == Config.POLLY_ENGINE
    assert call["LanguageCode"] == Config.LANGUAGE_CODE


def test_polly_client_error_becomes_upstream_error(tmp_path):
    error = ClientError(
        {"Error": {"Code": "InvalidSignatureException", "Message": "bad signature"}},
        "SynthesizeSpeech",
    )
    fetcher = PollyAudioFetcher(client_factory=lambda creds: FakePollyClient(error=error))

    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(fetcher.fetch("ありがとう", str(tmp_path / "a.mp3"), aws_credentials=AWS))

    assert excinfo.value.service == "polly"
    assert not (tmp_path / "a.mp3").exists()


def test_polly_missing_audio_stream(tmp_path):
    fetcher = PollyAudioFetcher(client_factory=lambda creds: FakePollyClient(response={}))

    with pytest.raises(UpstreamError, match="No audio stream"):
        asyncio.run(fetcher.fetch("ありがとう", str(tmp_path / "a.mp3"), aws_credentials=AWS))


# =============================================================================
# AUDIO (EDGE TTS)
# =============================================================================

class FakeCommunicate:
    chunks = []
    error = None
    created = []

    def __init__(self, text, voice, volume="+0%"):
        self.created.append({"text": text, "voice": voice, "volume": volume})

    async def stream(self):
        for chunk in self.chunks:
            yield chunk
        if self.error:
            raise self.error


@pytest.fixture()
def communicate(monkeypatch):
    monkeypatch.setattr(FakeCommunicate, "chunks", [])
    monkeypatch.setattr(FakeCommunicate, "error", None)
    monkeypatch.setattr(FakeCommunicate, "created", [])
    monkeypatch.setattr(audio_module.edge_tts, "Communicate", FakeCommunicate)
    return FakeCommunicate


def test_edge_tts_writes_audio_chunks(tmp_path, communicate):
    communicate.chunks = [
        {"type": "audio", "data": MP3_BYTES[:5]},
        {"type": "WordBoundary", "offset": 0},
        {"type": "audio", "data": MP3_BYTES[5:]},
    ]
    output = tmp_path / "jp_0001_polite.mp3"

    path = asyncio.run(EdgeTTSAudioFetcher(voice="ja-JP-KeitaNeural").fetch("<i>ありがとう</i>", str(output)))

    assert path == str(output)
    assert output.read_bytes() == MP3_BYTES
    assert communicate.created == [{"text": "ありがとう", "voice": "ja-JP-KeitaNeural", "volume": "+0%"}]


def test_edge_tts_without_audio_is_upstream_error(tmp_path, communicate):
    communicate.chunks = [{"type": "WordBoundary", "offset": 0}]

    with pytest.raises(UpstreamError, match="no audio received"):
        asyncio.run(EdgeTTSAudioFetcher().fetch("ありがとう", str(tmp_path / "a.mp3")))
    assert not (tmp_path / "a.mp3").exists()


def test_edge_tts_stream_failure_is_upstream_error(tmp_path, communicate):
    communicate.chunks = [{"type": "audio", "data": MP3_BYTES}]
    communicate.error = ConnectionError("socket closed")

    with pytest.raises(UpstreamError, match="socket closed") as excinfo:
        asyncio.run(EdgeTTSAudioFetcher().fetch("ありがとう", str(tmp_path / "a.mp3")))

    assert excinfo.value.service == "edge_tts"
    assert not (tmp_path / "a.mp3").exists()


# =============================================================================
# FACTORY
# =============================================================================

def test_factory_creates_registered_providers():
    assert isinstance(FetcherFactory.create("image"), OpenAIImageFetcher)
    assert isinstance(FetcherFactory.create("audio", "polly"), PollyAudioFetcher)
    assert isinstance(FetcherFactory.create("audio", "edge_tts"), EdgeTTSAudioFetcher)


def test_factory_uses_configured_audio_provider(monkeypatch):
    monkeypatch.setattr(Config, "AUDIO_PROVIDER", "edge_tts")
    assert isinstance(FetcherFactory.create("audio"), EdgeTTSAudioFetcher)


def test_factory_rejects_unknown_provider():
    with pytest.raises(ValueError, match="Unknown audio provider"):
        FetcherFactory.create("audio", "nope")
    with pytest.raises(ValueError, match="Unknown media type"):
        FetcherFactory.create("video")

    assert set(FetcherFactory.get_available_providers("audio")) >= {"polly", "edge_tts"}
