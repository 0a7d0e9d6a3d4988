"""Shared fixtures and fakes for the jpanki test suite."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import pytest

from jpanki.config import Config
from jpanki.errors import UpstreamError
from jpanki.fetchers import BaseFetcher
from jpanki.services import AIService, BaseAIProvider, CardPipeline, CardRepository, MediaService
from jpanki.services.ai_service import AIConfig

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
MP3_BYTES = b"ID3\x03\x00\x00\x00" + b"\x00" * 16


def make_payload(text: str, casual: bool = True) -> Dict[str, Any]:
    """LLM payload in the shape the system prompt asks for."""
    if not casual:
        return {
            "source_input": text,
            "tense": "present",
            "has_polite_and_casual": False,
            "polite_jp": f"{text}ございます",
            "polite_kana": text,
            "polite_reading": "arigatou",
            "translation_polite": "Thank you",
            "casual_jp": "",
            "casual_kana": "",
            "translation_casual": "",
            "notes": "Set phrase.",
            "img_prompt_polite": "A person bowing politely",
            "img_prompt_casual": "",
        }
    return {
        "source_input": text,
        "tense": "present",
        "has_polite_and_casual": True,
        "polite_jp": f"{text}ます",
        "polite_kana": "たべます",
        "polite_reading": "tabemasu",
        "translation_polite": "I eat",
        "casual_jp": text,
        "casual_kana": "たべる",
        "translation_casual": "I eat (casual)",
        "notes": "Ichidan verb.",
        "img_prompt_polite": "A businessman eating lunch",
        "img_prompt_casual": "Friends eating ramen",
    }


class FakeProvider(BaseAIProvider):
    """Answers every prompt with a canned payload; inputs listed in fail_on raise."""

    def __init__(self, casual: bool = True, fail_on: Optional[Set[str]] = None,
                 raw: Optional[str] = None):
        super().__init__(AIConfig(api_key="test-key"))
        self.casual = casual
        self.fail_on = fail_on or set()
        self.raw = raw
        self.calls: List[Dict[str, Optional[str]]] = []
        self.closed = False

    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        self.calls.append({"prompt": prompt, "system_prompt": system_prompt})
        text = prompt.split(": ", 1)[1]
        if text in self.fail_on:
            raise UpstreamError(f"LLM failed for {text}", service="openai", status=500)
        if self.raw is not None:
            return self.raw
        return json.dumps(make_payload(text, self.casual), ensure_ascii=False)

    async def close(self) -> None:
        self.closed = True


class FakeFetcher(BaseFetcher):
    """Writes fixed bytes to the requested path; sources listed in fail_on raise."""

    def __init__(self, content: bytes, fail_on: Optional[Set[str]] = None):
        self.content = content
        self.fail_on = fail_on or set()
        self.calls: List[Dict[str, Any]] = []

    async def fetch(self, source: str, output_path: str, **kwargs) -> str:
        self.calls.append({"source": source, "output_path": output_path, **kwargs})
        if source in self.fail_on:
            raise UpstreamError(f"generation failed for {source}", service="fake")
        return await self.write_file(output_path, self.content)


@pytest.fixture()
def dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Dict[str, Path]:
    """Point every configured path into a temporary directory."""
    media = tmp_path / "media"
    out = tmp_path / "out"
    monkeypatch.setattr(Config, "MEDIA_DIR", str(media))
    monkeypatch.setattr(Config, "OUTPUT_DIR", str(out))
    monkeypatch.setattr(Config, "DATA_JSON_FILE", str(out / "data.json"))
    monkeypatch.setattr(Config, "CSV_FILE", str(out / "anki.csv"))
    return {"media": media, "out": out}


@pytest.fixture()
def repository(dirs: Dict[str, Path]) -> CardRepository:
    return CardRepository(str(dirs["out"] / "data.json"), str(dirs["out"] / "anki.csv"))


@pytest.fixture()
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture()
def image_fetcher() -> FakeFetcher:
    return FakeFetcher(PNG_BYTES)


@pytest.fixture()
def audio_fetcher() -> FakeFetcher:
    return FakeFetcher(MP3_BYTES)


@pytest.fixture()
def pipeline(
    dirs: Dict[str, Path],
    repository: CardRepository,
    provider: FakeProvider,
    image_fetcher: FakeFetcher,
    audio_fetcher: FakeFetcher,
) -> CardPipeline:
    media = MediaService(
        media_dir=str(dirs["media"]),
        image_fetcher=image_fetcher,
        audio_fetcher=audio_fetcher,
    )
    return CardPipeline(
        ai_service=AIService(AIConfig(api_key="test-key"), provider=provider),
        media_service=media,
        repository=repository,
    )


class FakeResponse:
    """Stands in for an aiohttp response; an Exception body is raised by json()."""

    def __init__(self, body: Any = None, status: int = 200, text: str = ""):
        self.body = body
        self.status = status
        self._text = text

    async def json(self) -> Any:
        if isinstance(self.body, Exception):
            raise self.body
        return self.body

    async def text(self) -> str:
        return self._text

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        return False


class FakeSession:
    """Minimal aiohttp.ClientSession replacement answering every request with one response."""

    def __init__(self, response: FakeResponse):
        self.response = response
        self.closed = False
        self.requests: List[str] = []

    def post(self, url: str, **kwargs) -> FakeResponse:
        self.requests.append(url)
        return self.response

    get = post

    async def close(self) -> None:
        self.closed = True
