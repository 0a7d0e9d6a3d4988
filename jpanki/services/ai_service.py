"""
AI Service - LLM integration for Japanese card data.

Sends the source text to an OpenAI-compatible chat completion endpoint with
the packaged system prompt and turns the JSON answer into CardData:
- strips Markdown code fences
- parses JSON (ParseError)
- checks the 13 required keys and the tense enum (ValidationError)

Single attempt, no retries; errors propagate to the caller.
"""

import asyncio
import dataclasses
import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional

import aiohttp

from ..config import Config
from ..errors import ConfigError, ParseError, UpstreamError, ValidationError
from ..models import REQUIRED_LLM_FIELDS, CardData, Tense
from ..prompts import load_system_prompt
from ..utils.parsing import TextParser

logger = logging.getLogger(__name__)

USER_PROMPT_TEMPLATE = "Generate data for this Japanese input: {text}"

VALID_TENSES = tuple(t.value for t in Tense)


@dataclass
class AIConfig:
    """Configuration for AI service."""
    model: str = "gpt-4o"
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.3
    timeout: int = 60

    @classmethod
    def from_config(cls) -> "AIConfig":
        return cls(
            model=Config.LLM_MODEL,
            api_key=Config.OPENAI_API_KEY or None,
            base_url=Config.OPENAI_API_URL,
            temperature=Config.LLM_TEMPERATURE,
            timeout=Config.TIMEOUT,
        )


class BaseAIProvider(ABC):
    """Abstract base class for AI providers."""

    def __init__(self, config: AIConfig):
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close the session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    @abstractmethod
    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Generate a JSON completion for the given prompt."""
        pass


class OpenAIProvider(BaseAIProvider):
    """OpenAI chat completions (also works with compatible APIs)."""

    DEFAULT_BASE_URL = "https://api.openai.com/v1"

    async def complete(self, prompt: str, system_prompt: Optional[str] = None) -> str:
        """Request a strict-JSON chat completion and return the message content."""
        if not self.config.api_key:
            raise ConfigError("OpenAI API key is required for card generation")

        session = await self._get_session()

        base_url = (self.config.base_url or self.DEFAULT_BASE_URL).rstrip("/")
        url = f"{base_url}/chat/completions"

        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

        payload = {
            "model": self.config.model,
            "messages": messages,
            "response_format": {"type": "json_object"},
            "temperature": self.config.temperature,
        }

        try:
            async with session.post(url, headers=headers, json=payload) as response:
                if response.status != 200:
                    error = await response.text()
                    raise UpstreamError(
                        f"OpenAI API error {response.status}: {_error_message(error)}",
                        service="openai",
                        status=response.status,
                    )
                data = await response.json()
        except asyncio.TimeoutError:
            raise UpstreamError("OpenAI API timeout", service="openai")
        except aiohttp.ClientError as e:
            raise UpstreamError(f"OpenAI API error: {e}", service="openai")
        except ValueError as e:
            raise UpstreamError(f"OpenAI API returned invalid JSON: {e}", service="openai")

        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            raise UpstreamError("OpenAI API returned no completion content", service="openai")


def _error_message(body: str) -> str:
    """Extract ``error.message`` from an OpenAI error body, else a truncated body."""
    try:
        return json.loads(body)["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return body[:200]


def parse_llm_response(content: str) -> Dict[str, Any]:
    """
    Parse the raw LLM response into a dict.

    Raises:
        ParseError: Response is not valid JSON (carries the raw text)
        ValidationError: Response is JSON but not an object
    """
    cleaned = TextParser.strip_code_fence(content)
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise ParseError(
            f"Failed to parse LLM response as JSON: {e}\nResponse: {content}",
            raw_response=content,
        )
    if not isinstance(payload, dict):
        raise ValidationError(f"LLM response must be a JSON object, got {type(payload).__name__}")
    return payload


def validate_llm_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check the required keys and the tense value.

    Raises:
        ValidationError: Missing keys (all named) or invalid tense
    """
    missing = [key for key in REQUIRED_LLM_FIELDS if key not in payload]
    if missing:
        raise ValidationError(f"Missing required fields in LLM response: {', '.join(missing)}")

    if payload["tense"] not in VALID_TENSES:
        raise ValidationError(
            f"Invalid tense: {payload['tense']}. Must be 'past', 'present', or 'future'"
        )
    return payload


class AIService:
    """
    High-level AI service for Japanese card generation.

    Usage:
        async with AIService() as ai:
            card = await ai.generate_card_data("ありがとう")
    """

    def __init__(
        self,
        config: Optional[AIConfig] = None,
        provider: Optional[BaseAIProvider] = None
    ):
        """
        Initialize AI service.

        Args:
            config: AI configuration. If None, uses Config / environment.
            provider: Pre-built provider (mainly for tests)
        """
        self.config = config or AIConfig.from_config()
        self._provider: Optional[BaseAIProvider] = provider

    def _get_provider(self) -> BaseAIProvider:
        """Get or create the provider."""
        if self._provider is None:
            self._provider = OpenAIProvider(self.config)
        return self._provider

    async def close(self) -> None:
        """Close the AI service and release resources."""
        if self._provider:
            await self._provider.close()
            self._provider = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @property
    def is_configured(self) -> bool:
        """Check if an API key is available."""
        return bool(self.config.api_key)

    async def generate_card_data(
        self,
        text: str,
        api_key: Optional[str] = None,
        system_prompt: Optional[str] = None
    ) -> CardData:
        """
        Generate structured card data for a Japanese word or sentence.

        Args:
            text: Trimmed Japanese input
            api_key: Per-request API key override
            system_prompt: Replaces the packaged system prompt

        Returns:
            Validated CardData

        Raises:
            ConfigError, UpstreamError, ParseError, ValidationError
        """
        prompt = USER_PROMPT_TEMPLATE.format(text=text)
        system = system_prompt or load_system_prompt()

        if api_key and api_key != self.config.api_key:
            # One-off provider for the override key
            provider = OpenAIProvider(dataclasses.replace(self.config, api_key=api_key))
            try:
                content = await provider.complete(prompt, system)
            finally:
                await provider.close()
        else:
            content = await self._get_provider().complete(prompt, system)

        logger.debug("LLM raw response for %r: %s", text, content)
        payload = validate_llm_payload(parse_llm_response(content))
        return CardData.from_dict(payload)
