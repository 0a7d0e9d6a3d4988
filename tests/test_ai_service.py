"""LLM response handling and the AI service wrapper."""

import asyncio
import json

import pytest

from jpanki.errors import ConfigError, ParseError, UpstreamError, ValidationError
from jpanki.models import CardData, Tense
from jpanki.services import AIService, OpenAIProvider
from jpanki.services.ai_service import AIConfig, parse_llm_response, validate_llm_payload

from conftest import FakeProvider, FakeResponse, FakeSession, make_payload


def test_parse_plain_json():
    payload = parse_llm_response('{"tense": "past"}')
    assert payload == {"tense": "past"}


def test_parse_fenced_json():
    content = "```json\n" + json.dumps(make_payload("食べる"), ensure_ascii=False) + "\n```"
    payload = parse_llm_response(content)
    assert payload["polite_jp"] == "食べるます"


def test_parse_error_keeps_raw_response():
    with pytest.raises(ParseError) as excinfo:
        parse_llm_response("Sorry, I cannot help with that.")
    assert excinfo.value.raw_response == "Sorry, I cannot help with that."


def test_parse_rejects_non_object():
    with pytest.raises(ValidationError):
        parse_llm_response("[1, 2, 3]")


def test_validate_names_every_missing_key():
    payload = make_payload("食べる")
    del payload["notes"]
    del payload["casual_kana"]

    with pytest.raises(ValidationError) as excinfo:
        validate_llm_payload(payload)

    message = str(excinfo.value)
    assert "notes" in message
    assert "casual_kana" in message


def test_validate_rejects_unknown_tense():
    payload = make_payload("食べる")
    payload["tense"] = "pluperfect"

    with pytest.raises(ValidationError, match="Invalid tense"):
        validate_llm_payload(payload)


def test_openai_provider_requires_key_before_network():
    provider = OpenAIProvider(AIConfig(api_key=None))

    with pytest.raises(ConfigError):
        asyncio.run(provider.complete("hello"))
    assert provider._session is None


def test_generate_card_data_uses_default_prompts():
    provider = FakeProvider()
    service = AIService(AIConfig(api_key="test-key"), provider=provider)

    card = asyncio.run(service.generate_card_data("食べる"))

    assert isinstance(card, CardData)
    assert card.tense is Tense.PRESENT
    assert card.has_polite_and_casual is True
    assert provider.calls[0]["prompt"] == "Generate data for this Japanese input: 食べる"
    assert "img_prompt_casual" in provider.calls[0]["system_prompt"]


def test_generate_card_data_system_prompt_override():
    provider = FakeProvider()
    service = AIService(AIConfig(api_key="test-key"), provider=provider)

    asyncio.run(service.generate_card_data("食べる", system_prompt="Custom prompt"))

    assert provider.calls[0]["system_prompt"] == "Custom prompt"


def test_generate_card_data_propagates_upstream_errors():
    provider = FakeProvider(fail_on={"食べる"})
    service = AIService(AIConfig(api_key="test-key"), provider=provider)

    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(service.generate_card_data("食べる"))
    assert excinfo.value.status == 500


def test_generate_card_data_nulls_casual_fields_without_casual_form():
    provider = FakeProvider(casual=False)
    service = AIService(AIConfig(api_key="test-key"), provider=provider)

    card = asyncio.run(service.generate_card_data("ありがとう"))

    data = card.to_dict()
    assert data["casual_jp"] is None
    assert data["img_prompt_casual"] is None


def test_generate_card_data_invalid_json():
    provider = FakeProvider(raw="not json at all")
    service = AIService(AIConfig(api_key="test-key"), provider=provider)

    with pytest.raises(ParseError):
        asyncio.run(service.generate_card_data("食べる"))


def test_openai_provider_non_json_body_is_upstream_error():
    provider = OpenAIProvider(AIConfig(api_key="sk-test"))
    provider._session = FakeSession(FakeResponse(json.JSONDecodeError("Expecting value", "<html>", 0)))

    with pytest.raises(UpstreamError, match="invalid JSON"):
        asyncio.run(provider.complete("hello"))


def test_openai_provider_unexpected_envelope_is_upstream_error():
    provider = OpenAIProvider(AIConfig(api_key="sk-test"))
    provider._session = FakeSession(FakeResponse(["not", "an", "object"]))

    with pytest.raises(UpstreamError, match="no completion content"):
        asyncio.run(provider.complete("hello"))
