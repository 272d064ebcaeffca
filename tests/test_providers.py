"""Tests for the generative provider backends and their registry."""

from __future__ import annotations

import json
from unittest.mock import MagicMock

import anthropic
import httpx
import openai
import pytest

from verdant.config import Settings
from verdant.errors import ConfigurationError, InvalidParameter, ProviderError, ProviderTimeout
from verdant.providers.base import (
    ArtifactKind,
    AudioSpec,
    ImageSpec,
    PromptSpec,
    TextSpec,
    build_text_prompt,
)
from verdant.providers.claude import ClaudeProvider
from verdant.providers.gemini import GEMINI_API_BASE, GeminiProvider
from verdant.providers.minimax import (
    MINIMAX_API_BASE,
    MinimaxAudioProvider,
    MinimaxImageProvider,
)
from verdant.providers.openai_chat import OpenAIProvider
from verdant.providers.registry import ProviderRegistry, parse_backend
from tests.conftest import make_mock_response


def _claude(settings: Settings) -> ClaudeProvider:
    provider = ClaudeProvider(settings)
    provider._client = MagicMock()
    return provider


def _mock_client(base_url: str, handler) -> httpx.Client:
    return httpx.Client(base_url=base_url, transport=httpx.MockTransport(handler))


# -- text specs ----------------------------------------------------------------


@pytest.mark.parametrize("words", [50, 20000, 99, 15001])
def test_word_count_outside_range_is_rejected(settings: Settings, words: int) -> None:
    provider = _claude(settings)

    with pytest.raises(InvalidParameter):
        provider.generate(TextSpec(topic="Solar", target_word_count=words))

    provider._client.messages.create.assert_not_called()


@pytest.mark.parametrize("words", [100, 1000, 15000])
def test_word_count_within_range_is_accepted(settings: Settings, words: int) -> None:
    provider = _claude(settings)
    provider._client.messages.create.return_value = make_mock_response("# Title\n\nbody")

    artifact = provider.generate(TextSpec(topic="Solar", target_word_count=words))

    assert artifact.text == "# Title\n\nbody"
    assert str(words) in provider._client.messages.create.call_args.kwargs["messages"][0]["content"]


def test_empty_topic_is_rejected(settings: Settings) -> None:
    provider = _claude(settings)
    with pytest.raises(InvalidParameter):
        provider.generate(TextSpec(topic="   "))


def test_prompt_mentions_request_fields() -> None:
    prompt = build_text_prompt(
        TextSpec(
            topic="Home composting",
            content_type="blog-post",
            target_audience="urban renters",
            tone="friendly",
            target_word_count=1200,
            seo_keywords=["compost", "zero waste"],
        )
    )
    assert "Home composting" in prompt
    assert "urban renters" in prompt
    assert "1200" in prompt
    assert "compost, zero waste" in prompt
    assert "conversational tone" in prompt


# -- Claude --------------------------------------------------------------------


def test_claude_generates_text_with_metadata(settings: Settings) -> None:
    provider = _claude(settings)
    provider._client.messages.create.return_value = make_mock_response(
        "# Title\n\nsome words here"
    )

    artifact = provider.generate(TextSpec(topic="Solar", target_word_count=1000))

    assert artifact.kind is ArtifactKind.TEXT
    assert artifact.provider == "claude"
    assert artifact.text == "# Title\n\nsome words here"
    assert artifact.metadata["model"] == settings.claude_model
    assert artifact.metadata["word_count"] == 5
    assert provider.usage_summary == {"total_input_tokens": 100, "total_output_tokens": 200}
    kwargs = provider._client.messages.create.call_args.kwargs
    assert kwargs["temperature"] == settings.temperature
    assert "Solar" in kwargs["messages"][0]["content"]


def test_claude_prompt_overrides_temperature(settings: Settings) -> None:
    provider = _claude(settings)
    provider._client.messages.create.return_value = make_mock_response("{}")

    provider.generate(PromptSpec(prompt="Analyze this", temperature=0.3))

    kwargs = provider._client.messages.create.call_args.kwargs
    assert kwargs["temperature"] == 0.3
    assert kwargs["messages"] == [{"role": "user", "content": "Analyze this"}]


def test_claude_status_error_maps_to_provider_error(settings: Settings) -> None:
    provider = _claude(settings)
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    provider._client.messages.create.side_effect = anthropic.RateLimitError(
        "rate limited",
        response=httpx.Response(429, request=request),
        body=None,
    )

    with pytest.raises(ProviderError) as excinfo:
        provider.generate(TextSpec(topic="Solar"))

    assert excinfo.value.provider == "claude"
    assert excinfo.value.status == 429
    # No retries
    assert provider._client.messages.create.call_count == 1


def test_claude_malformed_response_maps_to_provider_error(settings: Settings) -> None:
    provider = _claude(settings)
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    provider._client.messages.create.side_effect = anthropic.APIResponseValidationError(
        response=httpx.Response(200, request=request), body={"unexpected": True}
    )

    with pytest.raises(ProviderError) as excinfo:
        provider.generate(TextSpec(topic="Solar"))

    assert excinfo.value.provider == "claude"
    assert excinfo.value.status == 200


def test_claude_timeout_maps_to_provider_timeout(settings: Settings) -> None:
    provider = _claude(settings)
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    provider._client.messages.create.side_effect = anthropic.APITimeoutError(request=request)

    with pytest.raises(ProviderTimeout):
        provider.generate(TextSpec(topic="Solar"))


def test_claude_empty_response_is_provider_error(settings: Settings) -> None:
    provider = _claude(settings)
    response = make_mock_response("")
    response.content = []
    provider._client.messages.create.return_value = response

    with pytest.raises(ProviderError):
        provider.generate(TextSpec(topic="Solar"))


def test_claude_requires_api_key(settings: Settings) -> None:
    with pytest.raises(ConfigurationError):
        ClaudeProvider(settings.model_copy(update={"anthropic_api_key": ""}))


def test_claude_rejects_image_requests(settings: Settings) -> None:
    with pytest.raises(InvalidParameter):
        _claude(settings).generate(ImageSpec(prompt="a wind farm"))


# -- OpenAI --------------------------------------------------------------------


def test_openai_returns_first_choice(settings: Settings) -> None:
    provider = OpenAIProvider(settings)
    provider._client = MagicMock()
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = "An article about heat pumps."
    provider._client.chat.completions.create.return_value = response

    artifact = provider.generate(TextSpec(topic="Heat pumps"))

    assert artifact.text == "An article about heat pumps."
    assert artifact.provider == "openai"
    assert provider._client.chat.completions.create.call_args.kwargs["model"] == "gpt-4o"


def test_openai_malformed_response_maps_to_provider_error(settings: Settings) -> None:
    provider = OpenAIProvider(settings)
    provider._client = MagicMock()
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    provider._client.chat.completions.create.side_effect = openai.APIResponseValidationError(
        response=httpx.Response(200, request=request), body=None
    )

    with pytest.raises(ProviderError) as excinfo:
        provider.generate(TextSpec(topic="Heat pumps"))

    assert excinfo.value.provider == "openai"


# -- Gemini --------------------------------------------------------------------


def test_gemini_posts_generate_content(settings: Settings) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200, json={"candidates": [{"content": {"parts": [{"text": "Gemini article"}]}}]}
        )

    provider = GeminiProvider(settings, client=_mock_client(GEMINI_API_BASE, handler))
    artifact = provider.generate(TextSpec(topic="Wind power"))

    assert artifact.text == "Gemini article"
    request = seen[0]
    assert request.url.path.endswith("/models/gemini-1.5-flash:generateContent")
    assert request.url.params["key"] == "test-gemini-key"
    body = json.loads(request.content)
    assert body["generationConfig"]["maxOutputTokens"] == settings.max_tokens
    assert "Wind power" in body["contents"][0]["parts"][0]["text"]


def test_gemini_non_2xx_carries_status_and_body(settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="overloaded")

    provider = GeminiProvider(settings, client=_mock_client(GEMINI_API_BASE, handler))

    with pytest.raises(ProviderError) as excinfo:
        provider.generate(TextSpec(topic="Wind power"))

    assert excinfo.value.status == 503
    assert excinfo.value.raw_message == "overloaded"


def test_gemini_malformed_body_is_provider_error(settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"candidates": []})

    provider = GeminiProvider(settings, client=_mock_client(GEMINI_API_BASE, handler))

    with pytest.raises(ProviderError, match="Invalid response from Gemini API"):
        provider.generate(TextSpec(topic="Wind power"))


def test_gemini_timeout(settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    provider = GeminiProvider(settings, client=_mock_client(GEMINI_API_BASE, handler))

    with pytest.raises(ProviderTimeout) as excinfo:
        provider.generate(TextSpec(topic="Wind power"))
    assert excinfo.value.provider == "gemini"


# -- Minimax -------------------------------------------------------------------


def test_minimax_image_returns_url(settings: Settings) -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/image_generation"
        seen.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={"data": {"image_urls": ["https://cdn.example/img.png"]}, "base_resp": {"status_code": 0}},
        )

    provider = MinimaxImageProvider(settings, client=_mock_client(MINIMAX_API_BASE, handler))
    artifact = provider.generate(
        ImageSpec(prompt="wind turbines at dawn", style="watercolor", size="1024x768")
    )

    assert artifact.url == "https://cdn.example/img.png"
    assert artifact.metadata["width"] == 1024
    assert artifact.metadata["height"] == 768
    assert seen[0]["aspect_ratio"] == "4:3"
    assert "watercolor painting" in seen[0]["prompt"]


def test_minimax_error_in_base_resp(settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200, json={"base_resp": {"status_code": 1004, "status_msg": "auth failed"}}
        )

    provider = MinimaxImageProvider(settings, client=_mock_client(MINIMAX_API_BASE, handler))

    with pytest.raises(ProviderError) as excinfo:
        provider.generate(ImageSpec(prompt="a forest"))
    assert excinfo.value.status == 1004


@pytest.mark.parametrize(
    "spec",
    [
        ImageSpec(prompt=""),
        ImageSpec(prompt="ok", size="300x300"),
        ImageSpec(prompt="ok", quality="ultra"),
    ],
)
def test_minimax_image_validation(settings: Settings, spec: ImageSpec) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    provider = MinimaxImageProvider(settings, client=_mock_client(MINIMAX_API_BASE, handler))
    with pytest.raises(InvalidParameter):
        provider.generate(spec)


def test_minimax_audio_estimates_duration(settings: Settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/t2a_v2"
        return httpx.Response(200, json={"data": {"audio": "https://cdn.example/a.mp3"}})

    provider = MinimaxAudioProvider(settings, client=_mock_client(MINIMAX_API_BASE, handler))
    artifact = provider.generate(AudioSpec(text="x" * 301))

    assert artifact.url == "https://cdn.example/a.mp3"
    assert artifact.metadata["duration"] == 3


@pytest.mark.parametrize(
    "spec",
    [
        AudioSpec(text=" "),
        AudioSpec(text="x" * 5001),
        AudioSpec(text="hello", speed=3.0),
        AudioSpec(text="hello", format="flac"),
    ],
)
def test_minimax_audio_validation(settings: Settings, spec: AudioSpec) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    provider = MinimaxAudioProvider(settings, client=_mock_client(MINIMAX_API_BASE, handler))
    with pytest.raises(InvalidParameter):
        provider.generate(spec)


def test_minimax_requires_group_id(settings: Settings) -> None:
    with pytest.raises(ConfigurationError):
        MinimaxAudioProvider(settings.model_copy(update={"minimax_group_id": ""}))


# -- registry ------------------------------------------------------------------


def test_registry_builds_and_caches_backends(settings: Settings) -> None:
    registry = ProviderRegistry(settings)

    claude = registry.text("claude")

    assert isinstance(claude, ClaudeProvider)
    assert registry.text("claude") is claude
    assert isinstance(registry.text(), GeminiProvider)


def test_registry_reports_missing_credentials_on_use(settings: Settings) -> None:
    registry = ProviderRegistry(settings.model_copy(update={"openai_api_key": ""}))

    with pytest.raises(ConfigurationError):
        registry.text("openai")


def test_unknown_backend_is_invalid_parameter() -> None:
    with pytest.raises(InvalidParameter, match="gemini, claude, openai"):
        parse_backend("mistral")
