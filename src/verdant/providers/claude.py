"""Text backend wrapping the Anthropic Claude SDK."""

from __future__ import annotations

from anthropic import (
    Anthropic,
    APIConnectionError,
    APIResponseValidationError,
    APIStatusError,
    APITimeoutError,
)

from verdant.config import Settings
from verdant.errors import ConfigurationError, ProviderError, ProviderTimeout
from verdant.providers.base import TextBackend, TextProvider


class ClaudeProvider(TextProvider):
    """Thin wrapper providing error mapping and token tracking."""

    name = TextBackend.CLAUDE.value

    def __init__(self, settings: Settings) -> None:
        if not settings.anthropic_api_key:
            raise ConfigurationError("Claude API key not configured")
        super().__init__(settings.claude_model, settings.max_tokens, settings.temperature)
        self._timeout = settings.provider_timeout
        # Provider calls are never retried; surface the first failure
        self._client = Anthropic(
            api_key=settings.anthropic_api_key,
            timeout=settings.provider_timeout,
            max_retries=0,
        )
        self._total_input_tokens = 0
        self._total_output_tokens = 0

    def _complete(self, prompt: str, *, temperature: float) -> str:
        try:
            response = self._client.messages.create(
                model=self.model,
                max_tokens=self._max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": prompt}],
            )
        except APITimeoutError as exc:
            raise ProviderTimeout(self.name, self._timeout) from exc
        except APIStatusError as exc:
            raise ProviderError(self.name, exc.status_code, exc.message) from exc
        except APIResponseValidationError as exc:
            raise ProviderError(self.name, exc.status_code, exc.message) from exc
        except APIConnectionError as exc:
            raise ProviderError(self.name, None, str(exc)) from exc

        if not response.content or not getattr(response.content[0], "text", None):
            raise ProviderError(self.name, 200, "Invalid response from Claude API")

        self._total_input_tokens += response.usage.input_tokens
        self._total_output_tokens += response.usage.output_tokens
        return response.content[0].text

    @property
    def usage_summary(self) -> dict:
        return {
            "total_input_tokens": self._total_input_tokens,
            "total_output_tokens": self._total_output_tokens,
        }
