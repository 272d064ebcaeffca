"""Text backend using the OpenAI chat completions API."""

from __future__ import annotations

from openai import (
    APIConnectionError,
    APIResponseValidationError,
    APIStatusError,
    APITimeoutError,
    OpenAI,
)

from verdant.config import Settings
from verdant.errors import ConfigurationError, ProviderError, ProviderTimeout
from verdant.providers.base import TextBackend, TextProvider


class OpenAIProvider(TextProvider):
    name = TextBackend.OPENAI.value

    def __init__(self, settings: Settings) -> None:
        if not settings.openai_api_key:
            raise ConfigurationError("OpenAI API key not configured")
        super().__init__(settings.openai_model, settings.max_tokens, settings.temperature)
        self._timeout = settings.provider_timeout
        self._client = OpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.provider_timeout,
            max_retries=0,
        )

    def _complete(self, prompt: str, *, temperature: float) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self._max_tokens,
                temperature=temperature,
            )
        except APITimeoutError as exc:
            raise ProviderTimeout(self.name, self._timeout) from exc
        except APIStatusError as exc:
            raise ProviderError(self.name, exc.status_code, exc.message) from exc
        except APIResponseValidationError as exc:
            raise ProviderError(self.name, exc.status_code, exc.message) from exc
        except APIConnectionError as exc:
            raise ProviderError(self.name, None, str(exc)) from exc

        if not response.choices or not response.choices[0].message.content:
            raise ProviderError(self.name, 200, "Invalid response from OpenAI API")
        return response.choices[0].message.content
