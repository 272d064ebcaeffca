"""Text backend calling the Gemini generateContent REST endpoint."""

from __future__ import annotations

import httpx

from verdant.config import Settings
from verdant.errors import ConfigurationError, ProviderError
from verdant.providers.base import TextBackend, TextProvider
from verdant.providers.http import post_json

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


class GeminiProvider(TextProvider):
    name = TextBackend.GEMINI.value

    def __init__(self, settings: Settings, *, client: httpx.Client | None = None) -> None:
        if not settings.gemini_api_key:
            raise ConfigurationError("Gemini API key not configured")
        super().__init__(settings.gemini_model, settings.max_tokens, settings.temperature)
        self._api_key = settings.gemini_api_key
        self._timeout = settings.provider_timeout
        self._client = client or httpx.Client(
            base_url=GEMINI_API_BASE,
            headers={"Content-Type": "application/json"},
            timeout=settings.provider_timeout,
        )

    def _complete(self, prompt: str, *, temperature: float) -> str:
        data = post_json(
            self._client,
            self.name,
            f"/models/{self.model}:generateContent",
            {
                "contents": [{"parts": [{"text": prompt}]}],
                "generationConfig": {
                    "temperature": temperature,
                    "maxOutputTokens": self._max_tokens,
                },
            },
            params={"key": self._api_key},
            timeout=self._timeout,
        )
        try:
            return data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ProviderError(self.name, 200, "Invalid response from Gemini API") from exc
