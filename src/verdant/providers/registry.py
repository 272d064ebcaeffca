"""Explicit mapping from backend names to provider classes."""

from __future__ import annotations

from verdant.config import Settings
from verdant.errors import InvalidParameter
from verdant.providers.base import TextBackend, TextProvider
from verdant.providers.claude import ClaudeProvider
from verdant.providers.gemini import GeminiProvider
from verdant.providers.minimax import MinimaxAudioProvider, MinimaxImageProvider
from verdant.providers.openai_chat import OpenAIProvider

TEXT_PROVIDERS: dict[TextBackend, type[TextProvider]] = {
    TextBackend.GEMINI: GeminiProvider,
    TextBackend.CLAUDE: ClaudeProvider,
    TextBackend.OPENAI: OpenAIProvider,
}


def parse_backend(name: str | TextBackend) -> TextBackend:
    try:
        return TextBackend(name)
    except ValueError:
        choices = ", ".join(b.value for b in TextBackend)
        raise InvalidParameter(f"Invalid AI provider. Must be one of: {choices}") from None


class ProviderRegistry:
    """Builds providers on first use and keeps them for the process lifetime.

    Construction is where missing credentials surface, so a backend that is
    never selected never needs a key.
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings
        self._text: dict[TextBackend, TextProvider] = {}
        self._image: MinimaxImageProvider | None = None
        self._audio: MinimaxAudioProvider | None = None

    def text(self, backend: str | TextBackend | None = None) -> TextProvider:
        key = parse_backend(backend or self._settings.default_text_provider)
        if key not in self._text:
            self._text[key] = TEXT_PROVIDERS[key](self._settings)
        return self._text[key]

    def image(self) -> MinimaxImageProvider:
        if self._image is None:
            self._image = MinimaxImageProvider(self._settings)
        return self._image

    def audio(self) -> MinimaxAudioProvider:
        if self._audio is None:
            self._audio = MinimaxAudioProvider(self._settings)
        return self._audio
