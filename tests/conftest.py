"""Shared test fixtures."""

from __future__ import annotations

import json
import random
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from verdant.agents.registry import seed_default_agents
from verdant.config import Settings
from verdant.providers.base import TextProvider
from verdant.providers.registry import parse_backend
from verdant.services import Services
from verdant.storage.sql import SqlStore

ARTICLE_BODY = " ".join(
    ["Renewable energy lowers household bills and cuts emissions."] * 10
    + ["Solar panels pay back their cost within a decade in most climates."] * 5
)
ARTICLE_TEXT = f"# Renewable Energy at Home\n\n{ARTICLE_BODY}"

SEO_JSON = json.dumps(
    {
        "meta_title": "Renewable Energy at Home: A Practical Guide",
        "meta_description": "How renewable energy lowers bills and emissions at home.",
        "focus_keywords": ["renewable energy", "solar panels"],
        "headers": {"h1": "Renewable Energy at Home", "h2": ["Costs", "Payback"]},
        "internal_links": ["solar panel buying guide"],
        "image_alt_texts": ["Solar panels on a family home"],
        "schema_markup": "Article",
        "seo_score": 88,
        "recommendations": ["Add a comparison table"],
    }
)


class ScriptedProvider(TextProvider):
    """Text provider that answers from a queue; queued exceptions are raised."""

    name = "scripted"

    def __init__(self, default: str, responses: list | None = None) -> None:
        super().__init__("scripted-1", 1000, 0.7)
        self.default = default
        self.responses = list(responses or [])
        self.prompts: list[str] = []
        self.temperatures: list[float] = []

    def _complete(self, prompt: str, *, temperature: float) -> str:
        self.prompts.append(prompt)
        self.temperatures.append(temperature)
        if not self.responses:
            return self.default
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class FakeProviders:
    """Stands in for ProviderRegistry with preconfigured backends."""

    def __init__(self, text: dict[str, TextProvider], image=None, audio=None) -> None:
        self._text = {parse_backend(name): provider for name, provider in text.items()}
        self._image = image
        self._audio = audio

    def text(self, backend=None) -> TextProvider:
        return self._text[parse_backend(backend or "gemini")]

    def image(self):
        return self._image

    def audio(self):
        return self._audio


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Create test settings backed by a temporary sqlite file."""
    return Settings(
        store_backend="sql",
        db_path=tmp_path / "test.db",
        gemini_api_key="test-gemini-key",
        anthropic_api_key="test-key-not-real",
        openai_api_key="test-openai-key",
        minimax_api_key="test-minimax-key",
        minimax_group_id="group-1",
        default_text_provider="gemini",
        seo_text_provider="claude",
    )


@pytest.fixture
def store(settings: Settings) -> SqlStore:
    store = SqlStore(settings.db_path)
    seed_default_agents(store)
    return store


@pytest.fixture
def writer() -> ScriptedProvider:
    """Provider used by the content creation agent."""
    return ScriptedProvider(ARTICLE_TEXT)


@pytest.fixture
def seo_writer() -> ScriptedProvider:
    """Provider used by the SEO optimization agent."""
    return ScriptedProvider(SEO_JSON)


@pytest.fixture
def providers(writer: ScriptedProvider, seo_writer: ScriptedProvider) -> FakeProviders:
    return FakeProviders(
        {"gemini": writer, "claude": seo_writer},
        image=MagicMock(),
        audio=MagicMock(),
    )


@pytest.fixture
def services(settings: Settings, store: SqlStore, providers: FakeProviders) -> Services:
    return Services(settings, store=store, providers=providers, rng=random.Random(7))


def make_mock_response(text: str, input_tokens: int = 100, output_tokens: int = 200):
    """Helper to create a mock Anthropic API response."""
    mock_response = MagicMock()
    mock_response.content = [MagicMock(text=text)]
    mock_response.usage.input_tokens = input_tokens
    mock_response.usage.output_tokens = output_tokens
    return mock_response
