"""Common capability shared by every generative backend."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum

from verdant.errors import InvalidParameter
from verdant.llm.prompts import render

MIN_WORD_COUNT = 100
MAX_WORD_COUNT = 15000


class ArtifactKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"


class TextBackend(str, Enum):
    GEMINI = "gemini"
    CLAUDE = "claude"
    OPENAI = "openai"


@dataclass
class TextSpec:
    """Structured request for a long-form piece of text."""

    topic: str
    content_type: str = "article"
    target_audience: str = "general"
    tone: str = "professional"
    target_word_count: int = 1000
    seo_keywords: list[str] = field(default_factory=list)
    sustainability_focus: bool = True
    include_images: bool = False

    kind = ArtifactKind.TEXT

    def validate(self) -> None:
        if not isinstance(self.topic, str) or not self.topic.strip():
            raise InvalidParameter("Valid topic is required for content generation")
        word_count = self.target_word_count
        if (
            isinstance(word_count, bool)
            or not isinstance(word_count, int)
            or not MIN_WORD_COUNT <= word_count <= MAX_WORD_COUNT
        ):
            raise InvalidParameter(
                f"Word count must be between {MIN_WORD_COUNT} and {MAX_WORD_COUNT}"
            )


@dataclass
class PromptSpec:
    """A fully written prompt, sent as-is."""

    prompt: str
    temperature: float | None = None

    kind = ArtifactKind.TEXT


@dataclass
class ImageSpec:
    prompt: str
    style: str | None = None
    size: str = "1024x1024"
    quality: str = "standard"

    kind = ArtifactKind.IMAGE


@dataclass
class AudioSpec:
    text: str
    voice_style: str = "professional"
    speed: float = 1.0
    format: str = "mp3"

    kind = ArtifactKind.AUDIO


@dataclass
class GeneratedArtifact:
    """Output of a provider call."""

    kind: ArtifactKind
    provider: str
    text: str | None = None
    url: str | None = None
    metadata: dict = field(default_factory=dict)


class GenerativeProvider(ABC):
    """One external generative API behind a uniform ``generate(spec)`` call."""

    name: str = ""
    kinds: frozenset[ArtifactKind] = frozenset()

    @abstractmethod
    def generate(self, spec) -> GeneratedArtifact:
        """Make exactly one outbound call and return the artifact."""
        ...

    def _check_kind(self, spec) -> None:
        kind = getattr(spec, "kind", None)
        if kind not in self.kinds:
            raise InvalidParameter(f"{self.name} cannot generate {getattr(kind, 'value', kind)}")


class TextProvider(GenerativeProvider):
    """Base for the interchangeable text backends.

    Subclasses only implement ``_complete``: the request/response shape and
    authentication of their API. Prompt construction lives here so every
    backend receives the same prompt for the same spec.
    """

    kinds = frozenset({ArtifactKind.TEXT})

    def __init__(self, model: str, max_tokens: int, temperature: float) -> None:
        self.model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    @abstractmethod
    def _complete(self, prompt: str, *, temperature: float) -> str:
        ...

    def generate(self, spec: TextSpec | PromptSpec) -> GeneratedArtifact:
        self._check_kind(spec)
        temperature = self._temperature
        if isinstance(spec, TextSpec):
            spec.validate()
            prompt = build_text_prompt(spec)
        else:
            prompt = spec.prompt
            if spec.temperature is not None:
                temperature = spec.temperature

        start = time.time()
        text = self._complete(prompt, temperature=temperature)
        return GeneratedArtifact(
            kind=ArtifactKind.TEXT,
            provider=self.name,
            text=text,
            metadata={
                "model": self.model,
                "word_count": len(text.split()),
                "generation_time_seconds": round(time.time() - start, 2),
            },
        )


CONTENT_TYPE_INSTRUCTIONS = {
    "article": (
        "Write an informative, well-structured article with clear headings, "
        "subheadings, and comprehensive coverage of the topic."
    ),
    "blog-post": (
        "Write an engaging blog post with a conversational tone, personal insights, "
        "and actionable takeaways for readers."
    ),
    "product-review": (
        "Write a detailed product review with pros and cons, technical specifications, "
        "user experience insights, and a final recommendation."
    ),
}


def build_text_prompt(spec: TextSpec) -> str:
    """Render the generation prompt for a text spec."""
    instructions = CONTENT_TYPE_INSTRUCTIONS.get(
        spec.content_type, CONTENT_TYPE_INSTRUCTIONS["article"]
    )
    return render(
        "text_generation.j2",
        topic=spec.topic,
        content_type=spec.content_type,
        instructions=instructions,
        audience=spec.target_audience,
        tone=spec.tone,
        word_count=spec.target_word_count,
        seo_keywords=spec.seo_keywords,
        sustainability_focus=spec.sustainability_focus,
        include_images=spec.include_images,
    )
