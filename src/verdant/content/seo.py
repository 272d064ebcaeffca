"""SEO optimization agent: derive search metadata for a stored content item."""

from __future__ import annotations

import json
import logging
import re

from pydantic import BaseModel, Field, ValidationError, field_validator

from verdant.agents.registry import AgentProfile, AgentRegistry
from verdant.errors import ContentNotFound
from verdant.llm.prompts import render
from verdant.providers.base import PromptSpec, TextProvider
from verdant.storage.base import Store, eq, now_iso

logger = logging.getLogger(__name__)

META_TITLE_MAX = 60
META_DESCRIPTION_MAX = 160
MAX_FOCUS_KEYWORDS = 5

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.MULTILINE)


class SeoOptimization(BaseModel):
    """Shape the provider is asked to answer with."""

    meta_title: str
    meta_description: str
    focus_keywords: list[str] = Field(min_length=1)
    headers: dict = Field(default_factory=dict)
    internal_links: list[str] = Field(default_factory=list)
    image_alt_texts: list[str] = Field(default_factory=list)
    schema_markup: str | None = None
    seo_score: int = Field(ge=0, le=100)
    recommendations: list[str] = Field(default_factory=list)

    @field_validator("meta_title")
    @classmethod
    def _cap_title(cls, value: str) -> str:
        return value[:META_TITLE_MAX]

    @field_validator("meta_description")
    @classmethod
    def _cap_description(cls, value: str) -> str:
        return value[:META_DESCRIPTION_MAX]

    @field_validator("focus_keywords")
    @classmethod
    def _cap_keywords(cls, value: list[str]) -> list[str]:
        return [k for k in value if k.strip()][:MAX_FOCUS_KEYWORDS]


def fallback_optimization(title: str, niche: str, raw: str | None = None) -> dict:
    """Minimal, deterministic SEO data used when the provider's answer is unusable."""
    data = {
        "meta_title": title[:META_TITLE_MAX],
        "meta_description": f"Learn about {niche} with expert insights and practical tips.",
        "focus_keywords": [niche.lower()],
        "seo_score": 75,
        "recommendations": ["Content optimized by AI"],
    }
    if raw is not None:
        data["raw_optimization"] = raw
    return data


def parse_optimization(text: str, title: str, niche: str) -> dict:
    """Parse the provider's JSON answer, falling back instead of failing."""
    try:
        parsed = json.loads(_FENCE.sub("", text.strip()))
        return SeoOptimization.model_validate(parsed).model_dump()
    except (json.JSONDecodeError, ValidationError, TypeError):
        logger.warning("Unusable SEO response for %r; using fallback", title)
        return fallback_optimization(title, niche, raw=text)


def keyword_density(body: str, keywords: list[str]) -> float:
    """Sum over keywords of (case-insensitive substring count / body word count)."""
    word_count = len(body.split())
    if word_count == 0:
        return 0.0
    lowered = body.lower()
    return sum(lowered.count(k.lower()) / word_count for k in keywords if k)


class SeoOptimizationAgent:
    """Merges optimization fields into ``content_items.seo_data``."""

    def __init__(
        self,
        store: Store,
        provider: TextProvider,
        profile: AgentProfile,
        registry: AgentRegistry,
    ) -> None:
        self._store = store
        self._provider = provider
        self._profile = profile
        self._registry = registry

    def optimize(self, content_id: int | str) -> dict:
        """Optimize one content item. Safe to repeat; only SEO fields are rewritten."""
        item = self._store.get("content_items", content_id)
        if item is None:
            raise ContentNotFound(f"Content item {content_id} not found")

        seo_data = item.get("seo_data") or {}
        niche = seo_data.get("target_niche") or "general"
        body = item.get("content_body") or ""
        title = item.get("title") or ""

        prompt = render(
            "seo_analysis.j2",
            title=title,
            niche=niche,
            content_type=item.get("content_type", "article"),
            body=body,
        )
        artifact = self._provider.generate(PromptSpec(prompt=prompt, temperature=0.3))
        optimizations = parse_optimization(artifact.text or "", title, niche)
        density = keyword_density(body, optimizations["focus_keywords"])

        merged = {
            **seo_data,
            **optimizations,
            "keyword_density": density,
            "optimized_at": now_iso(),
            "optimization_agent": self._profile.name,
            "target_score": self._profile.config.target_score_threshold,
        }
        if "raw_optimization" not in optimizations:
            merged.pop("raw_optimization", None)

        self._store.update("content_items", eq("id", content_id), values={"seo_data": merged})
        self._registry.touch(self._profile)

        logger.info(
            "Optimized content %s: score %s, density %.4f",
            content_id, optimizations["seo_score"], density,
        )
        return {
            "content_id": content_id,
            "seo_optimizations": optimizations,
            "keyword_density": density,
            "optimization_timestamp": merged["optimized_at"],
        }
