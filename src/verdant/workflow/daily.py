"""Daily batch: a fixed number of create-then-optimize runs, one after another."""

from __future__ import annotations

import logging
import random
import time
from dataclasses import asdict, dataclass, field
from typing import Callable

from verdant.agents.registry import AgentProfile, AgentRegistry
from verdant.config import DEFAULT_NICHES
from verdant.content.creation import ContentCreationAgent
from verdant.content.seo import SeoOptimizationAgent
from verdant.errors import StoreError, VerdantError
from verdant.storage.base import Store, now_iso

logger = logging.getLogger(__name__)


@dataclass
class ArticleOutcome:
    article_number: int
    niche: str
    status: str  # success | failed
    timestamp: str
    content_id: int | str | None = None
    title: str | None = None
    word_count: int | None = None
    seo_optimized: bool = False
    error: str | None = None


@dataclass
class BatchReport:
    target_articles: int
    results: list[ArticleOutcome] = field(default_factory=list)
    execution_time_ms: int = 0

    @property
    def successful(self) -> int:
        return sum(1 for r in self.results if r.status == "success")

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if r.status == "failed")

    def to_dict(self) -> dict:
        return {
            "daily_generation_completed": True,
            "target_articles": self.target_articles,
            "successful_generations": self.successful,
            "failed_generations": self.failed,
            "generation_results": [asdict(r) for r in self.results],
            "execution_time_ms": self.execution_time_ms,
            "completion_timestamp": now_iso(),
        }


def _failed(number: int, niche: str, error: str) -> ArticleOutcome:
    return ArticleOutcome(
        article_number=number, niche=niche, status="failed", timestamp=now_iso(), error=error
    )


class DailyBatchRunner:
    """Runs ``articles_per_day`` iterations; one failure never stops the batch."""

    def __init__(
        self,
        store: Store,
        registry: AgentRegistry,
        profile: AgentProfile,
        content_agent: ContentCreationAgent,
        seo_agent: Callable[[], SeoOptimizationAgent],
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._profile = profile
        self._content_agent = content_agent
        self._seo_agent = seo_agent
        self._rng = rng or random.Random()

    def run_daily(self) -> BatchReport:
        start = time.monotonic()
        config = self._profile.config
        niches = config.target_niches or list(DEFAULT_NICHES)
        articles_per_day = config.articles_per_day or 3
        logger.info(
            "Daily run: %d articles across niches %s", articles_per_day, ", ".join(niches)
        )

        report = BatchReport(target_articles=articles_per_day)
        for number in range(1, articles_per_day + 1):
            niche = self._rng.choice(niches)
            report.results.append(self._run_one(number, articles_per_day, niche))

        report.execution_time_ms = int((time.monotonic() - start) * 1000)
        self._log_activity(report)
        try:
            self._registry.touch(self._profile)
        except StoreError:
            logger.exception("Failed to update agent last run time")

        logger.info(
            "Daily run finished in %dms: %d succeeded, %d failed",
            report.execution_time_ms, report.successful, report.failed,
        )
        return report

    def _run_one(self, number: int, total: int, niche: str) -> ArticleOutcome:
        logger.info("Generating article %d/%d for niche %r", number, total, niche)
        try:
            created = self._content_agent.create_content(niche, "article", approval_required=True)
        except VerdantError as exc:
            logger.error("Article %d generation failed: %s", number, exc)
            return _failed(number, niche, exc.message)
        except Exception as exc:
            logger.exception("Article %d generation failed", number)
            return _failed(number, niche, str(exc))

        seo_optimized = False
        try:
            self._seo_agent().optimize(created.content_id)
            seo_optimized = True
        except VerdantError as exc:
            logger.warning("SEO optimization failed for article %s: %s", created.content_id, exc)
        except Exception:
            logger.exception("SEO optimization failed for article %s", created.content_id)

        return ArticleOutcome(
            article_number=number,
            niche=niche,
            status="success",
            timestamp=now_iso(),
            content_id=created.content_id,
            title=created.title,
            word_count=created.word_count,
            seo_optimized=seo_optimized,
        )

    def _log_activity(self, report: BatchReport) -> None:
        try:
            self._store.insert(
                "agent_activities",
                {
                    "agent_id": self._profile.id,
                    "activity_type": "daily_content_generation",
                    "activity_data": {
                        "target_articles": report.target_articles,
                        "generated_articles": report.successful,
                        "failed_articles": report.failed,
                        "results": [asdict(r) for r in report.results],
                        "execution_time_ms": report.execution_time_ms,
                    },
                    "activity_status": "completed",
                },
            )
        except StoreError:
            logger.exception("Failed to log daily generation activity")
