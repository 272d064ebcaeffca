"""Chains content creation, SEO optimization and task logging into one run."""

from __future__ import annotations

import logging
import random
from typing import Callable

from verdant.agents.registry import AgentRegistry, AgentRole
from verdant.content.creation import ContentCreationAgent
from verdant.content.seo import SeoOptimizationAgent
from verdant.errors import NoNichesConfigured, VerdantError
from verdant.storage.base import Store, neq, now_iso

logger = logging.getLogger(__name__)

WORKFLOW_STEPS = ["content_creation", "seo_optimization", "approval_pending"]


class Orchestrator:
    def __init__(
        self,
        store: Store,
        registry: AgentRegistry,
        content_agent: Callable[[], ContentCreationAgent],
        seo_agent: Callable[[], SeoOptimizationAgent],
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._registry = registry
        self._content_agent = content_agent
        self._seo_agent = seo_agent
        self._rng = rng or random.Random()

    def generate_content(
        self, niche: str, content_type: str = "article", run_seo_optimization: bool = True
    ) -> dict:
        """Create one item, optionally optimize it, and log the run.

        Creation failures propagate. SEO failures are recorded in the task
        log and the response but leave the created item in place.
        """
        started_at = now_iso()
        created = self._content_agent().create_content(niche, content_type, approval_required=True)

        seo_result = None
        seo_error = None
        if run_seo_optimization:
            try:
                seo_result = self._seo_agent().optimize(created.content_id)
            except VerdantError as exc:
                seo_error = exc.message
                logger.warning("SEO optimization failed for %s: %s", created.content_id, exc)
            except Exception as exc:
                seo_error = str(exc)
                logger.exception("SEO optimization failed for %s", created.content_id)

        orchestrator = self._registry.find(AgentRole.ORCHESTRATOR)
        task = self._store.insert(
            "agent_task_queue",
            {
                "agent_id": orchestrator.id if orchestrator else None,
                "task_type": "content_generation_workflow",
                "task_payload": {
                    "content_id": created.content_id,
                    "niche": niche,
                    "content_type": content_type,
                    "seo_optimized": seo_result is not None,
                    "seo_error": seo_error,
                    "workflow_steps": WORKFLOW_STEPS,
                },
                "status": "completed",
                "started_at": started_at,
                "completed_at": now_iso(),
            },
        )[0]

        return {
            "content_id": created.content_id,
            "content_details": created.to_dict(),
            "seo_optimization": seo_result,
            "seo_error": seo_error,
            "task_id": task["id"],
            "workflow_status": "completed",
            "next_step": "manual_approval_required",
        }

    def status(self) -> dict:
        agents = self._store.select("agents")
        pending_tasks = self._store.select("agent_task_queue", neq("status", "completed"))
        recent_sessions = self._store.select(
            "content_generation_sessions", order="created_at", descending=True, limit=5
        )
        return {
            "total_agents": len(agents),
            "active_agents": sum(1 for a in agents if a.get("status") == "active"),
            "pending_tasks": len(pending_tasks),
            "recent_generations": len(recent_sessions),
            "last_activity": now_iso(),
            "system_health": "operational",
        }

    def trigger_weekly_content(self) -> dict:
        niches = self._registry.get(AgentRole.CONTENT_CREATION).config.target_niches
        if not niches:
            raise NoNichesConfigured("No target niches configured")

        niche = self._rng.choice(niches)
        logger.info("Weekly content run selected niche %r", niche)
        return {
            "message": "Weekly content generation triggered",
            "selected_niche": niche,
            "generation_result": self.generate_content(niche, "article", True),
        }
