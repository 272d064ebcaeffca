"""Agent profiles, loaded once from the ``agents`` table and handed to components."""

from __future__ import annotations

import logging
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from verdant.config import DEFAULT_NICHES
from verdant.errors import AgentNotFound
from verdant.storage.base import Store, eq, now_iso

logger = logging.getLogger(__name__)


class AgentRole(str, Enum):
    """Stable identifiers for the agent rows; the value is the row's ``name``."""

    CONTENT_CREATION = "Content Creation Agent"
    SEO_OPTIMIZATION = "SEO Optimization Agent"
    ORCHESTRATOR = "Agent Orchestrator"


class AgentConfig(BaseModel):
    """The ``config`` JSON column. Unknown keys are kept."""

    model_config = ConfigDict(extra="allow")

    target_niches: list[str] = Field(default_factory=list)
    articles_per_day: int = 3
    target_score_threshold: int = 85
    target_word_count: int = 1500
    target_audience: str = "eco-conscious consumers"
    tone: str = "informative"
    text_provider: str | None = None


class AgentProfile(BaseModel):
    id: int | str
    name: str
    status: str = "active"
    config: AgentConfig = Field(default_factory=AgentConfig)
    last_run: str | None = None


class AgentRegistry:
    """Snapshot of the configured agents, keyed by role."""

    def __init__(self, store: Store, profiles: dict[AgentRole, AgentProfile]) -> None:
        self._store = store
        self._profiles = profiles

    @classmethod
    def load(cls, store: Store) -> AgentRegistry:
        by_name = {role.value: role for role in AgentRole}
        profiles: dict[AgentRole, AgentProfile] = {}
        for row in store.select("agents"):
            role = by_name.get(row.get("name"))
            if role is not None and role not in profiles:
                profiles[role] = AgentProfile.model_validate(
                    {**row, "config": row.get("config") or {}}
                )
        return cls(store, profiles)

    def get(self, role: AgentRole) -> AgentProfile:
        try:
            return self._profiles[role]
        except KeyError:
            raise AgentNotFound(f"{role.value} not found") from None

    def find(self, role: AgentRole) -> AgentProfile | None:
        return self._profiles.get(role)

    def touch(self, profile: AgentProfile) -> None:
        """Stamp ``last_run`` on the agent row."""
        profile.last_run = now_iso()
        self._store.update("agents", eq("id", profile.id), values={"last_run": profile.last_run})


DEFAULT_AGENT_CONFIGS: dict[AgentRole, dict] = {
    AgentRole.CONTENT_CREATION: {
        "target_niches": list(DEFAULT_NICHES),
        "articles_per_day": 3,
        "target_word_count": 1500,
    },
    AgentRole.SEO_OPTIMIZATION: {"target_score_threshold": 85},
    AgentRole.ORCHESTRATOR: {},
}


def seed_default_agents(store: Store) -> list[AgentRole]:
    """Insert any missing agent rows. Returns the roles that were created."""
    existing = {row.get("name") for row in store.select("agents")}
    created = []
    for role, config in DEFAULT_AGENT_CONFIGS.items():
        if role.value in existing:
            continue
        store.insert("agents", {"name": role.value, "status": "active", "config": config})
        created.append(role)
        logger.info("Seeded agent %r", role.value)
    return created
