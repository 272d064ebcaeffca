"""Wiring: builds stores, providers and agents from settings."""

from __future__ import annotations

import random

from verdant.agents.registry import AgentRegistry, AgentRole
from verdant.config import Settings
from verdant.content.creation import ContentCreationAgent
from verdant.content.seo import SeoOptimizationAgent
from verdant.content.studio import GenerationStudio
from verdant.errors import ConfigurationError
from verdant.programs.catalog import ProgramCatalog
from verdant.providers.registry import ProviderRegistry
from verdant.storage.base import Store
from verdant.workflow.approval import ApprovalWorkflow
from verdant.workflow.daily import DailyBatchRunner
from verdant.workflow.orchestrator import Orchestrator


def build_store(settings: Settings) -> Store:
    if settings.store_backend == "sql":
        from verdant.storage.sql import SqlStore

        return SqlStore(settings.db_path)
    if settings.store_backend == "rest":
        from verdant.storage.rest import RestStore

        return RestStore(
            settings.supabase_url,
            settings.supabase_service_role_key,
            timeout=settings.provider_timeout,
        )
    raise ConfigurationError(f"Unknown store backend: {settings.store_backend}")


class Services:
    """Long-lived store and providers; agents are built per call from a fresh
    registry snapshot so configuration edits apply on the next run."""

    def __init__(
        self,
        settings: Settings,
        store: Store | None = None,
        providers: ProviderRegistry | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings
        self.store = store or build_store(settings)
        self.providers = providers or ProviderRegistry(settings)
        self._rng = rng

    def registry(self) -> AgentRegistry:
        return AgentRegistry.load(self.store)

    def content_agent(self, registry: AgentRegistry | None = None) -> ContentCreationAgent:
        registry = registry or self.registry()
        profile = registry.get(AgentRole.CONTENT_CREATION)
        provider = self.providers.text(
            profile.config.text_provider or self.settings.default_text_provider
        )
        return ContentCreationAgent(self.store, provider, profile, registry)

    def seo_agent(self, registry: AgentRegistry | None = None) -> SeoOptimizationAgent:
        registry = registry or self.registry()
        profile = registry.get(AgentRole.SEO_OPTIMIZATION)
        provider = self.providers.text(
            profile.config.text_provider or self.settings.seo_text_provider
        )
        return SeoOptimizationAgent(self.store, provider, profile, registry)

    def orchestrator(self) -> Orchestrator:
        registry = self.registry()
        return Orchestrator(
            self.store,
            registry,
            lambda: self.content_agent(registry),
            lambda: self.seo_agent(registry),
            rng=self._rng,
        )

    def daily_runner(self) -> DailyBatchRunner:
        registry = self.registry()
        return DailyBatchRunner(
            self.store,
            registry,
            registry.get(AgentRole.CONTENT_CREATION),
            self.content_agent(registry),
            lambda: self.seo_agent(registry),
            rng=self._rng,
        )

    def approvals(self) -> ApprovalWorkflow:
        return ApprovalWorkflow(self.store)

    def studio(self) -> GenerationStudio:
        return GenerationStudio(self.store, self.providers)

    def programs(self) -> ProgramCatalog:
        return ProgramCatalog(self.store)

    def close(self) -> None:
        self.store.close()
