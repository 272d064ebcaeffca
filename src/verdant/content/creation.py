"""Content creation agent: generate an article and persist it for review."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from verdant.agents.registry import AgentProfile, AgentRegistry
from verdant.errors import ContentGenerationFailed, ProviderError
from verdant.providers.base import TextProvider, TextSpec
from verdant.storage.base import Store, eq
from verdant.workflow.transaction import paired_write

logger = logging.getLogger(__name__)


@dataclass
class CreatedContent:
    content_id: int | str
    title: str
    word_count: int
    status: str
    workflow_id: int | str | None = None

    def to_dict(self) -> dict:
        return {
            "content_id": self.content_id,
            "title": self.title,
            "word_count": self.word_count,
            "status": self.status,
            "workflow_id": self.workflow_id,
        }


def split_title(text: str, fallback: str) -> tuple[str, str]:
    """First line is the title (Markdown heading marks removed), the rest is the body."""
    lines = text.strip().split("\n")
    title = lines[0].lstrip("# ").strip() if lines else ""
    body = "\n".join(lines[1:]).strip()
    if not title:
        return fallback, body
    return title, body


class ContentCreationAgent:
    """Generates one content item per call and stores it with its approval record."""

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

    def build_spec(self, niche: str, content_type: str) -> TextSpec:
        config = self._profile.config
        return TextSpec(
            topic=f"{niche}: a practical guide for {config.target_audience}",
            content_type=content_type,
            target_audience=config.target_audience,
            tone=config.tone,
            target_word_count=config.target_word_count,
            seo_keywords=[niche.lower()],
            sustainability_focus=True,
        )

    def create_content(
        self, niche: str, content_type: str = "article", approval_required: bool = True
    ) -> CreatedContent:
        spec = self.build_spec(niche, content_type)
        try:
            artifact = self._provider.generate(spec)
        except ProviderError as exc:
            raise ContentGenerationFailed(
                f"Content creation failed: {exc.message}", cause=exc
            ) from exc

        title, body = split_title(artifact.text or "", fallback=niche)
        word_count = len(body.split())
        status = "pending_approval" if approval_required else "draft"
        row = {
            "title": title,
            "content_body": body,
            "content_type": content_type,
            "author": self._profile.name,
            "status": status,
            "seo_data": {"target_niche": niche},
            "engagement_metrics": {"word_count": word_count},
        }

        if approval_required:
            # Content item first, then its workflow record; a failed workflow
            # insert removes the item again.
            item, workflow = paired_write(
                self._store,
                lambda: self._store.insert("content_items", row)[0],
                lambda created: self._store.insert(
                    "content_approval_workflow",
                    {"content_item_id": created["id"], "status": "pending_approval"},
                )[0],
                lambda created: self._store.delete("content_items", eq("id", created["id"])),
            )
            workflow_id = workflow["id"]
        else:
            item = self._store.insert("content_items", row)[0]
            workflow_id = None
        self._registry.touch(self._profile)

        logger.info(
            "Created %s %s (%d words) for niche %r via %s",
            content_type, item["id"], word_count, niche, artifact.provider,
        )
        return CreatedContent(
            content_id=item["id"],
            title=title,
            word_count=word_count,
            status=status,
            workflow_id=workflow_id,
        )
