"""Human approval gate for generated content.

``pending_approval`` is the only state a decision can be applied to; both
``approved`` and ``rejected`` are terminal and a second decision raises
``InvalidStateTransition``. Approving publishes the linked content item,
rejecting marks it rejected. Each decision writes the workflow row first
and the content item second (see ``paired_write``). The pending check and
both writes run inside one ``Store.atomic`` block.
"""

from __future__ import annotations

import logging

from verdant.errors import InvalidParameter, InvalidStateTransition, WorkflowNotFound
from verdant.storage.base import Store, eq, in_, now_iso
from verdant.workflow.transaction import paired_write

logger = logging.getLogger(__name__)

PENDING = "pending_approval"
APPROVED = "approved"
REJECTED = "rejected"

# Workflow fields a decision overwrites; restored when the content update fails
_DECISION_FIELDS = (
    "status",
    "approved_by",
    "approved_at",
    "review_notes",
    "rejection_reason",
    "actual_completion",
)


def content_summary(item: dict) -> dict:
    return {
        "id": item.get("id"),
        "title": item.get("title"),
        "content_type": item.get("content_type"),
        "status": item.get("status"),
        "author": item.get("author"),
        "created_at": item.get("created_at"),
        "word_count": (item.get("engagement_metrics") or {}).get("word_count", 0),
        "target_niche": (item.get("seo_data") or {}).get("target_niche", "unknown"),
    }


class ApprovalWorkflow:
    def __init__(self, store: Store) -> None:
        self._store = store

    def list_pending(self) -> list[dict]:
        """Pending workflow rows, each with a summary of its content item."""
        pending = self._store.select(
            "content_approval_workflow", eq("status", PENDING), order="id"
        )
        if not pending:
            return []

        ids = sorted({row["content_item_id"] for row in pending}, key=str)
        items = {
            item["id"]: item
            for item in self._store.select("content_items", in_("id", ids))
        }
        return [
            {**row, "content": content_summary(items.get(row["content_item_id"], {}))}
            for row in pending
        ]

    def approve(
        self, workflow_id: int | str, reviewer_id: str | None = None, notes: str = ""
    ) -> dict:
        now = now_iso()
        workflow = self._decide(
            workflow_id,
            APPROVED,
            {
                "status": APPROVED,
                "approved_by": reviewer_id,
                "approved_at": now,
                "review_notes": notes,
                "actual_completion": now,
            },
            {"status": "published", "published_at": now},
        )
        logger.info("Workflow %s approved; content %s published", workflow_id, workflow["content_item_id"])
        return {
            "workflow_id": workflow_id,
            "content_id": workflow["content_item_id"],
            "status": APPROVED,
            "content_status": "published",
            "approved_at": now,
        }

    def reject(
        self, workflow_id: int | str, reviewer_id: str | None = None, reason: str = ""
    ) -> dict:
        now = now_iso()
        workflow = self._decide(
            workflow_id,
            REJECTED,
            {
                "status": REJECTED,
                "approved_by": reviewer_id,
                "approved_at": now,
                "rejection_reason": reason,
                "actual_completion": now,
            },
            {"status": REJECTED},
        )
        logger.info("Workflow %s rejected; content %s rejected", workflow_id, workflow["content_item_id"])
        return {
            "workflow_id": workflow_id,
            "content_id": workflow["content_item_id"],
            "status": REJECTED,
            "rejection_reason": reason,
            "rejected_at": now,
        }

    def _pending(self, workflow_id: int | str, target: str) -> dict:
        workflow = self._store.get("content_approval_workflow", workflow_id)
        if workflow is None:
            raise WorkflowNotFound(f"Workflow item {workflow_id} not found")
        if workflow["status"] != PENDING:
            raise InvalidStateTransition(
                f"Workflow {workflow_id} is already {workflow['status']}; cannot mark {target}"
            )
        return workflow

    def _decide(
        self, workflow_id: int | str, target: str, workflow_values: dict, content_values: dict
    ) -> dict:
        """Apply a decision to a pending workflow and its content item.

        The workflow update only matches a row that is still pending, so a
        decision made elsewhere after the read below leaves nothing to update
        and raises ``InvalidStateTransition`` before the content item is touched.
        """
        if workflow_id in (None, ""):
            raise InvalidParameter("Workflow ID is required")

        with self._store.atomic():
            workflow = self._pending(workflow_id, target)
            previous = {field: workflow.get(field) for field in _DECISION_FIELDS}

            def claim() -> list[dict]:
                claimed = self._store.update(
                    "content_approval_workflow",
                    eq("id", workflow["id"]),
                    eq("status", PENDING),
                    values=workflow_values,
                )
                if not claimed:
                    raise InvalidStateTransition(
                        f"Workflow {workflow_id} is no longer pending; cannot mark {target}"
                    )
                return claimed

            paired_write(
                self._store,
                claim,
                lambda _: self._store.update(
                    "content_items", eq("id", workflow["content_item_id"]), values=content_values
                ),
                lambda _: self._store.update(
                    "content_approval_workflow", eq("id", workflow["id"]), values=previous
                ),
            )
        return workflow
