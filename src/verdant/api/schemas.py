"""Request bodies accepted by the HTTP functions (camelCase on the wire)."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class GenerateContentBody(_Body):
    niche: str
    content_type: str = Field("article", alias="contentType")
    run_seo_optimization: bool = Field(True, alias="runSeoOptimization")


class CreateContentBody(_Body):
    niche: str
    content_type: str = Field("article", alias="contentType")
    approval_required: bool = Field(True, alias="approvalRequired")


class OptimizeBody(_Body):
    content_id: int | str = Field(alias="contentId")


class ApproveBody(_Body):
    workflow_id: int | str | None = Field(None, alias="workflowId")
    review_notes: str = Field("", alias="reviewNotes")


class RejectBody(_Body):
    workflow_id: int | str | None = Field(None, alias="workflowId")
    rejection_reason: str = Field("", alias="rejectionReason")


class ProgramBody(_Body):
    action: str | None = None
    program_id: int | str | None = None
