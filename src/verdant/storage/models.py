"""SQLModel tables mirroring the hosted store's schema for the local backend."""

from __future__ import annotations

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from verdant.storage.base import now_iso


class Agent(SQLModel, table=True):
    __tablename__ = "agents"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    status: str = "active"  # active | inactive
    config: dict = Field(default_factory=dict, sa_column=Column(JSON))
    last_run: str | None = None
    created_at: str = Field(default_factory=now_iso)


class AgentTask(SQLModel, table=True):
    """Audit record of one orchestrated run."""

    __tablename__ = "agent_task_queue"

    id: int | None = Field(default=None, primary_key=True)
    agent_id: int | None = None
    task_type: str
    task_payload: dict = Field(default_factory=dict, sa_column=Column(JSON))
    status: str = "pending"  # pending | completed | failed
    started_at: str | None = None
    completed_at: str | None = None


class AgentActivity(SQLModel, table=True):
    __tablename__ = "agent_activities"

    id: int | None = Field(default=None, primary_key=True)
    agent_id: int | None = None
    activity_type: str
    activity_data: dict = Field(default_factory=dict, sa_column=Column(JSON))
    activity_status: str = "completed"
    created_at: str = Field(default_factory=now_iso)


class ContentItem(SQLModel, table=True):
    __tablename__ = "content_items"

    id: int | None = Field(default=None, primary_key=True)
    title: str
    content_body: str
    content_type: str
    author: str = ""
    status: str = "draft"  # draft | pending_approval | approved | published | rejected
    seo_data: dict = Field(default_factory=dict, sa_column=Column(JSON))
    engagement_metrics: dict = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: str = Field(default_factory=now_iso)
    published_at: str | None = None


class ApprovalWorkflow(SQLModel, table=True):
    __tablename__ = "content_approval_workflow"

    id: int | None = Field(default=None, primary_key=True)
    content_item_id: int = Field(index=True)
    status: str = "pending_approval"  # pending_approval | approved | rejected
    approved_by: str | None = None
    approved_at: str | None = None
    review_notes: str | None = None
    rejection_reason: str | None = None
    actual_completion: str | None = None
    created_at: str = Field(default_factory=now_iso)


class AwinProgram(SQLModel, table=True):
    __tablename__ = "awin_programs"

    id: int | None = Field(default=None, primary_key=True)
    program_id: int = Field(index=True)
    program_name: str | None = None
    merchant_name: str | None = None
    description: str | None = None
    status: str | None = None
    application_status: str | None = None
    rejection_reason: str | None = None
    niche_relevance_score: float = 0.0
    priority_score: int | None = None
    primary_region_name: str | None = None
    primary_sector: str | None = None
    logo_url: str | None = None
    display_url: str | None = None
    click_through_url: str | None = None
    commission_rate: str | None = None
    currency_code: str | None = None
    renewable_energy_match: bool = False
    sustainable_living_match: bool = False
    energy_efficiency_match: bool = False
    electric_vehicle_match: bool = False
    green_building_match: bool = False
    water_conservation_match: bool = False
    is_active: bool = True
    join_date: str | None = None
    last_applied_date: str | None = None
    updated_at: str | None = None


class GenerationLog(SQLModel, table=True):
    __tablename__ = "ai_generation_logs"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str | None = None
    content_type: str
    prompt: str
    style: str = ""
    parameters: dict = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: str = Field(default_factory=now_iso)


class GenerationSession(SQLModel, table=True):
    __tablename__ = "content_generation_sessions"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str | None = None
    session_data: dict = Field(default_factory=dict, sa_column=Column(JSON))
    created_at: str = Field(default_factory=now_iso)


TABLES: dict[str, type[SQLModel]] = {
    model.__tablename__: model
    for model in (
        Agent,
        AgentTask,
        AgentActivity,
        ContentItem,
        ApprovalWorkflow,
        AwinProgram,
        GenerationLog,
        GenerationSession,
    )
}
