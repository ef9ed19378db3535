"""Pydantic schemas for appeals and their activity trail."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.claim import ClaimRead


class AppealCreate(BaseModel):
    """Request to create an appeal. appeal_number is always generated."""
    claim_id: str = Field(..., min_length=1)
    denial_reason: str | None = None
    appeal_reason: str | None = None
    letter_content: str | None = None
    deadline_date: date | None = None
    status: str | None = None
    assigned_to: UUID | None = None
    ai_generated: bool = False
    ai_confidence_score: float | None = None
    ai_citations: list | None = None


class AppealUpdate(BaseModel):
    """Partial appeal update. Status changes go through the lifecycle rules."""
    denial_reason: str | None = None
    appeal_reason: str | None = None
    letter_content: str | None = None
    deadline_date: date | None = None
    status: str | None = None
    outcome: str | None = None
    outcome_amount: float | None = None
    outcome_date: date | None = None
    submitted_at: datetime | None = None
    assigned_to: UUID | None = None
    ai_generated: bool | None = None
    ai_confidence_score: float | None = None
    ai_citations: list | None = None


class AppealRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    claim_id: UUID
    appeal_number: str
    denial_reason: str | None
    appeal_reason: str | None
    letter_content: str | None
    deadline_date: date | None
    status: str
    outcome: str | None
    outcome_amount: float | None
    outcome_date: date | None
    submitted_at: datetime | None
    assigned_to: UUID | None
    ai_generated: bool
    ai_confidence_score: float | None
    ai_citations: list | None
    created_by: UUID | None
    created_at: datetime
    updated_at: datetime


class AppealActivityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    appeal_id: UUID
    user_id: UUID | None
    activity_type: str
    description: str | None
    details: dict | None
    created_at: datetime


class AppealListItem(AppealRead):
    claim: ClaimRead | None = None


class AppealDetail(AppealListItem):
    activities: list[AppealActivityRead] = Field(default_factory=list)


class AppealGenerateRequest(BaseModel):
    claim_id: str = Field(..., min_length=1)
    denial_reason: str | None = None
    additional_context: str | None = None


class AppealGenerateResponse(BaseModel):
    data: AppealRead
    ai_used: bool
    message: str
