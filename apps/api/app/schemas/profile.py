"""Pydantic schemas for the caller's own profile."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class OrganizationSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    slug: str
    subscription_plan: str


class ProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID | None
    email: str | None
    first_name: str | None
    last_name: str | None
    phone: str | None
    avatar_url: str | None
    job_title: str | None
    department: str | None
    role: str
    preferences: dict | None
    created_at: datetime
    updated_at: datetime
    organization: OrganizationSummary | None = None


class ProfileUpdate(BaseModel):
    """Only these keys are writable by the user; everything else is ignored."""
    first_name: str | None = None
    last_name: str | None = None
    phone: str | None = None
    avatar_url: str | None = None
    job_title: str | None = None
    department: str | None = None
    preferences: dict | None = None
