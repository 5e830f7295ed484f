"""Workspace, membership, social account and brand guideline schemas."""
import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, computed_field, field_validator

from feedplanner.models.social_account import PLATFORM_LABELS, Platform
from feedplanner.models.workspace_member import WorkspaceRole


class WorkspaceCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    slug: str | None = Field(None, max_length=200)
    notes: str | None = None


class WorkspaceUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    slug: str | None = Field(None, max_length=200)
    notes: str | None = None


class WorkspaceActiveUpdate(BaseModel):
    is_active: bool


class WorkspaceResponse(BaseModel):
    id: uuid.UUID
    name: str
    slug: str
    notes: str | None = None
    is_active: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class MemberUpsert(BaseModel):
    user_id: uuid.UUID
    role: WorkspaceRole


class MemberResponse(BaseModel):
    workspace_id: uuid.UUID
    user_id: uuid.UUID
    role: WorkspaceRole
    assigned_at: datetime | None = None
    email: str | None = None
    name: str | None = None


class AccountCreate(BaseModel):
    platform: Platform
    handle: str = Field(min_length=1, max_length=200)
    assigned_manager_email: EmailStr | None = None
    collaborator_emails: list[EmailStr] = []

    @field_validator("handle")
    @classmethod
    def strip_at(cls, v: str) -> str:
        return v.strip().lstrip("@")


class AccountResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    platform: Platform
    handle: str
    assigned_manager_email: str | None = None
    collaborator_emails: list[str] = []

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def platform_label(self) -> str:
        return PLATFORM_LABELS[self.platform]


class BrandGuidelinesUpdate(BaseModel):
    business_description: str | None = None
    brand_mission: str | None = None
    target_audience: str | None = None
    content_pillars: list[str] = []
    tone_of_voice: str = "professional"
    style_keywords: list[str] = []
    primary_colors: list[str] = []
    fonts: str | None = None
    do_list: list[str] = []
    dont_list: list[str] = []
    hashtag_strategy: str | None = None
    posting_frequency: str | None = None
    competitor_accounts: list[str] = []
    inspiration_accounts: list[str] = []
    additional_notes: str | None = None


class BrandGuidelinesResponse(BrandGuidelinesUpdate):
    id: uuid.UUID
    workspace_id: uuid.UUID
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
