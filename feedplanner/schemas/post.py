"""Post request/response schemas."""
import uuid
from datetime import date, datetime, time

from pydantic import BaseModel, Field, computed_field, model_validator

from feedplanner.models.audit_log import AuditAction
from feedplanner.models.post import STATUS_LABELS, ApprovalStatus, AssetType, PostStatus
from feedplanner.models.social_account import Platform
from feedplanner.services.approval_workflow import ApprovalDisplay


class _AssetPair(BaseModel):
    @model_validator(mode="after")
    def check_parallel_assets(self):
        urls, types = getattr(self, "asset_urls", None), getattr(self, "asset_types", None)
        if (urls is None) != (types is None):
            raise ValueError("asset_urls and asset_types must be sent together")
        if urls is not None and len(urls) != len(types):
            raise ValueError("asset_urls and asset_types must have the same length")
        return self


class PostCreate(_AssetPair):
    """``workspace_id`` and ``platform`` are taken from the social account."""
    social_account_id: uuid.UUID
    scheduled_date: date | None = None
    scheduled_time: time | None = None
    caption: str = ""
    hashtags: str = ""
    first_comment: str = ""
    internal_notes: str | None = None
    client_notes: str | None = None
    asset_urls: list[str] = []
    asset_types: list[AssetType] = []
    order_index: int = 0


# NOT NULL columns: may be omitted from an update, never cleared with null
_NOT_NULL_FIELDS = ("caption", "hashtags", "first_comment", "asset_urls", "asset_types", "order_index")


class PostUpdate(_AssetPair):
    scheduled_date: date | None = None
    scheduled_time: time | None = None
    caption: str | None = None
    hashtags: str | None = None
    first_comment: str | None = None
    internal_notes: str | None = None
    client_notes: str | None = None
    asset_urls: list[str] | None = None
    asset_types: list[AssetType] | None = None
    order_index: int | None = Field(None, ge=0)

    @model_validator(mode="after")
    def reject_null_for_required_columns(self):
        cleared = [f for f in _NOT_NULL_FIELDS if f in self.model_fields_set and getattr(self, f) is None]
        if cleared:
            raise ValueError(f"{', '.join(cleared)} cannot be null")
        return self



class PostFilter(BaseModel):
    workspace_id: uuid.UUID | None = None
    social_account_id: uuid.UUID | None = None
    status: PostStatus | None = None
    date_from: date | None = None
    date_to: date | None = None
    page: int = 1
    per_page: int = 50


class StatusChangeRequest(BaseModel):
    to_status: PostStatus


class RequestChangesRequest(BaseModel):
    reason: str | None = Field(None, max_length=5000)


class PostResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    social_account_id: uuid.UUID
    platform: Platform
    scheduled_date: date | None = None
    scheduled_time: time | None = None
    caption: str
    hashtags: str
    first_comment: str
    internal_notes: str | None = None
    client_notes: str | None = None
    asset_urls: list[str]
    asset_types: list[AssetType]
    order_index: int
    status: PostStatus
    approval_status: ApprovalStatus | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    posted_by: str | None = None
    posted_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self.status]


class ApprovalStateResponse(BaseModel):
    post_id: uuid.UUID
    status: PostStatus
    approval_status: ApprovalStatus | None = None
    display: ApprovalDisplay
    allowed_status_targets: list[PostStatus]


class UploadUrlRequest(BaseModel):
    filename: str = Field(min_length=1, max_length=255)
    content_type: str  # MIME type


class UploadUrlResponse(BaseModel):
    upload_url: str
    storage_path: str
    public_url: str
    asset_type: AssetType


class AssetAddRequest(BaseModel):
    url: str = Field(min_length=1)
    content_type: str | None = None
    asset_type: AssetType | None = None


class AssetMoveRequest(BaseModel):
    from_index: int
    to_index: int


class AuditLogResponse(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    entity_type: str
    entity_id: uuid.UUID
    action: AuditAction
    actor_email: str | None = None
    actor_name: str | None = None
    details: dict | None = None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
