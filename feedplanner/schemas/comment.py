"""Post comment schemas."""
import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=5000)
    # Ignored for client roles
    is_internal: bool = False


class CommentResponse(BaseModel):
    id: uuid.UUID
    post_id: uuid.UUID
    workspace_id: uuid.UUID
    author_id: uuid.UUID | None = None
    author_email: str | None = None
    author_name: str | None = None
    content: str
    is_internal: bool
    is_resolved: bool
    created_at: datetime | None = None

    model_config = {"from_attributes": True}
