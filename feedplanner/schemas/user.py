"""Team administration schemas."""
import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from feedplanner.models.profile import GlobalRole
from feedplanner.models.workspace_member import WorkspaceRole


class UserCreate(BaseModel):
    """Invite a teammate or client, optionally straight into a workspace."""
    email: EmailStr
    password: str = Field(min_length=8)
    name: str = Field(min_length=1, max_length=100)
    role: GlobalRole = GlobalRole.USER
    workspace_id: uuid.UUID | None = None
    workspace_role: WorkspaceRole | None = None


class UserRoleUpdate(BaseModel):
    role: GlobalRole


class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    role: GlobalRole
    is_active: bool
    created_at: datetime | None = None
