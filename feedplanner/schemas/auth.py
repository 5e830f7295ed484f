"""Auth request/response schemas."""
from uuid import UUID

from pydantic import BaseModel, EmailStr

from feedplanner.models.profile import GlobalRole
from feedplanner.schemas.identity import AccountFacts, MembershipFacts
from feedplanner.services.role_engine import EffectiveRole


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class MeResponse(BaseModel):
    """Who the caller is and what they may do."""
    id: UUID
    email: str
    display_name: str
    global_role: GlobalRole
    role: EffectiveRole
    capabilities: dict[str, bool]
    client_workspace_id: UUID | None = None
    memberships: list[MembershipFacts]
    visible_accounts: list[AccountFacts]
