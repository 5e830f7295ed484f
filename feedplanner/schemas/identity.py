"""Identity facts: the immutable per-request snapshot every access decision reads.

A fresh ``IdentityFacts`` is resolved for each request and never mutated;
collections are tuples so the snapshot cannot be edited in place.
"""
import uuid
from datetime import datetime

from pydantic import BaseModel

from feedplanner.models.profile import GlobalRole
from feedplanner.models.social_account import Platform
from feedplanner.models.workspace_member import WorkspaceRole


class ActorFacts(BaseModel):
    id: uuid.UUID
    email: str
    display_name: str

    model_config = {"frozen": True, "from_attributes": True}


class MembershipFacts(BaseModel):
    workspace_id: uuid.UUID
    role: WorkspaceRole
    assigned_at: datetime | None = None

    model_config = {"frozen": True, "from_attributes": True}


class AccountFacts(BaseModel):
    id: uuid.UUID
    workspace_id: uuid.UUID
    platform: Platform
    handle: str
    assigned_manager_email: str | None = None
    collaborator_emails: tuple[str, ...] = ()

    model_config = {"frozen": True, "from_attributes": True}


class IdentityFacts(BaseModel):
    actor: ActorFacts | None = None
    global_role: GlobalRole = GlobalRole.USER
    memberships: tuple[MembershipFacts, ...] = ()
    visible_accounts: tuple[AccountFacts, ...] = ()

    model_config = {"frozen": True}

    @classmethod
    def anonymous(cls) -> "IdentityFacts":
        """The logged-out state: no actor, least privilege everywhere."""
        return cls()

    @property
    def visible_account_ids(self) -> frozenset[uuid.UUID]:
        return frozenset(a.id for a in self.visible_accounts)
