"""Effective role derivation and capability predicates.

The role is never stored. It is derived from an ``IdentityFacts`` snapshot
with a fixed priority order; the first matching rule wins:

1. global role ``admin``                -> admin
2. at least one visible social account  -> account_manager
3. any ``client_approver`` membership   -> client_approver
4. any ``client_viewer`` membership     -> client_viewer
5. otherwise                            -> viewer
"""
import enum
import uuid

from pydantic import BaseModel

from feedplanner.models.profile import GlobalRole
from feedplanner.models.workspace_member import WorkspaceRole
from feedplanner.schemas.identity import IdentityFacts


class EffectiveRole(str, enum.Enum):
    ADMIN = "admin"
    ACCOUNT_MANAGER = "account_manager"
    CLIENT_APPROVER = "client_approver"
    CLIENT_VIEWER = "client_viewer"
    VIEWER = "viewer"


STAFF_ROLES = frozenset({EffectiveRole.ADMIN, EffectiveRole.ACCOUNT_MANAGER})
CLIENT_ROLES = frozenset({EffectiveRole.CLIENT_VIEWER, EffectiveRole.CLIENT_APPROVER})
APPROVER_ROLES = frozenset({EffectiveRole.CLIENT_APPROVER, EffectiveRole.ADMIN})


def derive_role(facts: IdentityFacts) -> EffectiveRole:
    if facts.actor is None:
        return EffectiveRole.VIEWER
    if facts.global_role == GlobalRole.ADMIN:
        return EffectiveRole.ADMIN
    if facts.visible_accounts:
        return EffectiveRole.ACCOUNT_MANAGER
    membership_roles = {m.role for m in facts.memberships}
    if WorkspaceRole.CLIENT_APPROVER in membership_roles:
        return EffectiveRole.CLIENT_APPROVER
    if WorkspaceRole.CLIENT_VIEWER in membership_roles:
        return EffectiveRole.CLIENT_VIEWER
    return EffectiveRole.VIEWER


def is_admin(role: EffectiveRole) -> bool:
    return role == EffectiveRole.ADMIN


def is_account_manager(role: EffectiveRole) -> bool:
    """True for account managers and admins."""
    return role in STAFF_ROLES


def is_client(role: EffectiveRole) -> bool:
    return role in CLIENT_ROLES


def can_approve(role: EffectiveRole) -> bool:
    return role in APPROVER_ROLES


def client_workspace_id(facts: IdentityFacts) -> uuid.UUID | None:
    """Workspace of the actor's first client membership, if any.

    Memberships arrive ordered by ``(assigned_at, workspace_id)``, so "first"
    is stable across requests.
    """
    for membership in facts.memberships:
        if membership.role in (WorkspaceRole.CLIENT_VIEWER, WorkspaceRole.CLIENT_APPROVER):
            return membership.workspace_id
    return None


class AccessContext(BaseModel):
    """Identity facts bundled with the role derived from them."""

    facts: IdentityFacts
    role: EffectiveRole

    model_config = {"frozen": True}

    @classmethod
    def from_facts(cls, facts: IdentityFacts) -> "AccessContext":
        return cls(facts=facts, role=derive_role(facts))

    def is_admin(self) -> bool:
        return is_admin(self.role)

    def is_account_manager(self) -> bool:
        return is_account_manager(self.role)

    def is_client(self) -> bool:
        return is_client(self.role)

    def can_approve(self) -> bool:
        return can_approve(self.role)

    def client_workspace_id(self) -> uuid.UUID | None:
        return client_workspace_id(self.facts) if self.is_client() else None

    def has_access_to_workspace(self, workspace_id: uuid.UUID) -> bool:
        if self.is_admin():
            return True
        if self.is_account_manager():
            return any(a.workspace_id == workspace_id for a in self.facts.visible_accounts)
        if self.is_client():
            return self.client_workspace_id() == workspace_id
        return False

    def capabilities(self) -> dict[str, bool]:
        return {
            "is_admin": self.is_admin(),
            "is_account_manager": self.is_account_manager(),
            "is_client": self.is_client(),
            "can_approve": self.can_approve(),
        }
