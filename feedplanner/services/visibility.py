"""Visibility filters: narrow candidate collections to what a role may see.

Every filter is a pure projection. It keeps input order, never mutates the
candidates, and returns an empty list for roles with no access.
"""
import uuid
from collections.abc import Iterable
from typing import Any, TypeVar

from feedplanner.models.post import PostStatus
from feedplanner.schemas.identity import IdentityFacts
from feedplanner.services.role_engine import (
    EffectiveRole,
    client_workspace_id,
    is_account_manager,
    is_client,
)

T = TypeVar("T")


def filter_workspaces(candidates: Iterable[T], role: EffectiveRole, facts: IdentityFacts) -> list[T]:
    if role == EffectiveRole.ADMIN:
        return list(candidates)
    if role == EffectiveRole.ACCOUNT_MANAGER:
        owned = {a.workspace_id for a in facts.visible_accounts}
        return [w for w in candidates if w.id in owned]
    if is_client(role):
        workspace_id = client_workspace_id(facts)
        if workspace_id is None:
            return []
        return [w for w in candidates if w.id == workspace_id]
    return []


def filter_accounts(
    candidates: Iterable[T],
    role: EffectiveRole,
    facts: IdentityFacts,
    workspace_id: uuid.UUID | None = None,
) -> list[T]:
    """Admins see every account; everyone else sees exactly their visible accounts.

    ``workspace_id`` is an optional plain equality narrowing on top.
    """
    if role == EffectiveRole.ADMIN:
        visible = list(candidates)
    else:
        allowed = facts.visible_account_ids
        visible = [a for a in candidates if a.id in allowed]
    if workspace_id is not None:
        visible = [a for a in visible if a.workspace_id == workspace_id]
    return visible


def can_view_post(post: Any, role: EffectiveRole, facts: IdentityFacts) -> bool:
    if role == EffectiveRole.ADMIN:
        return True
    if is_account_manager(role):
        return post.social_account_id in facts.visible_account_ids
    if is_client(role):
        workspace_id = client_workspace_id(facts)
        return (
            workspace_id is not None
            and post.workspace_id == workspace_id
            and post.status != PostStatus.DRAFT
        )
    return False


def filter_posts(candidates: Iterable[T], role: EffectiveRole, facts: IdentityFacts) -> list[T]:
    return [p for p in candidates if can_view_post(p, role, facts)]


def filter_comments(candidates: Iterable[T], role: EffectiveRole, facts: IdentityFacts) -> list[T]:
    """Comments on a post the caller can already see.

    Clients only get client-facing comments; staff get everything.
    """
    if is_account_manager(role):
        return list(candidates)
    if is_client(role):
        return [c for c in candidates if not c.is_internal]
    return []
