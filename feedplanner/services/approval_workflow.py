"""Post approval workflow state machine.

Every operation here is pure: it checks the actor's capability and the post's
current state, then either raises or returns a ``TransitionOutcome`` that
describes the field changes and the side records to write. Nothing is
mutated. ``post_service.apply_outcome`` persists an outcome with a write
conditional on ``expected_status`` / ``expected_approval_status``.
"""
import enum
import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from feedplanner.exceptions import AuthorizationDenied, PreconditionFailed
from feedplanner.models.audit_log import AuditAction
from feedplanner.models.post import ApprovalStatus, PostStatus
from feedplanner.schemas.identity import ActorFacts
from feedplanner.services.role_engine import AccessContext, EffectiveRole, can_approve
from feedplanner.utils.helpers import utc_now


# --- Transition rules (staff status changes) ---

STAFF_TRANSITIONS: dict[PostStatus, frozenset[PostStatus]] = {
    PostStatus.DRAFT: frozenset({PostStatus.INTERNAL_REVIEW, PostStatus.SENT_TO_CLIENT}),
    PostStatus.INTERNAL_REVIEW: frozenset({PostStatus.DRAFT, PostStatus.SENT_TO_CLIENT}),
    # sent_to_client -> sent_to_client is a resubmission after changes were requested
    PostStatus.SENT_TO_CLIENT: frozenset(
        {PostStatus.DRAFT, PostStatus.INTERNAL_REVIEW, PostStatus.SENT_TO_CLIENT}
    ),
    PostStatus.APPROVED: frozenset({PostStatus.READY_TO_POST}),
    PostStatus.READY_TO_POST: frozenset(),
    PostStatus.POSTED: frozenset(),
}

EDITABLE_STATUSES = frozenset(
    {PostStatus.DRAFT, PostStatus.INTERNAL_REVIEW, PostStatus.SENT_TO_CLIENT}
)
POSTABLE_STATUSES = frozenset({PostStatus.APPROVED, PostStatus.READY_TO_POST})
DECIDED_APPROVALS = frozenset({ApprovalStatus.APPROVED, ApprovalStatus.CHANGES_REQUESTED})


class AuditDraft(BaseModel):
    workspace_id: uuid.UUID
    entity_type: str = "post"
    entity_id: uuid.UUID
    action: AuditAction
    actor_id: uuid.UUID | None = None
    actor_email: str | None = None
    actor_name: str | None = None
    details: dict[str, Any] = {}

    model_config = {"frozen": True}


class CommentDraft(BaseModel):
    post_id: uuid.UUID
    workspace_id: uuid.UUID
    author_id: uuid.UUID | None = None
    author_email: str | None = None
    author_name: str | None = None
    content: str
    is_internal: bool = False

    model_config = {"frozen": True}


class TransitionOutcome(BaseModel):
    """A transition that passed every check, ready to be persisted."""

    post_id: uuid.UUID
    action: AuditAction
    changes: dict[str, Any]
    audit: AuditDraft
    comment: CommentDraft | None = None
    expected_status: PostStatus
    expected_approval_status: ApprovalStatus | None = None

    model_config = {"frozen": True}


class ApprovalDisplay(str, enum.Enum):
    APPROVED = "approved"
    POSTED = "posted"
    CHANGES_REQUESTED = "changes_requested"
    CONTROLS = "controls"
    HIDDEN = "hidden"


def _require_actor(access: AccessContext) -> ActorFacts:
    if access.facts.actor is None:
        raise AuthorizationDenied("Not signed in")
    return access.facts.actor


def _require_staff(access: AccessContext) -> ActorFacts:
    if not access.is_account_manager():
        raise AuthorizationDenied("Only account managers and admins can do this")
    return _require_actor(access)


def _require_approver(access: AccessContext) -> ActorFacts:
    if not access.can_approve():
        raise AuthorizationDenied("Only client approvers and admins can review posts")
    return _require_actor(access)


def _audit(post: Any, actor: ActorFacts, action: AuditAction, **details: Any) -> AuditDraft:
    return AuditDraft(
        workspace_id=post.workspace_id,
        entity_id=post.id,
        action=action,
        actor_id=actor.id,
        actor_email=actor.email,
        actor_name=actor.display_name,
        details=details,
    )


def ensure_editable(post: Any) -> None:
    """Direct field edits are only accepted before client approval."""
    if post.status not in EDITABLE_STATUSES:
        raise PreconditionFailed(f"Post in status '{post.status.value}' can no longer be edited")


def allowed_targets(post: Any, role: EffectiveRole) -> list[PostStatus]:
    """Statuses a staff member may move this post to via ``change_status``."""
    if role not in (EffectiveRole.ADMIN, EffectiveRole.ACCOUNT_MANAGER):
        return []
    targets = STAFF_TRANSITIONS.get(post.status, frozenset())
    result = []
    for status in PostStatus:
        if status not in targets:
            continue
        if (
            status == PostStatus.SENT_TO_CLIENT
            and post.status == PostStatus.SENT_TO_CLIENT
            and post.approval_status != ApprovalStatus.CHANGES_REQUESTED
        ):
            continue
        result.append(status)
    return result


def change_status(post: Any, target: PostStatus, access: AccessContext) -> TransitionOutcome:
    actor = _require_staff(access)
    if target not in allowed_targets(post, access.role):
        raise PreconditionFailed(
            f"Cannot move post from '{post.status.value}' to '{target.value}'"
        )

    changes: dict[str, Any] = {"status": target}
    if target == PostStatus.SENT_TO_CLIENT:
        changes["approval_status"] = ApprovalStatus.PENDING

    return TransitionOutcome(
        post_id=post.id,
        action=AuditAction.STATUS_CHANGED,
        changes=changes,
        audit=_audit(
            post, actor, AuditAction.STATUS_CHANGED,
            **{"from": post.status.value, "to": target.value},
        ),
        expected_status=post.status,
        expected_approval_status=post.approval_status,
    )


def _ensure_reviewable(post: Any) -> None:
    if post.status != PostStatus.SENT_TO_CLIENT:
        raise PreconditionFailed("Only posts sent to the client can be reviewed")
    if post.approval_status in DECIDED_APPROVALS:
        raise PreconditionFailed(
            f"Post already has approval status '{post.approval_status.value}'"
        )


def approve(post: Any, access: AccessContext, now: datetime | None = None) -> TransitionOutcome:
    actor = _require_approver(access)
    _ensure_reviewable(post)
    now = now or utc_now()

    return TransitionOutcome(
        post_id=post.id,
        action=AuditAction.APPROVED,
        changes={
            "status": PostStatus.APPROVED,
            "approval_status": ApprovalStatus.APPROVED,
            "approved_by": actor.email,
            "approved_at": now,
        },
        audit=_audit(post, actor, AuditAction.APPROVED, approved_at=now.isoformat()),
        expected_status=post.status,
        expected_approval_status=post.approval_status,
    )


def request_changes(post: Any, access: AccessContext, reason: str | None = None) -> TransitionOutcome:
    """Reject on behalf of the client. The post stays in ``sent_to_client``."""
    actor = _require_approver(access)
    _ensure_reviewable(post)
    reason = (reason or "").strip()

    comment = None
    if reason:
        comment = CommentDraft(
            post_id=post.id,
            workspace_id=post.workspace_id,
            author_id=actor.id,
            author_email=actor.email,
            author_name=actor.display_name,
            content=f"Changes requested: {reason}",
            is_internal=False,
        )

    return TransitionOutcome(
        post_id=post.id,
        action=AuditAction.REJECTED,
        changes={"approval_status": ApprovalStatus.CHANGES_REQUESTED},
        audit=_audit(post, actor, AuditAction.REJECTED, reason=reason or None),
        comment=comment,
        expected_status=post.status,
        expected_approval_status=post.approval_status,
    )


def mark_posted(post: Any, access: AccessContext, now: datetime | None = None) -> TransitionOutcome:
    actor = _require_staff(access)
    if post.status not in POSTABLE_STATUSES:
        raise PreconditionFailed("Only approved or ready-to-post posts can be marked as posted")
    now = now or utc_now()

    return TransitionOutcome(
        post_id=post.id,
        action=AuditAction.POSTED,
        changes={"status": PostStatus.POSTED, "posted_by": actor.email, "posted_at": now},
        audit=_audit(post, actor, AuditAction.POSTED, **{"from": post.status.value}),
        expected_status=post.status,
        expected_approval_status=post.approval_status,
    )


def approval_display(post: Any, role: EffectiveRole) -> ApprovalDisplay:
    """Which approval widget a role sees for a post.

    Decided approvals always render as a badge, never as controls.
    """
    if post.approval_status == ApprovalStatus.APPROVED:
        return ApprovalDisplay.APPROVED
    if post.status == PostStatus.POSTED:
        return ApprovalDisplay.POSTED
    if post.approval_status == ApprovalStatus.CHANGES_REQUESTED:
        return ApprovalDisplay.CHANGES_REQUESTED
    if post.status == PostStatus.SENT_TO_CLIENT and can_approve(role):
        return ApprovalDisplay.CONTROLS
    return ApprovalDisplay.HIDDEN
