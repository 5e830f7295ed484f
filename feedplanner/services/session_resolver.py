"""Resolve the identity facts of the current actor.

Each lookup degrades on its own: a failed profile, membership or account
fetch is logged and replaced by its least-privilege default, so partial
data can narrow access but never widen it.
"""
import logging
import uuid
from collections.abc import Iterable

from sqlalchemy import String, cast, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from feedplanner.models.profile import GlobalRole, Profile
from feedplanner.models.social_account import SocialAccount
from feedplanner.models.user import User
from feedplanner.models.workspace_member import WorkspaceMember
from feedplanner.schemas.identity import AccountFacts, ActorFacts, IdentityFacts, MembershipFacts

logger = logging.getLogger(__name__)


def select_visible_accounts(
    email: str, global_role: GlobalRole, accounts: Iterable[AccountFacts]
) -> tuple[AccountFacts, ...]:
    """Admins see every account. Others see accounts they manage or collaborate on.

    The result is de-duplicated by id and keeps first-seen order.
    """
    seen: set[uuid.UUID] = set()
    visible: list[AccountFacts] = []
    needle = email.lower()
    for account in accounts:
        if account.id in seen:
            continue
        if global_role != GlobalRole.ADMIN:
            manager = (account.assigned_manager_email or "").lower()
            collaborators = {e.lower() for e in account.collaborator_emails}
            if manager != needle and needle not in collaborators:
                continue
        seen.add(account.id)
        visible.append(account)
    return tuple(visible)


async def _degrade(db: AsyncSession, what: str, actor_id: uuid.UUID, exc: Exception) -> None:
    logger.warning("Identity lookup '%s' failed for actor %s: %s", what, actor_id, exc)
    await db.rollback()


async def _load_profile(db: AsyncSession, actor_id: uuid.UUID) -> tuple[GlobalRole, str | None]:
    try:
        profile = await db.get(Profile, actor_id)
    except SQLAlchemyError as exc:
        await _degrade(db, "profile", actor_id, exc)
        return GlobalRole.USER, None
    if profile is None:
        return GlobalRole.USER, None
    return profile.role, profile.full_name


async def _load_memberships(db: AsyncSession, actor_id: uuid.UUID) -> tuple[MembershipFacts, ...]:
    try:
        result = await db.execute(
            select(WorkspaceMember)
            .where(WorkspaceMember.user_id == actor_id)
            .order_by(WorkspaceMember.assigned_at, WorkspaceMember.workspace_id)
        )
        rows = result.scalars().all()
    except SQLAlchemyError as exc:
        await _degrade(db, "memberships", actor_id, exc)
        return ()
    return tuple(MembershipFacts.model_validate(m) for m in rows)


async def _load_accounts(
    db: AsyncSession, actor_id: uuid.UUID, email: str, global_role: GlobalRole
) -> tuple[AccountFacts, ...]:
    query = select(SocialAccount).order_by(SocialAccount.created_at, SocialAccount.id)
    if global_role != GlobalRole.ADMIN:
        # Coarse SQL narrowing; select_visible_accounts makes the exact match
        needle = email.lower()
        query = query.where(or_(
            func.lower(SocialAccount.assigned_manager_email) == needle,
            cast(SocialAccount.collaborator_emails, String).ilike(f'%"{needle}"%'),
        ))
    try:
        result = await db.execute(query)
        rows = result.scalars().all()
    except SQLAlchemyError as exc:
        await _degrade(db, "accounts", actor_id, exc)
        return ()
    return select_visible_accounts(email, global_role, (AccountFacts.model_validate(a) for a in rows))


async def resolve_identity(db: AsyncSession, actor_id: uuid.UUID | None) -> IdentityFacts:
    """Build a fresh identity snapshot for ``actor_id``.

    Unknown, inactive or missing actors resolve to ``IdentityFacts.anonymous()``.
    """
    if actor_id is None:
        return IdentityFacts.anonymous()

    try:
        user = await db.get(User, actor_id)
    except SQLAlchemyError as exc:
        await _degrade(db, "actor", actor_id, exc)
        return IdentityFacts.anonymous()
    if user is None or not user.is_active:
        return IdentityFacts.anonymous()

    email, name = user.email, user.name
    global_role, profile_name = await _load_profile(db, actor_id)
    memberships = await _load_memberships(db, actor_id)
    accounts = await _load_accounts(db, actor_id, email, global_role)

    return IdentityFacts(
        actor=ActorFacts(id=actor_id, email=email, display_name=profile_name or name),
        global_role=global_role,
        memberships=memberships,
        visible_accounts=accounts,
    )
