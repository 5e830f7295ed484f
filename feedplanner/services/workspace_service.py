"""Workspace, membership, social account and brand guideline management."""
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from feedplanner.exceptions import AuthorizationDenied, NotFound, PreconditionFailed
from feedplanner.models.brand_guidelines import BrandGuidelines
from feedplanner.models.social_account import SocialAccount
from feedplanner.models.user import User
from feedplanner.models.workspace import Workspace
from feedplanner.models.workspace_member import WorkspaceMember, WorkspaceRole
from feedplanner.schemas.workspace import (
    AccountCreate,
    BrandGuidelinesUpdate,
    MemberResponse,
    WorkspaceCreate,
    WorkspaceUpdate,
)
from feedplanner.services.role_engine import AccessContext
from feedplanner.services.visibility import filter_accounts, filter_workspaces
from feedplanner.utils.helpers import slugify, utc_now

logger = logging.getLogger(__name__)


def _require_admin(access: AccessContext) -> None:
    if not access.is_admin():
        raise AuthorizationDenied("Only admins can manage workspaces")


# --- Workspaces ---

async def list_workspaces(
    db: AsyncSession, access: AccessContext, include_archived: bool = True
) -> list[Workspace]:
    query = select(Workspace).order_by(Workspace.name, Workspace.id)
    if not include_archived:
        query = query.where(Workspace.is_active.is_(True))
    result = await db.execute(query)
    return filter_workspaces(result.scalars().all(), access.role, access.facts)


async def get_visible_workspace(db: AsyncSession, access: AccessContext, workspace_id: uuid.UUID) -> Workspace:
    workspace = await db.get(Workspace, workspace_id)
    if workspace is None or not access.has_access_to_workspace(workspace_id):
        raise NotFound("Workspace not found")
    return workspace


async def _ensure_slug_free(db: AsyncSession, slug: str, exclude_id: uuid.UUID | None = None) -> str:
    if not slug:
        raise ValueError("Workspace slug cannot be empty")
    query = select(Workspace.id).where(Workspace.slug == slug)
    if exclude_id is not None:
        query = query.where(Workspace.id != exclude_id)
    if (await db.execute(query)).first() is not None:
        raise PreconditionFailed(f"Slug '{slug}' is already in use")
    return slug


async def create_workspace(db: AsyncSession, access: AccessContext, data: WorkspaceCreate) -> Workspace:
    _require_admin(access)
    slug = await _ensure_slug_free(db, slugify(data.slug or data.name))
    workspace = Workspace(name=data.name.strip(), slug=slug, notes=data.notes, is_active=True)
    db.add(workspace)
    await db.flush()
    await db.refresh(workspace)
    logger.info("Workspace created: %s (%s)", workspace.slug, workspace.id)
    return workspace


async def update_workspace(
    db: AsyncSession, access: AccessContext, workspace: Workspace, data: WorkspaceUpdate
) -> Workspace:
    _require_admin(access)
    update_data = data.model_dump(exclude_unset=True)
    if update_data.get("slug"):
        update_data["slug"] = await _ensure_slug_free(db, slugify(update_data["slug"]), workspace.id)
    else:
        update_data.pop("slug", None)
    for key, value in update_data.items():
        setattr(workspace, key, value)
    await db.flush()
    await db.refresh(workspace)
    return workspace


async def set_workspace_active(
    db: AsyncSession, access: AccessContext, workspace: Workspace, is_active: bool
) -> Workspace:
    """Archive or restore a workspace. Archived workspaces keep their data."""
    _require_admin(access)
    workspace.is_active = is_active
    await db.flush()
    await db.refresh(workspace)
    return workspace


# --- Members ---

async def list_members(db: AsyncSession, access: AccessContext, workspace: Workspace) -> list[MemberResponse]:
    if not access.is_account_manager():
        raise AuthorizationDenied("Only account managers and admins can view members")
    result = await db.execute(
        select(WorkspaceMember, User)
        .join(User, User.id == WorkspaceMember.user_id)
        .where(WorkspaceMember.workspace_id == workspace.id)
        .order_by(WorkspaceMember.assigned_at, User.email)
    )
    return [
        MemberResponse(
            workspace_id=member.workspace_id,
            user_id=member.user_id,
            role=member.role,
            assigned_at=member.assigned_at,
            email=user.email,
            name=user.name,
        )
        for member, user in result.all()
    ]


async def _find_member(
    db: AsyncSession, workspace_id: uuid.UUID, user_id: uuid.UUID
) -> WorkspaceMember | None:
    result = await db.execute(
        select(WorkspaceMember).where(
            WorkspaceMember.workspace_id == workspace_id, WorkspaceMember.user_id == user_id
        )
    )
    return result.scalar_one_or_none()


async def upsert_member(
    db: AsyncSession, access: AccessContext, workspace: Workspace, user_id: uuid.UUID, role: WorkspaceRole
) -> WorkspaceMember:
    """At most one membership per (workspace, user): an existing row gets the new role."""
    _require_admin(access)
    workspace_id = workspace.id
    if await db.get(User, user_id) is None:
        raise NotFound("User not found")

    member = await _find_member(db, workspace_id, user_id)
    if member is None:
        member = WorkspaceMember(
            workspace_id=workspace_id, user_id=user_id, role=role, assigned_at=utc_now()
        )
        db.add(member)
        try:
            await db.flush()
        except IntegrityError:
            # A concurrent request inserted the same membership first
            await db.rollback()
            logger.info("Membership %s/%s was inserted concurrently, updating role", workspace_id, user_id)
            member = await _find_member(db, workspace_id, user_id)
            if member is None:
                raise
            member.role = role
            await db.flush()
    else:
        member.role = role
        await db.flush()
    await db.refresh(member)
    return member


async def remove_member(
    db: AsyncSession, access: AccessContext, workspace: Workspace, user_id: uuid.UUID
) -> None:
    _require_admin(access)
    member = await _find_member(db, workspace.id, user_id)
    if member is None:
        raise NotFound("Membership not found")
    await db.delete(member)
    await db.flush()


# --- Social accounts ---

async def list_accounts(
    db: AsyncSession, access: AccessContext, workspace_id: uuid.UUID | None = None
) -> list[SocialAccount]:
    query = select(SocialAccount).order_by(SocialAccount.created_at, SocialAccount.id)
    if not access.is_admin():
        query = query.where(SocialAccount.id.in_(list(access.facts.visible_account_ids)))
    result = await db.execute(query)
    return filter_accounts(result.scalars().all(), access.role, access.facts, workspace_id)


async def create_account(
    db: AsyncSession, access: AccessContext, workspace: Workspace, data: AccountCreate
) -> SocialAccount:
    _require_admin(access)
    account = SocialAccount(
        workspace_id=workspace.id,
        platform=data.platform,
        handle=data.handle,
        assigned_manager_email=data.assigned_manager_email.lower() if data.assigned_manager_email else None,
        collaborator_emails=sorted({e.lower() for e in data.collaborator_emails}),
    )
    db.add(account)
    await db.flush()
    await db.refresh(account)
    return account


async def delete_account(
    db: AsyncSession, access: AccessContext, workspace: Workspace, account_id: uuid.UUID
) -> None:
    _require_admin(access)
    account = await db.get(SocialAccount, account_id)
    if account is None or account.workspace_id != workspace.id:
        raise NotFound("Social account not found")
    await db.delete(account)
    await db.flush()


# --- Brand guidelines ---

async def get_brand_guidelines(db: AsyncSession, workspace: Workspace) -> BrandGuidelines | None:
    result = await db.execute(
        select(BrandGuidelines).where(BrandGuidelines.workspace_id == workspace.id)
    )
    return result.scalar_one_or_none()


async def save_brand_guidelines(
    db: AsyncSession, access: AccessContext, workspace: Workspace, data: BrandGuidelinesUpdate
) -> BrandGuidelines:
    if not access.is_account_manager():
        raise AuthorizationDenied("Only account managers and admins can edit brand guidelines")
    guidelines = await get_brand_guidelines(db, workspace)
    if guidelines is None:
        guidelines = BrandGuidelines(workspace_id=workspace.id)
        db.add(guidelines)
    for key, value in data.model_dump().items():
        setattr(guidelines, key, value)
    await db.flush()
    await db.refresh(guidelines)
    return guidelines
