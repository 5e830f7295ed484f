"""Team administration: list users, set global roles, invite users."""
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from feedplanner.exceptions import AuthorizationDenied, NotFound, PreconditionFailed
from feedplanner.models.profile import GlobalRole, Profile
from feedplanner.models.user import User
from feedplanner.models.workspace import Workspace
from feedplanner.models.workspace_member import WorkspaceMember
from feedplanner.schemas.user import UserCreate, UserResponse
from feedplanner.services.auth_service import hash_password
from feedplanner.services.role_engine import AccessContext
from feedplanner.utils.helpers import utc_now


def _require_admin(access: AccessContext) -> None:
    if not access.is_admin():
        raise AuthorizationDenied("Only admins can manage the team")


def _to_response(user: User, profile: Profile | None) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=(profile.full_name if profile and profile.full_name else user.name),
        role=profile.role if profile else GlobalRole.USER,
        is_active=user.is_active,
        created_at=user.created_at,
    )


async def list_users(db: AsyncSession, access: AccessContext) -> list[UserResponse]:
    _require_admin(access)
    result = await db.execute(
        select(User, Profile).outerjoin(Profile, Profile.user_id == User.id).order_by(User.email)
    )
    return [_to_response(user, profile) for user, profile in result.all()]


async def create_user(db: AsyncSession, access: AccessContext, data: UserCreate) -> UserResponse:
    """Invite a user, with an optional first workspace membership."""
    _require_admin(access)
    email = data.email.lower()
    existing = await db.execute(select(User.id).where(User.email == email))
    if existing.first() is not None:
        raise PreconditionFailed(f"A user with email {email} already exists")
    if (data.workspace_id is None) != (data.workspace_role is None):
        raise ValueError("workspace_id and workspace_role must be given together")
    if data.workspace_id is not None and await db.get(Workspace, data.workspace_id) is None:
        raise NotFound("Workspace not found")

    user = User(email=email, password_hash=hash_password(data.password), name=data.name, is_active=True)
    db.add(user)
    await db.flush()

    profile = Profile(user_id=user.id, full_name=data.name, role=data.role)
    db.add(profile)
    if data.workspace_id is not None:
        db.add(WorkspaceMember(
            workspace_id=data.workspace_id,
            user_id=user.id,
            role=data.workspace_role,
            assigned_at=utc_now(),
        ))
    await db.flush()
    await db.refresh(user)
    return _to_response(user, profile)


async def set_global_role(
    db: AsyncSession, access: AccessContext, user_id: uuid.UUID, role: GlobalRole
) -> UserResponse:
    _require_admin(access)
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    profile = await db.get(Profile, user_id)
    if profile is None:
        profile = Profile(user_id=user_id, full_name=user.name, role=role)
        db.add(profile)
    else:
        profile.role = role
    await db.flush()
    return _to_response(user, profile)
