"""FastAPI dependency injection utilities."""
import uuid as _uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from feedplanner.database import get_db
from feedplanner.exceptions import AuthorizationDenied
from feedplanner.schemas.identity import IdentityFacts
from feedplanner.services.auth_service import decode_access_token, is_token_revoked
from feedplanner.services.role_engine import AccessContext, EffectiveRole
from feedplanner.services.session_resolver import resolve_identity

__all__ = ["get_db", "get_token_payload", "get_identity", "get_access", "require_role"]

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_token_payload(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict:
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        payload = decode_access_token(credentials.credentials)
    except JWTError as e:
        raise _unauthorized("Token expired" if "expired" in str(e).lower() else "Invalid token")
    if payload.get("sub") is None:
        raise _unauthorized("Invalid token")
    if await is_token_revoked(payload):
        raise _unauthorized("Token has been revoked")
    return payload


async def get_identity(
    payload: dict = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
) -> IdentityFacts:
    """Resolve a fresh identity snapshot for the bearer of the token."""
    try:
        actor_id = _uuid.UUID(payload["sub"])
    except ValueError:
        raise _unauthorized("Invalid token")
    facts = await resolve_identity(db, actor_id)
    if facts.actor is None:
        raise _unauthorized("Invalid or inactive user")
    return facts


async def get_access(facts: IdentityFacts = Depends(get_identity)) -> AccessContext:
    return AccessContext.from_facts(facts)


def require_role(*roles: EffectiveRole):
    """Effective-role gate for a whole endpoint."""
    async def dependency(access: AccessContext = Depends(get_access)) -> AccessContext:
        if access.role not in roles:
            raise AuthorizationDenied()
        return access
    return Depends(dependency)
