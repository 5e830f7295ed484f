"""Authentication service: password hashing and JWT access tokens."""
import logging
import time
import uuid
from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext
from redis.exceptions import RedisError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from feedplanner.config import settings
from feedplanner.models.user import User
from feedplanner.utils import redis_client

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

_REVOKED_PREFIX = "revoked:"

# In-memory fallback when Redis is unavailable: jti -> exp (unix seconds)
_revoked_jtis: dict[str, float] = {}


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def create_access_token(user_id: str, email: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "email": email,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Decode and verify a token. Raises ``jose.JWTError`` when invalid or expired."""
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])


def _prune_revoked(now: float) -> None:
    for jti in [j for j, exp in _revoked_jtis.items() if exp <= now]:
        del _revoked_jtis[jti]


async def revoke_token(payload: dict) -> None:
    """Revoke a token until it would have expired anyway."""
    jti = payload.get("jti")
    exp = payload.get("exp")
    if not jti or exp is None:
        return
    now = time.time()
    ttl = int(exp - now)
    if ttl <= 0:
        return
    try:
        r = await redis_client.get_redis()
        await r.set(f"{_REVOKED_PREFIX}{jti}", "1", ex=ttl)
        return
    except RedisError:
        logger.debug("Redis unavailable, revoking token in memory")
    _prune_revoked(now)
    _revoked_jtis[jti] = float(exp)


async def is_token_revoked(payload: dict) -> bool:
    jti = payload.get("jti")
    if not jti:
        return False
    try:
        r = await redis_client.get_redis()
        return bool(await r.exists(f"{_REVOKED_PREFIX}{jti}"))
    except RedisError:
        logger.debug("Redis unavailable, checking revocation in memory")
    _prune_revoked(time.time())
    return jti in _revoked_jtis


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User | None:
    result = await db.execute(select(User).where(User.email == email.lower()))
    user = result.scalar_one_or_none()
    if user and user.is_active and verify_password(password, user.password_hash):
        return user
    return None
