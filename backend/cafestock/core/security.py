"""Staff sign-in: password hashing and access tokens.

An access token names the user, their single café role and the permissions
that role grants, so route guards in ``cafestock.core.deps`` never need a
database round trip. Tokens are only accepted when they were issued here.
"""

from datetime import datetime, timedelta, timezone
from uuid import UUID

from jose import jwt
from passlib.context import CryptContext

from cafestock.core.config import settings
from cafestock.db.seed_rbac import permissions_for
from cafestock.models.role import RoleType

TOKEN_ISSUER = "cafestock"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def create_access_token(
    user_id: UUID,
    role: RoleType,
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a token for ``user_id`` carrying ``role`` and its permission set."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    payload = {
        "iss": TOKEN_ISSUER,
        "sub": str(user_id),
        "role": role.value,
        "permissions": permissions_for(role),
        "exp": expire,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Decode and validate JWT. Raises JWTError on failure or a foreign issuer."""
    return jwt.decode(
        token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM], issuer=TOKEN_ISSUER
    )
