"""FastAPI authentication dependencies for route protection."""

import uuid

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentwise.auth.guard import authorize
from rentwise.auth.jwt import ACCESS, decode_token
from rentwise.database import get_db
from rentwise.errors import Unauthorized
from rentwise.models.user import Role, User

# auto_error is off so a missing header surfaces as our 401, not FastAPI's 403
_bearer_scheme = HTTPBearer(auto_error=False)


async def load_user_from_token(db: AsyncSession, token: str, expected_type: str = ACCESS) -> User:
    """Decode ``token`` and return the active user it names.

    Raises:
        Unauthorized: If the token is invalid, expired, of the wrong type,
            or the user is missing or inactive.
    """
    try:
        payload = decode_token(token)
    except JWTError:
        raise Unauthorized("Could not validate credentials") from None

    if payload.get("type") != expected_type:
        raise Unauthorized("Invalid token type")

    sub: str | None = payload.get("sub")
    if sub is None:
        raise Unauthorized("Could not validate credentials")

    try:
        user_id = uuid.UUID(sub)
    except ValueError:
        raise Unauthorized("Could not validate credentials") from None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if user is None:
        raise Unauthorized("Could not validate credentials")
    if not user.is_active:
        raise Unauthorized("User account is inactive")
    return user


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Extract and validate the Bearer token, then return the authenticated user.

    Raises:
        Unauthorized: If no token is attached or it does not resolve to a user.
    """
    if credentials is None:
        raise Unauthorized("Not authenticated")
    return await load_user_from_token(db, credentials.credentials)


async def get_current_active_user(user: User = Depends(get_current_user)) -> User:
    """Return the current user, whatever its role."""
    return authorize(user, Role)
