"""Account service — registration, password login and token refresh."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentwise.auth.dependencies import load_user_from_token
from rentwise.auth.jwt import REFRESH, create_token_pair
from rentwise.auth.passwords import hash_password, verify_password
from rentwise.config import settings
from rentwise.errors import Conflict, Forbidden, Unauthorized
from rentwise.models.user import Role, User
from rentwise.schemas.auth import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)


def issue_tokens(user: User) -> dict[str, str]:
    return create_token_pair(str(user.id), role=user.role)


async def register_user(db: AsyncSession, body: RegisterRequest) -> User:
    """Create an account with the requested role.

    Admin accounts can only be self-registered when
    ``settings.allow_admin_registration`` is on; otherwise they are seeded.
    """
    if body.role is Role.ADMIN and not settings.allow_admin_registration:
        logger.warning("Rejected admin self-registration for %s", body.email)
        raise Forbidden("Admin accounts cannot be self-registered")

    email = body.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none() is not None:
        raise Conflict("Email already registered")

    user = User(
        email=email,
        hashed_password=hash_password(body.password),
        name=body.name.strip(),
        role=body.role.value,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("Registered %s %s (%s)", user.role, user.id, user.email)
    return user


async def authenticate(db: AsyncSession, body: LoginRequest) -> User:
    """Return the active user matching the credentials or raise ``Unauthorized``."""
    result = await db.execute(select(User).where(User.email == body.email.lower()))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(body.password, user.hashed_password):
        raise Unauthorized("Incorrect email or password")
    if not user.is_active:
        raise Unauthorized("User account is inactive")
    return user


async def refresh_session(db: AsyncSession, refresh_token: str) -> User:
    """Resolve a refresh token to its user so a new pair can be issued."""
    return await load_user_from_token(db, refresh_token, expected_type=REFRESH)
