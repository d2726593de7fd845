"""Role guard — the single authorization check every domain call goes through."""

import logging
from collections.abc import Iterable

from rentwise.errors import Unauthorized
from rentwise.models.user import Role, User

logger = logging.getLogger(__name__)


def authorize(principal: User | None, required_roles: Iterable[Role | str]) -> User:
    """Return ``principal`` if it is present, active and holds one of ``required_roles``.

    Raises:
        Unauthorized: If no principal is attached or its role is not allowed.
    """
    if principal is None or not principal.is_active:
        raise Unauthorized("Authentication required")

    allowed = {Role(r).value for r in required_roles}
    if principal.role not in allowed:
        logger.warning(
            "Denied %s (role=%s); requires one of %s",
            principal.id,
            principal.role,
            sorted(allowed),
        )
        raise Unauthorized(f"This operation requires role: {', '.join(sorted(allowed))}")
    return principal


def is_admin(principal: User) -> bool:
    return principal.role == Role.ADMIN.value
