"""Domain error taxonomy.

Service functions raise these; a single exception handler registered in
``rentwise.main`` turns them into JSON responses of the form::

    {"kind": "Conflict", "detail": "Dates conflict with an existing booking"}
"""

from fastapi import status


class DomainError(Exception):
    """Base class for every error the domain core surfaces to its caller."""

    kind: str = "DomainError"
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "detail": self.detail}


class Unauthorized(DomainError):
    """No valid principal, or the principal's role is not allowed."""

    kind = "Unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED


class Forbidden(DomainError):
    """The principal is known but does not own the target entity."""

    kind = "Forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class NotFound(DomainError):
    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND


class ValidationError(DomainError):
    kind = "ValidationError"
    status_code = status.HTTP_400_BAD_REQUEST


class Conflict(DomainError):
    """Overlapping booking, duplicate account, or delete with active bookings."""

    kind = "Conflict"
    status_code = status.HTTP_409_CONFLICT


class InvalidTransition(DomainError):
    kind = "InvalidTransition"
    status_code = status.HTTP_409_CONFLICT
