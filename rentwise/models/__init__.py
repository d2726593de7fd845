"""SQLAlchemy models for Rentwise.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from rentwise.models.booking import ACTIVE_STATUSES, Booking, BookingStatus
from rentwise.models.property import Property
from rentwise.models.user import Role, User

__all__ = [
    "ACTIVE_STATUSES",
    "Booking",
    "BookingStatus",
    "Property",
    "Role",
    "User",
]
