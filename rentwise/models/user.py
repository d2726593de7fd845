"""User model — authentication, profile and role."""

import enum

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentwise.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Role(str, enum.Enum):
    """The sole authorization axis of the application."""

    ADMIN = "admin"
    HOST = "host"
    GUEST = "guest"


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """An account: an admin, a host who lists properties, or a guest who books them."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    role: Mapped[str] = mapped_column(String(50), default=Role.GUEST.value, nullable=False)

    # Relationships
    properties: Mapped[list["Property"]] = relationship("Property", back_populates="owner", lazy="selectin")  # noqa: F821
    bookings: Mapped[list["Booking"]] = relationship("Booking", back_populates="guest", lazy="selectin")  # noqa: F821

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role!r}>"
