"""Property model — rental listings owned by hosts."""

import uuid
from decimal import Decimal

from sqlalchemy import JSON, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentwise.database import Base, SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Property(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """A rental listing owned by a single host.

    Deleting a listing only sets ``deleted_at``; its booking history is kept.
    """

    __tablename__ = "properties"

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)  # per night
    location: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    amenities: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    image_url: Mapped[str | None] = mapped_column(String(1024), default=None)

    # Relationships
    owner: Mapped["User"] = relationship(back_populates="properties", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821
    bookings: Mapped[list["Booking"]] = relationship(back_populates="property", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title!r}, price={self.price})>"
