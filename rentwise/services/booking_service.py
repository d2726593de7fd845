"""Booking ledger — reservations and their lifecycle.

Lifecycle::

    pending ──confirm──▶ confirmed
       │                    │
       └──────cancel────────┴──▶ cancelled   (terminal)

Every booking starts ``pending``. Bookings are never deleted; cancelling is
the only way out.
"""

import logging
import uuid
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rentwise.auth.guard import authorize
from rentwise.errors import Conflict, Forbidden, InvalidTransition, NotFound, ValidationError
from rentwise.models.booking import ACTIVE_STATUSES, Booking, BookingStatus
from rentwise.models.property import Property
from rentwise.models.user import Role, User
from rentwise.schemas.booking import BookingCreate

logger = logging.getLogger(__name__)

TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
}


def can_transition(current: BookingStatus | str, target: BookingStatus | str) -> bool:
    return BookingStatus(target) in TRANSITIONS[BookingStatus(current)]


def nights_between(start: date, end: date) -> int:
    return (end - start).days


def quote_price(nightly_price: Decimal, start: date, end: date) -> Decimal:
    """Total price of a stay: nightly price times the number of nights."""
    total = Decimal(nightly_price) * nights_between(start, end)
    return total.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _check_date_conflict(
    db: AsyncSession,
    property_id: uuid.UUID,
    start_date: date,
    end_date: date,
) -> None:
    """Raise ``Conflict`` if ``[start_date, end_date)`` overlaps an active booking."""
    result = await db.execute(
        select(Booking.id)
        .where(
            Booking.property_id == property_id,
            Booking.status.in_(ACTIVE_STATUSES),
            Booking.start_date < end_date,
            Booking.end_date > start_date,
        )
        .limit(1)
    )
    if result.scalar_one_or_none() is not None:
        raise Conflict("Dates conflict with an existing booking")


async def _owner_of(db: AsyncSession, property_id: uuid.UUID) -> uuid.UUID | None:
    result = await db.execute(select(Property.owner_id).where(Property.id == property_id))
    return result.scalar_one_or_none()


async def _check_access(db: AsyncSession, principal: User, booking: Booking) -> None:
    """Guests see their own bookings, hosts those on their properties, admins all."""
    if principal.role == Role.ADMIN.value:
        return
    if principal.role == Role.GUEST.value:
        if booking.guest_id != principal.id:
            raise Forbidden("You can only access your own bookings")
        return
    if await _owner_of(db, booking.property_id) != principal.id:
        raise Forbidden("You can only access bookings on your own properties")


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def create_booking(
    db: AsyncSession,
    principal: User,
    data: BookingCreate,
    today: date | None = None,
) -> Booking:
    """Reserve a property for ``[start_date, end_date)`` on behalf of a guest.

    The property row stays locked from the overlap check until the request's
    transaction ends, so two overlapping requests for the same property
    cannot both be accepted.
    """
    authorize(principal, [Role.GUEST])
    today = today or date.today()

    result = await db.execute(
        select(Property)
        .where(Property.id == data.property_id, Property.deleted_at.is_(None))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    prop = result.scalar_one_or_none()
    if prop is None:
        raise NotFound("Property not found")

    if data.start_date >= data.end_date:
        raise ValidationError("end_date must be after start_date")
    if data.start_date < today:
        raise ValidationError("Bookings cannot start in the past")

    await _check_date_conflict(db, prop.id, data.start_date, data.end_date)

    booking = Booking(
        property_id=prop.id,
        guest_id=principal.id,
        start_date=data.start_date,
        end_date=data.end_date,
        total_price=quote_price(prop.price, data.start_date, data.end_date),
        status=BookingStatus.PENDING.value,
    )
    db.add(booking)
    await db.flush()
    await db.refresh(booking)

    logger.info(
        "Guest %s booked property %s for %s..%s (%s)",
        principal.id,
        prop.id,
        booking.start_date,
        booking.end_date,
        booking.total_price,
    )
    return booking


async def get_booking(db: AsyncSession, principal: User, booking_id: uuid.UUID) -> Booking:
    authorize(principal, Role)
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFound("Booking not found")
    await _check_access(db, principal, booking)
    return booking


async def set_booking_status(
    db: AsyncSession,
    principal: User,
    booking_id: uuid.UUID,
    new_status: BookingStatus | str,
) -> Booking:
    """Move a booking along its lifecycle.

    Guests may only cancel their own bookings. Hosts may confirm or cancel
    bookings on properties they own; admins may act on any booking. The
    booking row is locked first, so a second concurrent call sees the
    result of the first.
    """
    authorize(principal, Role)
    target = BookingStatus(new_status)

    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise NotFound("Booking not found")

    await _check_access(db, principal, booking)
    if principal.role == Role.GUEST.value and target is not BookingStatus.CANCELLED:
        raise Forbidden("Guests can only cancel their bookings")

    if not can_transition(booking.status, target):
        raise InvalidTransition(f"Cannot change booking status from {booking.status} to {target.value}")

    previous = booking.status
    booking.status = target.value
    await db.flush()
    await db.refresh(booking)

    logger.info("Booking %s: %s -> %s by %s", booking.id, previous, booking.status, principal.id)
    return booking


async def list_bookings_for_guest(db: AsyncSession, principal: User) -> list[Booking]:
    """Return the calling guest's bookings, most recent stay first."""
    authorize(principal, [Role.GUEST])
    result = await db.execute(
        select(Booking)
        .where(Booking.guest_id == principal.id)
        .order_by(Booking.start_date.desc(), Booking.id)
    )
    return list(result.scalars().all())


async def list_bookings_for_host(
    db: AsyncSession,
    principal: User,
    status: BookingStatus | None = None,
) -> list[Booking]:
    """Return bookings on the calling host's properties; every booking for admins."""
    authorize(principal, [Role.HOST, Role.ADMIN])
    query = select(Booking)
    if principal.role == Role.HOST.value:
        query = query.join(Property, Booking.property_id == Property.id).where(Property.owner_id == principal.id)
    if status is not None:
        query = query.where(Booking.status == status.value)

    result = await db.execute(query.order_by(Booking.start_date, Booking.id))
    return list(result.scalars().all())
