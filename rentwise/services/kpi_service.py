"""KPI aggregator — read-only dashboard figures for admins."""

import logging
import uuid
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentwise.auth.guard import authorize
from rentwise.config import settings
from rentwise.models.booking import Booking, BookingStatus
from rentwise.models.property import Property
from rentwise.models.user import Role, User
from rentwise.schemas.dashboard import KPISnapshot

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


def booked_nights(bookings: list[Booking], period_start: date, period_end: date) -> int:
    """Count nights inside ``[period_start, period_end)`` covered by ``bookings``.

    Nights are collected in a set so overlapping bookings are not counted twice.
    """
    nights: set[date] = set()
    for booking in bookings:
        day = max(booking.start_date, period_start)
        last = min(booking.end_date, period_end)
        while day < last:
            nights.add(day)
            day += timedelta(days=1)
    return len(nights)


def occupancy_percentage(booked: list[int], window_days: int) -> Decimal:
    """Average the per-property occupancy ratios as a 0–100 percentage."""
    if not booked or window_days <= 0:
        return Decimal("0.00")
    ratios = [min(Decimal(n) / Decimal(window_days), Decimal(1)) for n in booked]
    rate = sum(ratios, Decimal(0)) * 100 / len(ratios)
    return rate.quantize(_CENTS, rounding=ROUND_HALF_UP)


async def compute_snapshot(
    db: AsyncSession,
    principal: User,
    as_of: date | None = None,
    window_days: int | None = None,
) -> KPISnapshot:
    """Compute total bookings, occupancy and revenue across the whole catalog.

    Occupancy looks at confirmed nights in the trailing window
    ``[as_of - window_days, as_of)``. Revenue only counts confirmed bookings.
    """
    authorize(principal, [Role.ADMIN])
    period_end = as_of or date.today()
    window_days = window_days or settings.occupancy_window_days
    period_start = period_end - timedelta(days=window_days)

    total_bookings = (await db.execute(select(func.count()).select_from(Booking))).scalar_one()

    revenue_result = await db.execute(
        select(func.coalesce(func.sum(Booking.total_price), 0)).where(
            Booking.status == BookingStatus.CONFIRMED.value
        )
    )
    total_revenue = Decimal(str(revenue_result.scalar_one())).quantize(_CENTS, rounding=ROUND_HALF_UP)

    live_properties = await db.execute(select(Property.id).where(Property.deleted_at.is_(None)))
    property_ids = list(live_properties.scalars().all())

    bookings_result = await db.execute(
        select(Booking).where(
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.start_date < period_end,
            Booking.end_date > period_start,
        )
    )
    by_property: dict[uuid.UUID, list[Booking]] = {pid: [] for pid in property_ids}
    for booking in bookings_result.scalars().all():
        by_property.setdefault(booking.property_id, []).append(booking)

    occupancy = occupancy_percentage(
        [booked_nights(by_property[pid], period_start, period_end) for pid in property_ids],
        window_days,
    )

    logger.info(
        "KPI snapshot for %s..%s: bookings=%d occupancy=%s revenue=%s",
        period_start,
        period_end,
        total_bookings,
        occupancy,
        total_revenue,
    )
    return KPISnapshot(
        total_bookings=total_bookings,
        occupancy_rate=occupancy,
        total_revenue=total_revenue,
        period_start=period_start,
        period_end=period_end,
    )
