"""Pydantic v2 schemas for the admin dashboard."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel


class KPISnapshot(BaseModel):
    """Aggregate figures computed on demand; never persisted."""

    total_bookings: int
    occupancy_rate: Decimal  # percentage 0.00–100.00
    total_revenue: Decimal
    period_start: date
    period_end: date
