"""Pydantic v2 request/response schemas for booking endpoints."""

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from rentwise.models.booking import BookingStatus

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class BookingCreate(BaseModel):
    """Schema for requesting a stay. The price is computed server-side."""

    property_id: uuid.UUID
    start_date: date
    end_date: date


class BookingStatusUpdate(BaseModel):
    """Body of ``PUT /api/bookings/{id}``."""

    status: BookingStatus


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class BookingResponse(BaseModel):
    """Standard booking response."""

    id: uuid.UUID
    property_id: uuid.UUID
    guest_id: uuid.UUID
    start_date: date
    end_date: date
    total_price: Decimal
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
