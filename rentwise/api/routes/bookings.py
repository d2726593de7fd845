"""Bookings API router.

Guests create and cancel their own bookings; hosts confirm or cancel
bookings on the properties they own; admins can act on any booking.
"""

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from rentwise.api.deps import get_current_active_user, get_db
from rentwise.models.booking import BookingStatus
from rentwise.models.user import User
from rentwise.schemas.booking import BookingCreate, BookingResponse, BookingStatusUpdate
from rentwise.services import booking_service

router = APIRouter(prefix="/api/bookings", tags=["bookings"])


@router.get(
    "",
    response_model=list[BookingResponse],
    summary="List the current guest's bookings",
)
async def list_my_bookings(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[BookingResponse]:
    items = await booking_service.list_bookings_for_guest(db, current_user)
    return [BookingResponse.model_validate(b) for b in items]


@router.get(
    "/received",
    response_model=list[BookingResponse],
    summary="List bookings on the current host's properties",
)
async def list_received_bookings(
    status_filter: BookingStatus | None = Query(None, alias="status", description="Filter by booking status"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[BookingResponse]:
    """Hosts see bookings on their own properties; admins see every booking."""
    items = await booking_service.list_bookings_for_host(db, current_user, status_filter)
    return [BookingResponse.model_validate(b) for b in items]


@router.post(
    "",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a property",
)
async def create_booking(
    body: BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    """Create a pending booking priced at nightly rate times nights."""
    booking = await booking_service.create_booking(db, current_user, body)
    return BookingResponse.model_validate(booking)


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking",
)
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    booking = await booking_service.get_booking(db, current_user, booking_id)
    return BookingResponse.model_validate(booking)


@router.put(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Confirm or cancel a booking",
)
async def update_booking_status(
    booking_id: uuid.UUID,
    body: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> BookingResponse:
    booking = await booking_service.set_booking_status(db, current_user, booking_id, body.status)
    return BookingResponse.model_validate(booking)
