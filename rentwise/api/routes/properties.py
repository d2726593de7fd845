"""Properties API routes — public search, ownership-scoped mutation."""

import uuid
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from rentwise.api.deps import get_current_active_user, get_db
from rentwise.models.user import User
from rentwise.schemas.property import (
    PropertyCreate,
    PropertyResponse,
    PropertySearch,
    PropertyUpdate,
)
from rentwise.services import property_service

router = APIRouter(prefix="/api/properties", tags=["properties"])


def _split_amenities(values: list[str] | None) -> list[str] | None:
    """Accept both ``?amenities=a&amenities=b`` and ``?amenities=a,b``."""
    if not values:
        return None
    return [part for value in values for part in value.split(",") if part.strip()]


@router.get(
    "",
    response_model=list[PropertyResponse],
    summary="Search properties",
)
async def search_properties(
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    location: str | None = Query(None, max_length=255),
    amenities: list[str] | None = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[PropertyResponse]:
    """Return every property matching all of the given filters."""
    filters = PropertySearch(
        min_price=min_price,
        max_price=max_price,
        location=location,
        amenities=_split_amenities(amenities),
    )
    items = await property_service.search_properties(db, current_user, filters)
    return [PropertyResponse.model_validate(p) for p in items]


@router.get(
    "/mine",
    response_model=list[PropertyResponse],
    summary="List properties owned by the current host",
)
async def list_my_properties(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[PropertyResponse]:
    items = await property_service.list_properties_by_owner(db, current_user)
    return [PropertyResponse.model_validate(p) for p in items]


@router.post(
    "",
    response_model=PropertyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new property",
)
async def create_property(
    body: PropertyCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> PropertyResponse:
    """Create a property owned by the authenticated host."""
    prop = await property_service.create_property(db, current_user, body)
    return PropertyResponse.model_validate(prop)


@router.get(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Get a property by ID",
)
async def get_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> PropertyResponse:
    prop = await property_service.get_property(db, current_user, property_id)
    return PropertyResponse.model_validate(prop)


@router.put(
    "/{property_id}",
    response_model=PropertyResponse,
    summary="Update a property",
)
async def update_property(
    property_id: uuid.UUID,
    body: PropertyUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> PropertyResponse:
    """Partially update a property. Only explicitly set fields are changed."""
    prop = await property_service.update_property(db, current_user, property_id, body)
    return PropertyResponse.model_validate(prop)


@router.delete(
    "/{property_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a property",
)
async def delete_property(
    property_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> Response:
    """Delete a property. Rejected with 409 while it has active bookings."""
    await property_service.delete_property(db, current_user, property_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
