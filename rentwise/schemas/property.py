"""Pydantic v2 request/response schemas for property endpoints."""

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class PropertyCreate(BaseModel):
    """Schema for listing a new property.

    Business rules (positive price, non-blank title/location/amenities) are
    checked by the catalog service so they surface as ``ValidationError``.
    """

    title: str = Field(..., max_length=255)
    description: str = ""
    price: Decimal = Field(..., max_digits=10, decimal_places=2)
    location: str = Field(..., max_length=255)
    amenities: list[str] = Field(default_factory=list)
    image_url: str | None = Field(None, max_length=1024)


class PropertyUpdate(BaseModel):
    """Schema for partially updating a property. All fields optional."""

    title: str | None = Field(None, max_length=255)
    description: str | None = None
    price: Decimal | None = Field(None, max_digits=10, decimal_places=2)
    location: str | None = Field(None, max_length=255)
    amenities: list[str] | None = None
    image_url: str | None = Field(None, max_length=1024)


class PropertySearch(BaseModel):
    """Filters accepted by the property search. Unset filters match everything."""

    min_price: Decimal | None = None
    max_price: Decimal | None = None
    location: str | None = None
    amenities: list[str] | None = None


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class PropertyResponse(BaseModel):
    """Public property information returned from the API."""

    id: uuid.UUID
    owner_id: uuid.UUID
    title: str
    description: str
    price: Decimal
    location: str
    amenities: list[str]
    image_url: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
