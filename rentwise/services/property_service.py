"""Property catalog — ownership-scoped CRUD and the search engine."""

import logging
import uuid
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rentwise.auth.guard import authorize, is_admin
from rentwise.errors import Conflict, Forbidden, NotFound, ValidationError
from rentwise.models.booking import ACTIVE_STATUSES, Booking
from rentwise.models.property import Property
from rentwise.models.user import Role, User
from rentwise.schemas.property import PropertyCreate, PropertySearch, PropertyUpdate

logger = logging.getLogger(__name__)

# Fields that may not be patched to null.
_REQUIRED_FIELDS = ("title", "price", "location", "amenities", "description")


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _clean_text(value: str, field: str) -> str:
    cleaned = value.strip()
    if not cleaned:
        raise ValidationError(f"{field} must not be empty")
    return cleaned


def _clean_price(value: Decimal) -> Decimal:
    if value <= 0:
        raise ValidationError("price must be greater than zero")
    return value


def normalize_amenities(amenities: list[str]) -> list[str]:
    """Trim tags, reject blank ones and drop duplicates, keeping first-seen order."""
    seen: set[str] = set()
    result: list[str] = []
    for tag in amenities:
        cleaned = tag.strip()
        if not cleaned:
            raise ValidationError("amenities must not contain empty values")
        if cleaned not in seen:
            seen.add(cleaned)
            result.append(cleaned)
    return result


def _validated_fields(data: dict) -> dict:
    """Apply the catalog's field rules to a create payload or a patch."""
    for field in _REQUIRED_FIELDS:
        if field in data and data[field] is None:
            raise ValidationError(f"{field} cannot be null")

    cleaned = dict(data)
    if "title" in cleaned:
        cleaned["title"] = _clean_text(cleaned["title"], "title")
    if "location" in cleaned:
        cleaned["location"] = _clean_text(cleaned["location"], "location")
    if "price" in cleaned:
        cleaned["price"] = _clean_price(cleaned["price"])
    if "amenities" in cleaned:
        cleaned["amenities"] = normalize_amenities(cleaned["amenities"])
    if "description" in cleaned:
        cleaned["description"] = cleaned["description"].strip()
    return cleaned


async def _get_for_update(db: AsyncSession, property_id: uuid.UUID) -> Property:
    """Load and row-lock a property so concurrent writers serialize on it."""
    result = await db.execute(
        select(Property)
        .where(Property.id == property_id, Property.deleted_at.is_(None))
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    prop = result.scalar_one_or_none()
    if prop is None:
        raise NotFound("Property not found")
    return prop


def _check_ownership(principal: User, prop: Property) -> None:
    if prop.owner_id != principal.id and not is_admin(principal):
        raise Forbidden("Only the property's owner or an admin can modify it")


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


async def create_property(db: AsyncSession, principal: User, data: PropertyCreate) -> Property:
    """List a new property owned by ``principal`` (hosts only)."""
    authorize(principal, [Role.HOST])
    fields = _validated_fields(data.model_dump())

    prop = Property(owner_id=principal.id, **fields)
    db.add(prop)
    await db.flush()
    await db.refresh(prop)

    logger.info("Host %s created property %s (%s)", principal.id, prop.id, prop.title)
    return prop


async def get_property(db: AsyncSession, principal: User, property_id: uuid.UUID) -> Property:
    authorize(principal, Role)
    result = await db.execute(select(Property).where(Property.id == property_id, Property.deleted_at.is_(None)))
    prop = result.scalar_one_or_none()
    if prop is None:
        raise NotFound("Property not found")
    return prop


async def update_property(
    db: AsyncSession,
    principal: User,
    property_id: uuid.UUID,
    patch: PropertyUpdate,
) -> Property:
    """Partially update a property. Only explicitly set fields are changed."""
    authorize(principal, [Role.HOST, Role.ADMIN])
    prop = await _get_for_update(db, property_id)
    _check_ownership(principal, prop)

    changes = _validated_fields(patch.model_dump(exclude_unset=True))
    if not changes:
        return prop

    for field, value in changes.items():
        setattr(prop, field, value)

    await db.flush()
    await db.refresh(prop)

    logger.info("Property %s updated by %s: %s", prop.id, principal.id, sorted(changes))
    return prop


async def delete_property(db: AsyncSession, principal: User, property_id: uuid.UUID) -> None:
    """Retire a property that has no pending or confirmed bookings.

    The row is soft-deleted: it drops out of the catalog while its cancelled
    bookings keep pointing at it. Active bookings block the delete with
    ``Conflict``; the caller has to cancel them first.
    """
    authorize(principal, [Role.HOST, Role.ADMIN])
    prop = await _get_for_update(db, property_id)
    _check_ownership(principal, prop)

    active_result = await db.execute(
        select(func.count())
        .select_from(Booking)
        .where(Booking.property_id == prop.id, Booking.status.in_(ACTIVE_STATUSES))
    )
    active = active_result.scalar_one()
    if active:
        logger.warning("Refusing to delete property %s with %d active bookings", prop.id, active)
        raise Conflict(f"Property has {active} active booking(s); cancel them before deleting")

    prop.mark_deleted()
    await db.flush()
    await db.refresh(prop)

    logger.info("Property %s deleted by %s", property_id, principal.id)


def _matches_amenities(prop: Property, wanted: set[str]) -> bool:
    have = {tag.casefold() for tag in prop.amenities or []}
    return wanted <= have


async def search_properties(db: AsyncSession, principal: User, filters: PropertySearch) -> list[Property]:
    """Return properties matching every filter that is set.

    Price bounds are inclusive, ``location`` is a case-insensitive substring
    match and ``amenities`` requires the property to carry all requested
    tags (compared case-insensitively). Results are ordered by creation
    time, then id, so a fixed data set always comes back in the same order.
    """
    authorize(principal, Role)

    if (
        filters.min_price is not None
        and filters.max_price is not None
        and filters.min_price > filters.max_price
    ):
        raise ValidationError("min_price must not exceed max_price")

    query = select(Property).where(Property.deleted_at.is_(None))
    if filters.min_price is not None:
        query = query.where(Property.price >= filters.min_price)
    if filters.max_price is not None:
        query = query.where(Property.price <= filters.max_price)
    if filters.location:
        needle = filters.location.strip()
        if needle:
            query = query.where(Property.location.icontains(needle, autoescape=True))

    result = await db.execute(query.order_by(Property.created_at, Property.id))
    properties = list(result.scalars().all())

    # JSON containment differs per backend, so the amenity test runs here.
    wanted = {tag.strip().casefold() for tag in filters.amenities or [] if tag.strip()}
    if wanted:
        properties = [p for p in properties if _matches_amenities(p, wanted)]
    return properties


async def list_properties_by_owner(db: AsyncSession, principal: User) -> list[Property]:
    """Return the properties listed by the calling host."""
    authorize(principal, [Role.HOST])
    result = await db.execute(
        select(Property)
        .where(Property.owner_id == principal.id, Property.deleted_at.is_(None))
        .order_by(Property.created_at, Property.id)
    )
    return list(result.scalars().all())
