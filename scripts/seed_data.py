"""Seed the database with demo accounts, listings and bookings.

Creates one admin, two hosts and two guests (password ``demo1234`` for all),
a handful of properties and a mix of pending, confirmed and cancelled
bookings around today's date, so every dashboard has something to show.

Run from the repository root:
    python -m scripts.seed_data
"""

import asyncio
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import delete, select

from rentwise.auth.passwords import hash_password
from rentwise.database import async_session_factory, engine
from rentwise.models.booking import Booking, BookingStatus
from rentwise.models.property import Property
from rentwise.models.user import Role, User
from rentwise.services.booking_service import quote_price

# ---------------------------------------------------------------------------
# Seed data definitions
# ---------------------------------------------------------------------------

DEMO_PASSWORD = "demo1234"

USERS = [
    {"email": "admin@rentwise.dev", "name": "Demo Admin", "role": Role.ADMIN},
    {"email": "host.claire@rentwise.dev", "name": "Claire Martin", "role": Role.HOST},
    {"email": "host.tomas@rentwise.dev", "name": "Tomás Ruiz", "role": Role.HOST},
    {"email": "guest.ana@rentwise.dev", "name": "Ana Costa", "role": Role.GUEST},
    {"email": "guest.ben@rentwise.dev", "name": "Ben Walker", "role": Role.GUEST},
]

# Keyed by the owning host's email.
PROPERTIES = {
    "host.claire@rentwise.dev": [
        {
            "title": "Canal-side Loft in Le Marais",
            "description": "Bright one-bedroom loft five minutes from Place des Vosges.",
            "price": Decimal("180.00"),
            "location": "Paris, France",
            "amenities": ["WiFi", "Kitchen", "Washer", "Air Conditioning"],
        },
        {
            "title": "Montmartre Studio",
            "description": "Compact studio with a balcony looking over Sacré-Cœur.",
            "price": Decimal("95.00"),
            "location": "Paris, France",
            "amenities": ["WiFi", "Kitchen"],
        },
    ],
    "host.tomas@rentwise.dev": [
        {
            "title": "Family Villa with Pool",
            "description": "Four bedrooms, garden and private pool near the old town.",
            "price": Decimal("320.00"),
            "location": "Málaga, Spain",
            "amenities": ["WiFi", "Pool", "Parking", "Kitchen", "Dryer"],
        },
        {
            "title": "Beach Apartment",
            "description": "Two-bedroom flat on the seafront promenade.",
            "price": Decimal("140.00"),
            "location": "Valencia, Spain",
            "amenities": ["WiFi", "Air Conditioning", "Gym"],
        },
    ],
}


def _build_bookings(properties: list[Property], guests: list[User], today: date) -> list[dict]:
    """Return a spread of past and future bookings that never overlap per property."""
    loft, studio, villa, beach = properties
    ana, ben = guests
    return [
        {"property": loft, "guest": ana, "start": today - timedelta(days=40), "nights": 5, "status": BookingStatus.CONFIRMED},
        {"property": loft, "guest": ben, "start": today - timedelta(days=20), "nights": 3, "status": BookingStatus.CONFIRMED},
        {"property": loft, "guest": ana, "start": today + timedelta(days=10), "nights": 4, "status": BookingStatus.PENDING},
        {"property": studio, "guest": ben, "start": today - timedelta(days=12), "nights": 2, "status": BookingStatus.CANCELLED},
        {"property": studio, "guest": ben, "start": today + timedelta(days=3), "nights": 6, "status": BookingStatus.CONFIRMED},
        {"property": villa, "guest": ana, "start": today - timedelta(days=90), "nights": 7, "status": BookingStatus.CONFIRMED},
        {"property": villa, "guest": ben, "start": today + timedelta(days=30), "nights": 7, "status": BookingStatus.PENDING},
        {"property": beach, "guest": ana, "start": today + timedelta(days=60), "nights": 3, "status": BookingStatus.CANCELLED},
    ]


# ---------------------------------------------------------------------------
# Main seed function
# ---------------------------------------------------------------------------


async def seed() -> None:
    """Populate the database with demo data.

    Idempotent: existing demo accounts, their properties and their bookings
    are removed first.
    """
    async with async_session_factory() as session:
        emails = [u["email"] for u in USERS]
        existing = (await session.execute(select(User.id).where(User.email.in_(emails)))).scalars().all()
        if existing:
            print(f"Removing {len(existing)} existing demo accounts and their data...")
            property_ids = select(Property.id).where(Property.owner_id.in_(existing))
            await session.execute(delete(Booking).where(Booking.property_id.in_(property_ids)))
            await session.execute(delete(Booking).where(Booking.guest_id.in_(existing)))
            await session.execute(delete(Property).where(Property.owner_id.in_(existing)))
            await session.execute(delete(User).where(User.id.in_(existing)))
            await session.flush()

        # 1. Accounts
        users: dict[str, User] = {}
        for data in USERS:
            user = User(
                email=data["email"],
                hashed_password=hash_password(DEMO_PASSWORD),
                name=data["name"],
                role=data["role"].value,
                is_active=True,
            )
            session.add(user)
            users[user.email] = user
        await session.flush()
        print(f"Created {len(users)} accounts (password: {DEMO_PASSWORD})")

        # 2. Properties
        created_properties: list[Property] = []
        for owner_email, listings in PROPERTIES.items():
            for data in listings:
                prop = Property(owner_id=users[owner_email].id, **data)
                session.add(prop)
                created_properties.append(prop)
                print(f"   {prop.title} — {prop.location} ({prop.price}/night)")
        await session.flush()

        # 3. Bookings
        guests = [u for u in users.values() if u.role == Role.GUEST.value]
        bookings_data = _build_bookings(created_properties, guests, date.today())
        for data in bookings_data:
            start = data["start"]
            end = start + timedelta(days=data["nights"])
            session.add(
                Booking(
                    property_id=data["property"].id,
                    guest_id=data["guest"].id,
                    start_date=start,
                    end_date=end,
                    total_price=quote_price(data["property"].price, start, end),
                    status=data["status"].value,
                )
            )

        await session.commit()
        print(f"Created {len(created_properties)} properties and {len(bookings_data)} bookings")

    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(seed())
