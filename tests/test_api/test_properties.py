"""Tests for property endpoints — CRUD, ownership and search."""

import uuid

import pytest
import pytest_asyncio
from conftest import future_dates, headers_for
from httpx import AsyncClient

from rentwise.models.user import User

pytestmark = pytest.mark.asyncio


async def _create(client: AsyncClient, headers: dict, **overrides) -> dict:
    payload = {
        "title": "Listing",
        "price": 100,
        "location": "Paris, France",
        "amenities": [],
    }
    payload.update(overrides)
    response = await client.post("/api/properties", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


# ---------------------------------------------------------------------------
# POST /api/properties
# ---------------------------------------------------------------------------


class TestCreateProperty:
    """Tests for creating properties."""

    async def test_create_success(self, client: AsyncClient, host_headers: dict, host_user: User) -> None:
        response = await client.post(
            "/api/properties",
            json={
                "title": "  Loft by the Canal ",
                "description": "Bright loft",
                "price": 180.5,
                "location": "Paris",
                "amenities": [" WiFi", "Kitchen", "WiFi"],
                "image_url": "https://img.example.com/loft.jpg",
            },
            headers=host_headers,
        )
        assert response.status_code == 201
        data = response.json()
        assert data["title"] == "Loft by the Canal"
        assert float(data["price"]) == 180.5
        assert data["amenities"] == ["WiFi", "Kitchen"]
        assert data["image_url"] == "https://img.example.com/loft.jpg"
        assert data["owner_id"] == str(host_user.id)
        assert "id" in data
        assert "created_at" in data

    @pytest.mark.parametrize("price", [0, -10])
    async def test_non_positive_price_rejected(self, client: AsyncClient, host_headers: dict, price) -> None:
        response = await client.post(
            "/api/properties",
            json={"title": "Free", "price": price, "location": "Paris"},
            headers=host_headers,
        )
        assert response.status_code == 400
        assert response.json()["kind"] == "ValidationError"

    @pytest.mark.parametrize("field", ["title", "location"])
    async def test_blank_text_rejected(self, client: AsyncClient, host_headers: dict, field) -> None:
        payload = {"title": "T", "price": 10, "location": "L", field: "   "}
        response = await client.post("/api/properties", json=payload, headers=host_headers)
        assert response.status_code == 400

    async def test_blank_amenity_rejected(self, client: AsyncClient, host_headers: dict) -> None:
        response = await client.post(
            "/api/properties",
            json={"title": "T", "price": 10, "location": "L", "amenities": ["Pool", "  "]},
            headers=host_headers,
        )
        assert response.status_code == 400
        assert "amenities" in response.json()["detail"]

    async def test_missing_title_is_schema_error(self, client: AsyncClient, host_headers: dict) -> None:
        response = await client.post("/api/properties", json={"price": 10, "location": "L"}, headers=host_headers)
        assert response.status_code == 422

    async def test_guest_cannot_create(self, client: AsyncClient, guest_headers: dict) -> None:
        response = await client.post(
            "/api/properties",
            json={"title": "T", "price": 10, "location": "L"},
            headers=guest_headers,
        )
        assert response.status_code == 401
        assert response.json()["kind"] == "Unauthorized"

    async def test_unauthenticated(self, client: AsyncClient) -> None:
        response = await client.post("/api/properties", json={"title": "T", "price": 10, "location": "L"})
        assert response.status_code == 401


# ---------------------------------------------------------------------------
# GET /api/properties/mine and /api/properties/{id}
# ---------------------------------------------------------------------------


class TestReadProperties:
    async def test_mine_returns_own_only(
        self,
        client: AsyncClient,
        host_headers: dict,
        other_host: User,
    ) -> None:
        mine = await _create(client, host_headers, title="Mine")
        await _create(client, headers_for(other_host), title="Theirs")

        response = await client.get("/api/properties/mine", headers=host_headers)
        assert response.status_code == 200
        assert [p["id"] for p in response.json()] == [mine["id"]]

    async def test_mine_requires_host(self, client: AsyncClient, guest_headers: dict) -> None:
        response = await client.get("/api/properties/mine", headers=guest_headers)
        assert response.status_code == 401

    async def test_get_by_id(self, client: AsyncClient, guest_headers: dict, test_property: dict) -> None:
        response = await client.get(f"/api/properties/{test_property['id']}", headers=guest_headers)
        assert response.status_code == 200
        assert response.json()["title"] == test_property["title"]

    async def test_get_not_found(self, client: AsyncClient, guest_headers: dict) -> None:
        response = await client.get(f"/api/properties/{uuid.uuid4()}", headers=guest_headers)
        assert response.status_code == 404
        assert response.json()["kind"] == "NotFound"


# ---------------------------------------------------------------------------
# PUT /api/properties/{id}
# ---------------------------------------------------------------------------


class TestUpdateProperty:
    async def test_partial_update(self, client: AsyncClient, host_headers: dict, test_property: dict) -> None:
        response = await client.put(
            f"/api/properties/{test_property['id']}",
            json={"price": 120},
            headers=host_headers,
        )
        assert response.status_code == 200
        data = response.json()
        assert float(data["price"]) == 120.0
        assert data["title"] == test_property["title"]
        assert data["location"] == test_property["location"]
        assert data["amenities"] == test_property["amenities"]

    async def test_empty_patch_is_noop(self, client: AsyncClient, host_headers: dict, test_property: dict) -> None:
        response = await client.put(f"/api/properties/{test_property['id']}", json={}, headers=host_headers)
        assert response.status_code == 200
        assert response.json() == test_property

    async def test_other_host_forbidden(
        self,
        client: AsyncClient,
        other_host: User,
        test_property: dict,
    ) -> None:
        response = await client.put(
            f"/api/properties/{test_property['id']}",
            json={"title": "Hijacked"},
            headers=headers_for(other_host),
        )
        assert response.status_code == 403
        assert response.json()["kind"] == "Forbidden"

    async def test_admin_can_update(self, client: AsyncClient, admin_headers: dict, test_property: dict) -> None:
        response = await client.put(
            f"/api/properties/{test_property['id']}",
            json={"title": "Moderated"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["title"] == "Moderated"
        assert response.json()["owner_id"] == test_property["owner_id"]

    async def test_null_required_field_rejected(
        self, client: AsyncClient, host_headers: dict, test_property: dict
    ) -> None:
        response = await client.put(
            f"/api/properties/{test_property['id']}",
            json={"price": None},
            headers=host_headers,
        )
        assert response.status_code == 400

    async def test_update_unknown(self, client: AsyncClient, host_headers: dict) -> None:
        response = await client.put(f"/api/properties/{uuid.uuid4()}", json={"title": "X"}, headers=host_headers)
        assert response.status_code == 404


# ---------------------------------------------------------------------------
# DELETE /api/properties/{id}
# ---------------------------------------------------------------------------


class TestDeleteProperty:
    async def test_delete_without_bookings(
        self, client: AsyncClient, host_headers: dict, test_property: dict
    ) -> None:
        response = await client.delete(f"/api/properties/{test_property['id']}", headers=host_headers)
        assert response.status_code == 204

        follow_up = await client.get(f"/api/properties/{test_property['id']}", headers=host_headers)
        assert follow_up.status_code == 404

    async def test_delete_with_active_booking_conflicts(
        self,
        client: AsyncClient,
        host_headers: dict,
        test_property: dict,
        test_booking: dict,
    ) -> None:
        response = await client.delete(f"/api/properties/{test_property['id']}", headers=host_headers)
        assert response.status_code == 409
        assert response.json()["kind"] == "Conflict"

    async def test_delete_after_cancelling_keeps_booking_history(
        self,
        client: AsyncClient,
        host_headers: dict,
        guest_headers: dict,
        admin_headers: dict,
        test_property: dict,
        test_booking: dict,
    ) -> None:
        cancel = await client.put(
            f"/api/bookings/{test_booking['id']}",
            json={"status": "cancelled"},
            headers=guest_headers,
        )
        assert cancel.status_code == 200
        before = await client.get("/api/dashboard/kpi", headers=admin_headers)

        response = await client.delete(f"/api/properties/{test_property['id']}", headers=host_headers)
        assert response.status_code == 204

        # The cancelled booking outlives its property.
        mine = await client.get("/api/bookings", headers=guest_headers)
        assert [b["id"] for b in mine.json()] == [test_booking["id"]]
        assert mine.json()[0]["status"] == "cancelled"

        single = await client.get(f"/api/bookings/{test_booking['id']}", headers=admin_headers)
        assert single.status_code == 200
        assert single.json()["property_id"] == test_property["id"]

        received = await client.get("/api/bookings/received", headers=host_headers)
        assert [b["id"] for b in received.json()] == [test_booking["id"]]

        after = await client.get("/api/dashboard/kpi", headers=admin_headers)
        assert after.json()["total_bookings"] == before.json()["total_bookings"] == 1

        # The property itself is gone from the catalog.
        search = await client.get("/api/properties", headers=guest_headers)
        assert test_property["id"] not in {p["id"] for p in search.json()}
        listed = await client.get("/api/properties/mine", headers=host_headers)
        assert listed.json() == []

    async def test_deleted_property_is_not_found(
        self,
        client: AsyncClient,
        host_headers: dict,
        guest_headers: dict,
        test_property: dict,
    ) -> None:
        url = f"/api/properties/{test_property['id']}"
        assert (await client.delete(url, headers=host_headers)).status_code == 204

        assert (await client.get(url, headers=guest_headers)).status_code == 404
        assert (await client.put(url, json={"title": "Back"}, headers=host_headers)).status_code == 404
        assert (await client.delete(url, headers=host_headers)).status_code == 404

        start, end = future_dates()
        booking = await client.post(
            "/api/bookings",
            json={"property_id": test_property["id"], "start_date": start, "end_date": end},
            headers=guest_headers,
        )
        assert booking.status_code == 404

    async def test_other_host_cannot_delete(
        self, client: AsyncClient, other_host: User, test_property: dict
    ) -> None:
        response = await client.delete(f"/api/properties/{test_property['id']}", headers=headers_for(other_host))
        assert response.status_code == 403

    async def test_guest_cannot_delete(self, client: AsyncClient, guest_headers: dict, test_property: dict) -> None:
        response = await client.delete(f"/api/properties/{test_property['id']}", headers=guest_headers)
        assert response.status_code == 401


# ---------------------------------------------------------------------------
# GET /api/properties (search)
# ---------------------------------------------------------------------------


class TestSearchProperties:
    @pytest_asyncio.fixture
    async def catalog(self, client: AsyncClient, host_headers: dict) -> dict[str, dict]:
        cheap = await _create(client, host_headers, title="Cheap", price=50, location="Lyon", amenities=["WiFi"])
        mid = await _create(
            client, host_headers, title="Mid", price=100, location="Paris, France", amenities=["WiFi", "Pool"]
        )
        dear = await _create(
            client, host_headers, title="Dear", price=300, location="PARIS", amenities=["WiFi", "Pool", "Gym"]
        )
        return {"cheap": cheap, "mid": mid, "dear": dear}

    @staticmethod
    def _titles(response) -> set[str]:
        assert response.status_code == 200, response.text
        return {p["title"] for p in response.json()}

    async def test_no_filters_returns_all(self, client: AsyncClient, guest_headers: dict, catalog) -> None:
        response = await client.get("/api/properties", headers=guest_headers)
        assert self._titles(response) == {"Cheap", "Mid", "Dear"}

    async def test_price_bounds_inclusive(self, client: AsyncClient, guest_headers: dict, catalog) -> None:
        response = await client.get(
            "/api/properties", params={"min_price": 100, "max_price": 300}, headers=guest_headers
        )
        assert self._titles(response) == {"Mid", "Dear"}

    async def test_location_case_insensitive_substring(
        self, client: AsyncClient, guest_headers: dict, catalog
    ) -> None:
        response = await client.get("/api/properties", params={"location": "paris"}, headers=guest_headers)
        assert self._titles(response) == {"Mid", "Dear"}

    async def test_amenities_superset(self, client: AsyncClient, guest_headers: dict, catalog) -> None:
        response = await client.get(
            "/api/properties",
            params=[("amenities", "pool"), ("amenities", "WiFi")],
            headers=guest_headers,
        )
        assert self._titles(response) == {"Mid", "Dear"}

    async def test_amenities_comma_separated(self, client: AsyncClient, guest_headers: dict, catalog) -> None:
        response = await client.get("/api/properties", params={"amenities": "Pool,Gym"}, headers=guest_headers)
        assert self._titles(response) == {"Dear"}

    async def test_filters_combine(self, client: AsyncClient, guest_headers: dict, catalog) -> None:
        response = await client.get(
            "/api/properties",
            params={"max_price": 200, "location": "paris", "amenities": "Pool"},
            headers=guest_headers,
        )
        assert self._titles(response) == {"Mid"}

    async def test_inverted_price_range_rejected(self, client: AsyncClient, guest_headers: dict, catalog) -> None:
        response = await client.get(
            "/api/properties", params={"min_price": 300, "max_price": 100}, headers=guest_headers
        )
        assert response.status_code == 400

    async def test_order_is_stable(self, client: AsyncClient, guest_headers: dict, catalog) -> None:
        first = await client.get("/api/properties", headers=guest_headers)
        second = await client.get("/api/properties", headers=guest_headers)
        assert [p["id"] for p in first.json()] == [p["id"] for p in second.json()]

    async def test_search_requires_authentication(self, client: AsyncClient) -> None:
        response = await client.get("/api/properties")
        assert response.status_code == 401

    async def test_booked_property_still_listed(
        self, client: AsyncClient, guest_headers: dict, test_property: dict
    ) -> None:
        start, end = future_dates(5, 2)
        await client.post(
            "/api/bookings",
            json={"property_id": test_property["id"], "start_date": start, "end_date": end},
            headers=guest_headers,
        )
        response = await client.get("/api/properties", headers=guest_headers)
        assert test_property["id"] in {p["id"] for p in response.json()}
