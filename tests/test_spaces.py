from datetime import UTC, datetime, timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession


def space_payload(**overrides) -> dict:
    payload = {
        "owner_id": "host-1",
        "title": "Mission Driveway",
        "address": "500 Valencia St",
        "city": "San Francisco",
        "latitude": 37.7650,
        "longitude": -122.4216,
        "price_per_hour": "8.00",
    }
    payload.update(overrides)
    return payload


async def create_space(client: AsyncClient, **overrides) -> dict:
    response = await client.post("/api/v1/spaces", json=space_payload(**overrides))
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_and_get_space(client: AsyncClient, db_session: AsyncSession):
    created = await create_space(client, covered=True, max_height="6.5")
    assert created["is_active"] is True
    assert created["space_type"] == "driveway"
    assert Decimal(created["price_per_hour"]) == Decimal("8")

    response = await client.get(f"/api/v1/spaces/{created['id']}")
    assert response.status_code == 200
    assert response.json()["title"] == "Mission Driveway"


@pytest.mark.asyncio
async def test_get_space_not_found(client: AsyncClient, db_session: AsyncSession):
    response = await client.get("/api/v1/spaces/missing")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_create_space_rejects_large_discount(client: AsyncClient, db_session: AsyncSession):
    response = await client.post(
        "/api/v1/spaces",
        json=space_payload(first_hour_discount=True, discount_percentage="75"),
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_search_by_max_price(client: AsyncClient, db_session: AsyncSession):
    cheap = await create_space(client)
    await create_space(client, title="Union Square Garage", price_per_hour="20.00")

    response = await client.get("/api/v1/spaces", params={"max_price": "15"})
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 1
    assert [r["space"]["id"] for r in data["results"]] == [cheap["id"]]


@pytest.mark.asyncio
async def test_search_by_feature_flags(client: AsyncClient, db_session: AsyncSession):
    covered = await create_space(client, covered=True, security_camera=True)
    await create_space(client, title="Open Lot")
    tall = await create_space(client, title="Tall Garage", height_limit=8.0)

    response = await client.get("/api/v1/spaces", params={"covered": "true", "security": "true"})
    assert [r["space"]["id"] for r in response.json()["results"]] == [covered["id"]]

    # Spaces without a height limit take any vehicle
    response = await client.get("/api/v1/spaces", params={"height_limit": 7.5})
    ids = {r["space"]["id"] for r in response.json()["results"]}
    assert tall["id"] in ids
    assert len(ids) == 3

    response = await client.get("/api/v1/spaces", params={"ev_charging": "true"})
    assert response.json()["total"] == 0


@pytest.mark.asyncio
async def test_search_sorted_by_distance(client: AsyncClient, db_session: AsyncSession):
    far = await create_space(
        client, title="Oakland Lot", city="Oakland", latitude=37.8044, longitude=-122.2712
    )
    near = await create_space(client, title="Mission Driveway", price_per_hour="12.00")

    response = await client.get(
        "/api/v1/spaces",
        params={"latitude": 37.7650, "longitude": -122.4216},
    )
    results = response.json()["results"]
    assert [r["space"]["id"] for r in results] == [near["id"], far["id"]]
    assert results[0]["distance"] == 0.0
    assert results[1]["distance"] > 5

    response = await client.get(
        "/api/v1/spaces",
        params={"latitude": 37.7650, "longitude": -122.4216, "max_distance": 2},
    )
    assert [r["space"]["id"] for r in response.json()["results"]] == [near["id"]]

    response = await client.get(
        "/api/v1/spaces",
        params={"latitude": 37.7650, "longitude": -122.4216, "sort_by": "price"},
    )
    data = response.json()
    assert data["sort_by"] == "price"
    assert [r["space"]["id"] for r in data["results"]] == [far["id"], near["id"]]


@pytest.mark.asyncio
async def test_search_by_city(client: AsyncClient, db_session: AsyncSession):
    await create_space(client)
    oakland = await create_space(client, title="Oakland Lot", city="Oakland")

    response = await client.get("/api/v1/spaces", params={"city": "oak"})
    assert [r["space"]["id"] for r in response.json()["results"]] == [oakland["id"]]


@pytest.mark.asyncio
async def test_search_distance_requires_origin(client: AsyncClient, db_session: AsyncSession):
    response = await client.get("/api/v1/spaces", params={"max_distance": 5})
    assert response.status_code == 400
    assert response.json()["error"] == "invalid_input"


@pytest.mark.asyncio
async def test_space_events(client: AsyncClient, space_id: str):
    start = datetime.now(UTC) + timedelta(days=3)
    response = await client.post(
        f"/api/v1/spaces/{space_id}/events",
        json={
            "event_name": "Giants Home Game",
            "event_type": "sports",
            "start_date": start.isoformat(),
            "end_date": (start + timedelta(hours=5)).isoformat(),
            "multiplier": "2.0",
        },
    )
    assert response.status_code == 201, response.text
    assert Decimal(response.json()["multiplier"]) == Decimal("2")

    response = await client.get(f"/api/v1/spaces/{space_id}/events")
    assert response.status_code == 200
    assert [e["event_name"] for e in response.json()] == ["Giants Home Game"]


@pytest.mark.asyncio
async def test_space_event_validation(client: AsyncClient, space_id: str):
    start = datetime.now(UTC) + timedelta(days=3)
    response = await client.post(
        f"/api/v1/spaces/{space_id}/events",
        json={
            "event_name": "Backwards",
            "event_type": "concert",
            "start_date": start.isoformat(),
            "end_date": (start - timedelta(hours=1)).isoformat(),
        },
    )
    assert response.status_code == 422

    response = await client.get("/api/v1/spaces/missing/events")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_compatibility(client: AsyncClient, space_id: str):
    response = await client.post(
        f"/api/v1/spaces/{space_id}/compatibility",
        json={"vehicle_type": "sedan", "length": 15.5, "width": 6.0, "height": 4.8},
    )
    assert response.status_code == 200
    assert response.json() == {
        "space_id": space_id,
        "is_compatible": True,
        "issues": [],
        "warnings": [],
    }


@pytest.mark.asyncio
async def test_compatibility_reports_problems(client: AsyncClient, space_id: str):
    response = await client.post(
        f"/api/v1/spaces/{space_id}/compatibility",
        json={"vehicle_type": "truck", "length": 19.5, "height": 6.51, "is_electric": True},
    )
    data = response.json()
    assert data["is_compatible"] is False
    assert data["issues"][0].startswith("Vehicle too long: 19.5'")
    assert data["issues"][1].startswith("Vehicle too tall: 6.51'")
    assert data["issues"][2] == "Trucks not permitted in this space"
    assert data["warnings"] == ["No EV charging available at this location"]


@pytest.mark.asyncio
async def test_compatibility_with_malformed_dimensions(client: AsyncClient, space_id: str):
    response = await client.post(
        f"/api/v1/spaces/{space_id}/compatibility",
        json={"vehicle_type": "sedan", "length": "fifteen feet", "height": "4.8"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["is_compatible"] is False
    assert data["issues"] == [
        "Vehicle dimensions are invalid. Please update your vehicle information."
    ]
