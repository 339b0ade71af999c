"""
Trip store: CRUD, visibility rules and cascade deletion.
"""

import uuid
from decimal import Decimal

import pytest
from sqlalchemy import select, func

from app.models.expense.expense_models import Expense
from app.models.trips.trip_collaborator import TripCollaborator


@pytest.mark.asyncio
async def test_create_trip(client, owner):
    response = await client.post(
        "/trips",
        json={
            "destination": "Kyoto",
            "purpose": "Conference",
            "start_date": "2026-12-01",
            "end_date": "2026-12-05",
            "budget": "1500.50",
            "notes": "Bring adapters",
        },
        headers=owner.headers,
    )
    assert response.status_code == 201
    data = response.json()
    assert data["owner_id"] == owner.id
    assert Decimal(data["budget"]) == Decimal("1500.50")
    assert data["version"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"budget": "-1"},
        {"budget": "1e13"},
        {"budget": "10.005"},
        {"start_date": "2026-11-10", "end_date": "2026-11-01"},
        {"destination": ""},
    ],
)
async def test_create_trip_rejects_invalid_values(client, owner, create_trip, overrides):
    payload = {
        "destination": "Lisbon",
        "purpose": "Team offsite",
        "start_date": "2026-11-02",
        "end_date": "2026-11-06",
        "budget": "1000",
    }
    payload.update(overrides)
    response = await client.post("/trips", json=payload, headers=owner.headers)
    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_INVALID_INPUT"


@pytest.mark.asyncio
async def test_get_trip_visibility(client, trip, owner, collaborator, create_user):
    outsider = await create_user("dave")

    as_owner = await client.get(f"/trips/{trip['id']}", headers=owner.headers)
    assert as_owner.status_code == 200
    assert as_owner.json()["owner"]["username"] == "owner"

    as_outsider = await client.get(f"/trips/{trip['id']}", headers=outsider.headers)
    assert as_outsider.status_code == 403

    # pending collaborators cannot see the trip yet
    await client.post(
        f"/collaborations/{trip['id']}/invite",
        json={"email": collaborator.email, "budget_contribution": 50},
        headers=owner.headers,
    )
    pending = await client.get(f"/trips/{trip['id']}", headers=collaborator.headers)
    assert pending.status_code == 403

    await client.patch(
        f"/collaborations/{trip['id']}/respond",
        json={"status": "accepted"},
        headers=collaborator.headers,
    )
    accepted = await client.get(f"/trips/{trip['id']}", headers=collaborator.headers)
    assert accepted.status_code == 200
    assert accepted.json()["collaborators"][0]["status"] == "accepted"


@pytest.mark.asyncio
async def test_trip_detail_is_cached_and_invalidated(client, trip, owner, collaborator, redis_client):
    key = f"trips:id:{trip['id']}"
    first = await client.get(f"/trips/{trip['id']}", headers=owner.headers)
    assert first.status_code == 200
    assert key in redis_client.store

    await client.post(
        f"/collaborations/{trip['id']}/invite",
        json={"email": collaborator.email, "budget_contribution": 10},
        headers=owner.headers,
    )
    assert key not in redis_client.store

    refreshed = await client.get(f"/trips/{trip['id']}", headers=owner.headers)
    assert len(refreshed.json()["collaborators"]) == 1


@pytest.mark.asyncio
async def test_list_trips_includes_accepted_collaborations(client, accepted_trip, create_trip, owner, collaborator):
    own_trip = await create_trip(collaborator, destination="Oslo", start_date="2027-01-10", end_date="2027-01-12")

    response = await client.get("/trips", headers=collaborator.headers)
    assert response.status_code == 200
    ids = [t["id"] for t in response.json()]
    # newest start date first
    assert ids == [own_trip["id"], accepted_trip["id"]]

    owner_view = await client.get("/trips", headers=owner.headers)
    assert [t["id"] for t in owner_view.json()] == [accepted_trip["id"]]


@pytest.mark.asyncio
async def test_list_active_trips(client, owner, create_trip):
    await create_trip(owner, destination="Past", start_date="2025-01-01", end_date="2025-01-05")
    upcoming = await create_trip(owner, destination="Future", start_date="2030-01-01", end_date="2030-01-05")

    response = await client.get("/trips/active", headers=owner.headers)
    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == [upcoming["id"]]


@pytest.mark.asyncio
async def test_update_trip(client, trip, owner, accepted_trip, collaborator):
    forbidden = await client.put(
        f"/trips/{trip['id']}", json={"budget": "5"}, headers=collaborator.headers
    )
    assert forbidden.status_code == 403

    bad_dates = await client.put(
        f"/trips/{trip['id']}", json={"end_date": "2026-10-01"}, headers=owner.headers
    )
    assert bad_dates.status_code == 400

    current = (await client.get(f"/trips/{trip['id']}", headers=owner.headers)).json()
    response = await client.put(
        f"/trips/{trip['id']}",
        json={"budget": "1200", "notes": "Updated", "expected_version": current["version"]},
        headers=owner.headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert Decimal(data["budget"]) == Decimal("1200")
    assert data["version"] == current["version"] + 1

    stale = await client.put(
        f"/trips/{trip['id']}",
        json={"budget": "1300", "expected_version": current["version"]},
        headers=owner.headers,
    )
    assert stale.status_code == 409
    assert stale.json()["error_code"] == "ERR_CONFLICT"


@pytest.mark.asyncio
async def test_delete_trip_cascades_to_expenses(client, accepted_trip, owner, collaborator, db_session):
    trip_id = accepted_trip["id"]
    await client.post(f"/settlements/trips/{trip_id}/pay-contribution", headers=collaborator.headers)
    await client.post(
        f"/settlements/trips/{trip_id}/expenses",
        json={"amount": "45.50", "description": "taxi", "category": "Transportation"},
        headers=collaborator.headers,
    )

    not_owner = await client.delete(f"/trips/{trip_id}", headers=collaborator.headers)
    assert not_owner.status_code == 403

    response = await client.delete(f"/trips/{trip_id}", headers=owner.headers)
    assert response.status_code == 200

    expenses = await db_session.scalar(
        select(func.count(Expense.id)).where(Expense.trip_id == uuid.UUID(trip_id))
    )
    collaborators = await db_session.scalar(
        select(func.count(TripCollaborator.id)).where(TripCollaborator.trip_id == uuid.UUID(trip_id))
    )
    assert expenses == 0
    assert collaborators == 0

    gone = await client.get(f"/trips/{trip_id}", headers=owner.headers)
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_trip_expenses_listing(client, accepted_trip, owner, collaborator, create_user):
    trip_id = accepted_trip["id"]
    await client.post(
        f"/settlements/trips/{trip_id}/expenses",
        json={"amount": "12", "description": "coffee"},
        headers=collaborator.headers,
    )
    outsider = await create_user("dave")

    denied = await client.get(f"/trips/{trip_id}/expenses", headers=outsider.headers)
    assert denied.status_code == 403

    listed = await client.get(f"/trips/{trip_id}/expenses", headers=owner.headers)
    assert listed.status_code == 200
    assert [e["description"] for e in listed.json()] == ["coffee"]


@pytest.mark.asyncio
async def test_malformed_trip_id_is_invalid_input(client, owner):
    response = await client.get("/trips/not-a-valid-id", headers=owner.headers)
    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_INVALID_INPUT"

    unknown = await client.get(f"/trips/{uuid.uuid4()}", headers=owner.headers)
    assert unknown.status_code == 404


@pytest.mark.asyncio
async def test_all_expenses_grouped_by_trip(client, accepted_trip, create_trip, owner, collaborator, create_user):
    trip_id = accepted_trip["id"]
    await client.post(f"/settlements/trips/{trip_id}/pay-contribution", headers=collaborator.headers)
    await client.post(
        f"/settlements/trips/{trip_id}/expenses",
        json={"amount": "12", "description": "coffee"},
        headers=collaborator.headers,
    )
    await create_trip(owner, destination="Porto")

    dave = await create_user("dave")
    erin = await create_user("erin")
    other_trip = await create_trip(dave, destination="Madrid")
    await client.post(
        f"/collaborations/{other_trip['id']}/invite",
        json={"email": erin.email, "budget_contribution": 0},
        headers=dave.headers,
    )
    await client.patch(
        f"/collaborations/{other_trip['id']}/respond", json={"status": "accepted"}, headers=erin.headers
    )
    await client.post(
        f"/settlements/trips/{other_trip['id']}/expenses",
        json={"amount": "30", "description": "tapas"},
        headers=erin.headers,
    )

    for user in (owner, collaborator):
        response = await client.get("/trips/all-expenses", headers=user.headers)
        assert response.status_code == 200
        grouped = response.json()
        assert list(grouped) == [trip_id]
        assert sorted(e["description"] for e in grouped[trip_id]) == ["Contribution payment from carol", "coffee"]

    grouped = (await client.get("/trips/all-expenses", headers=erin.headers)).json()
    assert list(grouped) == [other_trip["id"]]
    assert grouped[other_trip["id"]][0]["payer_name"] == "erin"

    loner = await create_user("frank")
    empty = await client.get("/trips/all-expenses", headers=loner.headers)
    assert empty.status_code == 200
    assert empty.json() == {}
