"""
Tests for the in-memory data access backend.

Covers the gateways directly and the API running with
USE_MOCK_BACKEND enabled.
"""

from datetime import date

import pytest

from backend.app.core.exceptions import (
    AccountInactiveError,
    ConcurrentModificationError,
    DuplicateTrackingNumberError,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    ResourceNotFoundError,
)
from backend.app.models.enums import UserRole
from backend.app.models.parcel_enums import ParcelStatus
from backend.app.repositories.memory import InMemoryDataAccess, InMemoryStore


@pytest.fixture
def data():
    return InMemoryDataAccess(InMemoryStore())


@pytest.mark.asyncio
async def test_seeded_with_demo_dataset(data):
    users = await data.users.get_all()
    parcels = await data.parcels.get_all()
    assert sorted(u.id for u in users) == ["u1", "u2", "u3", "u4", "u5"]
    assert [p.id for p in parcels] == ["p1", "p2", "p3", "p4"]


@pytest.mark.asyncio
async def test_login_demo_admin(data):
    user = await data.auth.login("admin@eparcel.com", "password")
    assert user.id == "u1"
    assert user.role == UserRole.ADMIN


@pytest.mark.asyncio
async def test_login_wrong_password(data):
    with pytest.raises(InvalidCredentialsError):
        await data.auth.login("admin@eparcel.com", "wrong")


@pytest.mark.asyncio
async def test_login_unknown_email(data):
    with pytest.raises(InvalidCredentialsError):
        await data.auth.login("nobody@eparcel.com", "password")


@pytest.mark.asyncio
async def test_login_inactive_account(data):
    with pytest.raises(AccountInactiveError):
        await data.auth.login("sarah@eparcel.com", "password")


@pytest.mark.asyncio
async def test_register_creates_inactive_client(data):
    user = await data.auth.register("New Client", "newclient@x.com", "secret1")
    assert user.role == UserRole.CLIENT
    assert user.is_active is False
    assert user.id.startswith("u")
    with pytest.raises(AccountInactiveError):
        await data.auth.login("newclient@x.com", "secret1")


@pytest.mark.asyncio
async def test_register_duplicate_email(data):
    with pytest.raises(EmailAlreadyRegisteredError):
        await data.auth.register("Again", "clienta@corp.com", "secret1")


@pytest.mark.asyncio
async def test_toggle_status(data):
    user = await data.users.toggle_status("u3", True)
    assert user.is_active is True
    assert (await data.auth.login("sarah@eparcel.com", "password")).id == "u3"


@pytest.mark.asyncio
async def test_toggle_status_unknown_user(data):
    with pytest.raises(ResourceNotFoundError):
        await data.users.toggle_status("missing", False)


@pytest.mark.asyncio
async def test_create_parcel_forces_pending_and_prepends(data):
    parcel = await data.parcels.create(
        tracking_number="EP-5555",
        sender="Depot",
        client_id="u5",
        description="Tyres",
        handled_by="u2",
        today=date(2024, 3, 1),
    )
    assert parcel.status == ParcelStatus.PENDING
    assert parcel.date_created == parcel.date_updated == date(2024, 3, 1)
    assert parcel.version == 1
    assert (await data.parcels.get_all())[0].id == parcel.id


@pytest.mark.asyncio
async def test_create_parcel_duplicate_tracking_number(data):
    with pytest.raises(DuplicateTrackingNumberError):
        await data.parcels.create("EP-8832", "Depot", "u4", "Again")


@pytest.mark.asyncio
async def test_update_status_stamps_date_and_bumps_version(data):
    parcel = await data.parcels.update_status("p2", ParcelStatus.ACCEPTED, today=date(2024, 3, 2))
    assert parcel.status == ParcelStatus.ACCEPTED
    assert parcel.date_updated == date(2024, 3, 2)
    assert parcel.version == 2


@pytest.mark.asyncio
async def test_update_status_rejects_stale_version(data):
    with pytest.raises(ConcurrentModificationError):
        await data.parcels.update_status("p2", ParcelStatus.ACCEPTED, expected_version=7)
    assert (await data.parcels.get("p2")).status == ParcelStatus.PENDING


@pytest.mark.asyncio
async def test_delete_parcel(data):
    await data.parcels.delete("p4")
    assert await data.parcels.get("p4") is None
    with pytest.raises(ResourceNotFoundError):
        await data.parcels.delete("p4")


@pytest.mark.asyncio
async def test_api_login_with_mock_backend(client, mock_backend):
    response = await client.post("/v1/login", json={"email": "john@eparcel.com", "password": "password"})
    assert response.status_code == 200
    assert response.json()["user"]["id"] == "u2"


@pytest.mark.asyncio
async def test_api_transition_with_mock_backend(client, mock_backend, staff_headers):
    response = await client.put("/v1/parcels/p2", json={"status": "Accepted"}, headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "Accepted"

    stored = next(p for p in mock_backend.parcels if p.id == "p2")
    assert stored.status == ParcelStatus.ACCEPTED
    assert stored.date_updated == date.today()


@pytest.mark.asyncio
async def test_api_client_visibility_with_mock_backend(client, mock_backend, client_a_headers):
    response = await client.get("/v1/parcels", headers=client_a_headers)
    assert response.status_code == 200
    assert {p["trackingNumber"] for p in response.json()["parcels"]} == {"EP-8832", "EP-9941", "EP-3344"}
