"""
Integration tests for the Authentication Flow.

Verifies Login -> Me -> Logout, inactive accounts, and client
self-registration pending admin approval.
"""

import logging

import pytest
from sqlalchemy import select

from backend.app.core.jwt import create_access_token
from backend.app.models.audit_log import AuditLog
from backend.app.models.notification import Notification
from backend.app.services.audit import AuditAction


@pytest.mark.asyncio
async def test_admin_login_full_visibility(client):
    """Demo admin logs in and sees every parcel and both rosters."""
    response = await client.post("/v1/login", json={"email": "admin@eparcel.com", "password": "password"})
    assert response.status_code == 200
    body = response.json()
    assert body["tokenType"] == "bearer"
    assert body["user"]["role"] == "ADMIN"
    assert "hashedPassword" not in body["user"]
    assert "password" not in body["user"]

    headers = {"Authorization": f"Bearer {body['accessToken']}"}

    parcels = await client.get("/v1/parcels", headers=headers)
    assert parcels.json()["total"] == 4

    staff = await client.get("/v1/users", params={"role": "STAFF"}, headers=headers)
    clients = await client.get("/v1/users", params={"role": "CLIENT"}, headers=headers)
    assert {u["id"] for u in staff.json()["users"]} == {"u2", "u3"}
    assert {u["id"] for u in clients.json()["users"]} == {"u4", "u5"}


@pytest.mark.asyncio
async def test_login_wrong_password(client, db_session):
    response = await client.post("/v1/login", json={"email": "admin@eparcel.com", "password": "nope"})
    assert response.status_code == 401
    assert response.json()["error_code"] == "ERR_AUTH_003"
    assert response.json()["message"] == "Invalid credentials"

    result = await db_session.execute(select(AuditLog).where(AuditLog.action == AuditAction.LOGIN_FAILED))
    assert result.scalar_one().actor_username == "admin@eparcel.com"


@pytest.mark.asyncio
async def test_login_unknown_email(client):
    response = await client.post("/v1/login", json={"email": "ghost@eparcel.com", "password": "password"})
    assert response.status_code == 401
    assert response.json()["error_code"] == "ERR_AUTH_003"


@pytest.mark.asyncio
async def test_inactive_account_cannot_login(client):
    """Correct credentials on an inactive account: rejected, no token."""
    response = await client.post("/v1/login", json={"email": "sarah@eparcel.com", "password": "password"})
    assert response.status_code == 403
    body = response.json()
    assert body["error_code"] == "ERR_AUTH_004"
    assert body["message"] == "Account is inactive. Contact Admin."
    assert "accessToken" not in body


@pytest.mark.asyncio
async def test_register_creates_inactive_client(client, db_session):
    """Self-registration yields an inactive CLIENT that cannot log in yet."""
    response = await client.post(
        "/v1/register",
        json={"email": "newclient@x.com", "password": "secret123", "role": "ADMIN"},
    )
    assert response.status_code == 201
    user = response.json()
    assert user["role"] == "CLIENT"
    assert user["isActive"] is False
    assert user["name"] == "newclient"

    login = await client.post("/v1/login", json={"email": "newclient@x.com", "password": "secret123"})
    assert login.status_code == 403
    assert login.json()["error_code"] == "ERR_AUTH_004"

    # The active admin is told about the pending approval
    result = await db_session.execute(select(Notification).where(Notification.user_id == "u1"))
    notification = result.scalar_one()
    assert notification.title == "New Client Registration"


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    response = await client.post("/v1/register", json={"email": "clienta@corp.com", "password": "secret123"})
    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_USER_001"


@pytest.mark.asyncio
async def test_register_validation(client):
    response = await client.post("/v1/register", json={"email": "not-an-email", "password": "x"})
    assert response.status_code == 422
    assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_me(client, client_a_headers):
    response = await client.get("/v1/me", headers=client_a_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "u4"
    assert body["email"] == "clienta@corp.com"


@pytest.mark.asyncio
async def test_me_requires_token(client):
    response = await client.get("/v1/me")
    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_me_rejects_invalid_token(client):
    response = await client.get("/v1/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["message"] == "Could not validate credentials"
    assert response.json()["error_code"] == "ERR_AUTH_001"


@pytest.mark.asyncio
async def test_me_rejects_token_for_unknown_user(client):
    token = create_access_token(data={"sub": "ghost@eparcel.com", "user_id": "u999", "role": "CLIENT"})
    response = await client.get("/v1/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["error_code"] == "ERR_AUTH_001"


@pytest.mark.asyncio
async def test_logout_revokes_token(client):
    login = await client.post("/v1/login", json={"email": "clienta@corp.com", "password": "password"})
    headers = {"Authorization": f"Bearer {login.json()['accessToken']}"}

    response = await client.post("/v1/logout", headers=headers)
    assert response.status_code == 200
    assert response.json()["success"] is True

    response = await client.get("/v1/me", headers=headers)
    assert response.status_code == 401
    assert response.json()["message"] == "Token has been revoked"
    assert response.json()["error_code"] == "ERR_AUTH_002"


@pytest.mark.asyncio
async def test_request_log_line_carries_request_fields(client, caplog):
    with caplog.at_level(logging.INFO, logger="eparcel"):
        await client.get("/v1/me", headers={"X-Correlation-ID": "cid-123"})

    lines = [r.getMessage() for r in caplog.records if "cid=cid-123" in r.getMessage()]
    assert len(lines) == 1
    assert lines[0].startswith("GET /v1/me 40")
