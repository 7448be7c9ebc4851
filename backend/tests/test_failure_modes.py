"""
Failure Injection Tests.

Validates resilience against component failures: the text-generation
provider, Redis and the storage backend.
"""

import pytest
from unittest.mock import AsyncMock
from httpx import ASGITransport, AsyncClient
from redis.exceptions import ConnectionError as RedisConnectionError
from sqlalchemy.exc import OperationalError

from backend.app.core.exceptions import DataAccessError
from backend.app.main import app
from backend.app.core.reliability import CircuitBreaker, CircuitOpenError, ai_circuit_breaker
from backend.app.repositories.sql import SqlParcelGateway
from backend.app.services.text_generation import (
    FAILED_ANALYSIS,
    TextGenerationError,
    TextGenerator,
    generate_dashboard_analysis,
)
import backend.app.core.redis_client as redis_client_module


class BrokenRedis:
    """Redis stand-in whose every command fails."""

    async def set(self, *args, **kwargs):
        raise RedisConnectionError("Connection refused")

    async def exists(self, *args, **kwargs):
        raise RedisConnectionError("Connection refused")

    async def delete(self, *args, **kwargs):
        raise RedisConnectionError("Connection refused")

    async def ping(self):
        raise RedisConnectionError("Connection refused")



class ReleaseFailsRedis:
    """Redis stand-in that grants locks but drops before they are released."""

    def __init__(self):
        self.store = {}

    async def set(self, key, value, ex=None, nx=False):
        if nx and key in self.store:
            return None
        self.store[key] = value
        return True

    async def get(self, key):
        return self.store.get(key)

    async def exists(self, *args, **kwargs):
        return 0

    async def delete(self, *args, **kwargs):
        raise RedisConnectionError("Connection reset")

@pytest.mark.asyncio
async def test_circuit_breaker_activates():
    """Test that circuit breaker opens after threshold failures."""
    cb = CircuitBreaker(failure_threshold=2, reset_timeout=1)

    async def failing_func():
        raise ValueError("Boom")

    for _ in range(2):
        with pytest.raises(ValueError):
            await cb.call(failing_func)

    assert cb.state == "OPEN"
    with pytest.raises(CircuitOpenError):
        await cb.call(failing_func)


@pytest.mark.asyncio
async def test_circuit_breaker_half_open_recovers():
    cb = CircuitBreaker(failure_threshold=1, reset_timeout=0)

    async def failing_func():
        raise ValueError("Boom")

    async def ok_func():
        return "ok"

    with pytest.raises(ValueError):
        await cb.call(failing_func)
    assert cb.state == "OPEN"

    cb.last_failure_time -= 1
    assert await cb.call(ok_func) == "ok"
    assert cb.state == "CLOSED"
    assert cb.failures == 0


@pytest.mark.asyncio
async def test_open_circuit_skips_provider():
    generator = TextGenerator(api_key="test-key")
    generator.generate = AsyncMock(side_effect=TextGenerationError("timeout"))

    for _ in range(ai_circuit_breaker.failure_threshold):
        assert await generate_dashboard_analysis(generator, {}, "ADMIN") == FAILED_ANALYSIS
    assert ai_circuit_breaker.state == "OPEN"

    generator.generate.reset_mock()
    assert await generate_dashboard_analysis(generator, {}, "ADMIN") == FAILED_ANALYSIS
    generator.generate.assert_not_called()


@pytest.mark.asyncio
async def test_redis_outage_fails_open(client, staff_headers, monkeypatch):
    """Token revocation and the in-flight guard degrade without blocking requests."""
    monkeypatch.setattr(redis_client_module, "redis_client", BrokenRedis())

    response = await client.put("/v1/parcels/p2", json={"status": "Accepted"}, headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "Accepted"

    health = await client.get("/health")
    assert health.json()["redis"] is False


@pytest.mark.asyncio
async def test_lock_release_failure_keeps_committed_outcome(client, staff_headers, client_a_headers, monkeypatch):
    """Losing Redis after the write still reports success and runs the follow-up steps."""
    monkeypatch.setattr(redis_client_module, "redis_client", ReleaseFailsRedis())

    response = await client.put("/v1/parcels/p2", json={"status": "Accepted"}, headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "Accepted"

    titles = [n["title"] for n in (await client.get("/v1/notifications", headers=client_a_headers)).json()]
    assert titles == ["Parcel Accepted"]


@pytest.mark.asyncio
async def test_storage_failure_surfaces_typed_error(client, staff_headers, monkeypatch):
    async def broken_get_all(self):
        raise DataAccessError("parcels.get_all") from OperationalError("SELECT", {}, Exception("db down"))

    monkeypatch.setattr(SqlParcelGateway, "get_all", broken_get_all)

    response = await client.get("/v1/parcels", headers=staff_headers)
    assert response.status_code == 503
    body = response.json()
    assert body["error_code"] == "ERR_STORAGE_001"
    assert body["details"] == {"operation": "parcels.get_all"}


@pytest.mark.asyncio
async def test_driver_error_wrapped(db_session, mocker):
    gateway = SqlParcelGateway(db_session)
    mocker.patch.object(db_session, "execute", side_effect=OperationalError("SELECT", {}, Exception("db down")))

    with pytest.raises(DataAccessError):
        await gateway.get("p1")


@pytest.mark.asyncio
async def test_unhandled_error_returns_envelope(staff_headers, monkeypatch):
    """Unexpected errors come back as the JSON error envelope, not a traceback."""
    async def exploding_get_all(self):
        raise RuntimeError("unexpected")

    monkeypatch.setattr(SqlParcelGateway, "get_all", exploding_get_all)

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/v1/parcels", headers=staff_headers)

    assert app.debug is False
    assert response.status_code == 500
    assert response.json()["error_code"] == "ERR_INTERNAL_SERVER"
