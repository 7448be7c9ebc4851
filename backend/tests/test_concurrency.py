"""
Concurrency Tests.

Validates that duplicate and conflicting parcel updates are rejected.
"""

import asyncio

import pytest

from backend.app.core.exceptions import ConcurrentModificationError, DuplicateRequestError
from backend.app.models.parcel_enums import ParcelStatus
from backend.app.repositories.memory import InMemoryDataAccess, InMemoryStore
from backend.app.repositories.sql import SqlDataAccess
from backend.app.services.request_guard import INFLIGHT_PREFIX, parcel_action_guard


@pytest.mark.asyncio
async def test_guard_rejects_second_holder():
    async with parcel_action_guard("p2"):
        with pytest.raises(DuplicateRequestError):
            async with parcel_action_guard("p2"):
                pass

        # Other parcels are unaffected
        async with parcel_action_guard("p3"):
            pass

    # Released on exit
    async with parcel_action_guard("p2"):
        pass


@pytest.mark.asyncio
async def test_guard_released_on_error():
    with pytest.raises(RuntimeError):
        async with parcel_action_guard("p2"):
            raise RuntimeError("handler failed")

    async with parcel_action_guard("p2"):
        pass


@pytest.mark.asyncio
async def test_expired_holder_does_not_release_successor(redis_client_session):
    """A request that outlived its lock must not free the lock of the request after it."""
    first = parcel_action_guard("p2")
    await first.__aenter__()

    # TTL elapsed while the first request was still running
    await redis_client_session.delete(f"{INFLIGHT_PREFIX}p2")

    second = parcel_action_guard("p2")
    await second.__aenter__()
    await first.__aexit__(None, None, None)

    with pytest.raises(DuplicateRequestError):
        async with parcel_action_guard("p2"):
            pass

    await second.__aexit__(None, None, None)
    async with parcel_action_guard("p2"):
        pass


@pytest.mark.asyncio
async def test_concurrent_requests_for_same_parcel():
    """Two overlapping requests: exactly one gets the lock."""
    entered = asyncio.Event()
    release = asyncio.Event()

    async def slow_request():
        async with parcel_action_guard("p2"):
            entered.set()
            await release.wait()
            return "done"

    first = asyncio.create_task(slow_request())
    await entered.wait()

    with pytest.raises(DuplicateRequestError):
        async with parcel_action_guard("p2"):
            pass

    release.set()
    assert await first == "done"


@pytest.mark.asyncio
async def test_stale_version_rejected(db_session):
    """A writer still holding version 1 is rejected once the parcel moved on."""
    first = SqlDataAccess(db_session)
    parcel = await first.parcels.get("p2")
    seen_version = parcel.version

    await first.parcels.update_status("p2", ParcelStatus.ACCEPTED, expected_version=seen_version)
    await first.commit()

    with pytest.raises(ConcurrentModificationError):
        await first.parcels.update_status("p2", ParcelStatus.DECLINED, expected_version=seen_version)


@pytest.mark.asyncio
async def test_in_memory_concurrent_transitions():
    """Version guard on the in-memory backend with interleaved writers."""
    data = InMemoryDataAccess(InMemoryStore(latency=0.01))

    async def accept(version):
        return await data.parcels.update_status("p2", ParcelStatus.ACCEPTED, expected_version=version)

    results = await asyncio.gather(accept(1), accept(1), return_exceptions=True)
    failures = [r for r in results if isinstance(r, ConcurrentModificationError)]
    assert len(failures) == 1
    assert (await data.parcels.get("p2")).version == 2
