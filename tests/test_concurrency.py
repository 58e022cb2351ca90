"""
Racing writers against the same rows; the ledger must end up in a state
some serial order could have produced.

Every database call runs in its own task. The active connection is tracked
in a context variable, and tasks inherit their parent's context, so the
test task itself never touches the database.
"""

import asyncio

import pytest

from eventledger.errors import AlreadyCheckedIn, DuplicateRegistration, EventFull, NotFound
from eventledger.schemas.event import CreateEventRequest
from eventledger.services.attendance_service import attendance_service
from eventledger.services.event_service import event_service
from eventledger.services.identity_service import identity_service
from eventledger.services.registration_service import registration_service

pytestmark = pytest.mark.anyio


async def run(coro):
    return await asyncio.create_task(coro)


async def race(*coros):
    return await run(_gather(coros))


async def _gather(coros):
    return await asyncio.gather(*coros, return_exceptions=True)


async def make_event(capacity):
    owner = await run(
        identity_service.create_user("Owner", "owner@example.com", "owner-password", role="admin")
    )
    event_id = await run(event_service.create_event(
        owner,
        CreateEventRequest(title="Race", date="2026-11-05T18:00:00", capacity=capacity)
    ))
    return owner, event_id


def split(results):
    ok = [r for r in results if not isinstance(r, Exception)]
    failed = [r for r in results if isinstance(r, Exception)]
    return ok, failed


async def test_same_email_registers_once(db):
    _, event_id = await make_event(capacity=5)

    results = await race(
        *[registration_service.register(event_id, "Ann", "ann@example.com") for _ in range(4)]
    )

    ok, failed = split(results)
    assert len(ok) == 1
    assert all(isinstance(e, DuplicateRegistration) for e in failed)
    assert await run(registration_service.count_for_event(event_id)) == 1


async def test_last_seat_goes_to_one_registrant(db):
    _, event_id = await make_event(capacity=1)

    results = await race(
        registration_service.register(event_id, "Ann", "ann@example.com"),
        registration_service.register(event_id, "Bob", "bob@example.com"),
        registration_service.register(event_id, "Cid", "cid@example.com"),
    )

    ok, failed = split(results)
    assert len(ok) == 1
    assert all(isinstance(e, EventFull) for e in failed)
    assert await run(registration_service.count_for_event(event_id)) == 1


async def test_concurrent_check_ins_mark_once(db):
    owner, event_id = await make_event(capacity=5)
    registration_id = await run(registration_service.register(event_id, "Ann", "ann@example.com"))

    results = await race(
        attendance_service.check_in_by_email(event_id, "ann@example.com"),
        attendance_service.check_in_by_email(event_id, "ann@example.com"),
        attendance_service.check_in(registration_id, owner),
    )

    ok, failed = split(results)
    assert len(ok) == 1
    assert all(isinstance(e, AlreadyCheckedIn) for e in failed)
    assert await run(attendance_service.status_of(registration_id)) == "attended"

    event = await run(event_service.get_event(event_id))
    assert event["attendance_count"] == 1


async def test_delete_during_registrations_leaves_no_orphans(db):
    owner, event_id = await make_event(capacity=50)

    results = await race(
        *[
            registration_service.register(event_id, f"Guest {i}", f"guest{i}@example.com")
            for i in range(5)
        ],
        event_service.delete_event(event_id, owner),
    )

    assert not any(isinstance(r, (DuplicateRegistration, EventFull)) for r in results)
    assert await run(registration_service.count_for_event(event_id)) == 0


async def test_second_of_two_deletes_is_not_found(db):
    owner, event_id = await make_event(capacity=5)
    await run(registration_service.register(event_id, "Ann", "ann@example.com"))

    results = await race(
        event_service.delete_event(event_id, owner),
        event_service.delete_event(event_id, owner),
    )

    ok, failed = split(results)
    assert len(ok) == 1
    assert len(failed) == 1
    assert isinstance(failed[0], NotFound)
    assert await run(registration_service.count_for_event(event_id)) == 0
