"""Build trigger service tests — ignore, trigger, coalesce, skip, fail.

Invariants:
    - Non-trigger events return None and write nothing
    - First publish calls the hook once and is recorded as triggered
    - A second publish inside the debounce window is coalesced (no hook call)
    - Failed hook calls are persisted before the error propagates
    - Concurrent deliveries in one burst call the hook once
"""

import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from sitefeed.core.domain_types import BuildStatus
from sitefeed.core.errors import BuildTriggerError
from sitefeed.db.base import Base
from sitefeed.infrastructure.build_hook_client import BuildHookClient
from sitefeed.models.build_request import BuildRequest
from sitefeed.schemas.webhook import CmsWebhookPayload
from sitefeed.services.build_trigger import BuildTriggerService

TRIGGERS = ["entry.publish", "entry.unpublish"]


def _payload(event="entry.publish", **entry):
    return CmsWebhookPayload(
        event=event, model="post",
        entry=entry or {"id": 1, "documentId": "doc-1", "slug": "hello-world"},
    )


def _service(db, hook, debounce=30):
    return BuildTriggerService(db, hook, trigger_events=TRIGGERS, debounce_seconds=debounce)


async def _all_requests(db):
    result = await db.execute(select(BuildRequest))
    return list(result.scalars().all())


async def test_ignored_event_not_recorded(test_db, build_hook):
    result = await _service(test_db, build_hook["client"]).handle(_payload("entry.update"))
    assert result is None
    assert await _all_requests(test_db) == []
    assert build_hook["calls"] == []


async def test_publish_triggers_hook(test_db, build_hook):
    request = await _service(test_db, build_hook["client"]).handle(_payload())
    assert request.status == BuildStatus.TRIGGERED.value
    assert request.triggered_at is not None
    assert request.entry_id == "doc-1"
    assert request.entry_slug == "hello-world"
    assert len(build_hook["calls"]) == 1
    assert build_hook["calls"][0].method == "POST"


async def test_second_publish_inside_window_coalesced(test_db, build_hook):
    service = _service(test_db, build_hook["client"])
    first = await service.handle(_payload())
    second = await service.handle(_payload("entry.unpublish"))
    assert first.status == BuildStatus.TRIGGERED.value
    assert second.status == BuildStatus.COALESCED.value
    assert second.triggered_at is None
    assert len(build_hook["calls"]) == 1


async def test_publish_after_window_triggers_again(test_db, build_hook):
    old = datetime.now(timezone.utc) - timedelta(minutes=5)
    test_db.add(BuildRequest(
        event="entry.publish", status=BuildStatus.TRIGGERED.value,
        created_at=old, triggered_at=old,
    ))
    await test_db.commit()

    request = await _service(test_db, build_hook["client"]).handle(_payload())
    assert request.status == BuildStatus.TRIGGERED.value
    assert len(build_hook["calls"]) == 1


async def test_zero_debounce_never_coalesces(test_db, build_hook):
    service = _service(test_db, build_hook["client"], debounce=0)
    await service.handle(_payload())
    second = await service.handle(_payload())
    assert second.status == BuildStatus.TRIGGERED.value
    assert len(build_hook["calls"]) == 2


async def test_no_hook_configured_skips(test_db):
    request = await _service(test_db, None).handle(_payload())
    assert request.status == BuildStatus.SKIPPED.value


async def test_hook_failure_recorded_then_raised(test_db, build_hook):
    build_hook["status"] = 500
    with pytest.raises(BuildTriggerError) as exc:
        await _service(test_db, build_hook["client"]).handle(_payload())
    assert exc.value.status_code == 500
    assert exc.value.context.event == "entry.publish"

    rows = await _all_requests(test_db)
    assert len(rows) == 1
    assert rows[0].status == BuildStatus.FAILED.value
    assert "HTTP 500" in rows[0].error


async def test_failed_build_does_not_open_debounce_window(test_db, build_hook):
    service = _service(test_db, build_hook["client"])
    build_hook["status"] = 502
    with pytest.raises(BuildTriggerError):
        await service.handle(_payload())
    build_hook["status"] = 200
    request = await service.handle(_payload())
    assert request.status == BuildStatus.TRIGGERED.value


async def test_list_recent_filters_and_orders(test_db):
    base = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)
    for i, status in enumerate(["triggered", "coalesced", "failed", "triggered"]):
        test_db.add(BuildRequest(
            event="entry.publish", status=status,
            created_at=base + timedelta(seconds=i),
        ))
    await test_db.commit()

    service = _service(test_db, None)
    recent = await service.list_recent(limit=2)
    assert [r.status for r in recent] == ["triggered", "failed"]
    triggered = await service.list_recent(status="triggered")
    assert len(triggered) == 2


async def test_concurrent_publishes_call_hook_once(tmp_path):
    # Separate connections per session, like a real pool
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'builds.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    calls = []

    async def slow_hook(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        await asyncio.sleep(0.05)
        return httpx.Response(200, json={"ok": True})

    hook = BuildHookClient("https://deploy.test/hooks/build", transport=httpx.MockTransport(slow_hook))
    lock = asyncio.Lock()
    try:
        async with factory() as db_a, factory() as db_b:
            results = await asyncio.gather(
                BuildTriggerService(db_a, hook, TRIGGERS, 30, lock=lock).handle(_payload()),
                BuildTriggerService(db_b, hook, TRIGGERS, 30, lock=lock).handle(_payload()),
            )
        assert sorted(r.status for r in results) == ["coalesced", "triggered"]
        assert len(calls) == 1
    finally:
        await hook.aclose()
        await engine.dispose()


async def test_services_share_process_lock_by_default(test_db):
    first = _service(test_db, None)
    second = _service(test_db, None)
    assert first.lock is second.lock
