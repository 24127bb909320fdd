"""Build Trigger — turns CMS publish/unpublish webhooks into site rebuilds.

Invariants:
    - Events outside trigger_events are ignored and never persisted
    - At most one hook call per debounce window; later requests are recorded as coalesced
    - No hook configured -> request recorded as skipped
    - A failed hook call is committed as status=failed BEFORE BuildTriggerError propagates
    - The debounce check, hook call and commit run under one lock, so concurrent
      deliveries in a burst produce one triggered build and the rest coalesced

Design Decisions:
    - Hook called inline (not BackgroundTasks): the CMS sees a 502 when the
      rebuild could not be started, and the row reflects the real outcome
"""

import asyncio
import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sitefeed.core.domain_types import BuildStatus
from sitefeed.core.errors import BuildTriggerError, ErrorContext
from sitefeed.core.webhook_events import (
    should_trigger,
    summarize_entry,
    within_debounce,
)
from sitefeed.infrastructure.build_hook_client import BuildHookClient
from sitefeed.models.build_request import BuildRequest
from sitefeed.schemas.webhook import CmsWebhookPayload

logger = logging.getLogger(__name__)

# Shared by every BuildTriggerService built for a request in this process
trigger_lock = asyncio.Lock()


class BuildTriggerService:
    """Records build requests and calls the deploy hook."""

    def __init__(
        self,
        db: AsyncSession,
        hook: BuildHookClient | None,
        trigger_events: list[str],
        debounce_seconds: int,
        lock: asyncio.Lock | None = None,
    ):
        self.db = db
        self.hook = hook
        self.trigger_events = trigger_events
        self.debounce_seconds = debounce_seconds
        self.lock = lock if lock is not None else trigger_lock

    async def handle(self, payload: CmsWebhookPayload) -> BuildRequest | None:
        """Process one webhook delivery. Returns None when the event is ignored."""
        if not should_trigger(payload.event, self.trigger_events):
            logger.info(
                f"Ignoring webhook event {payload.event}",
                extra={"event": payload.event},
            )
            return None

        now = datetime.now(timezone.utc)
        request = BuildRequest(
            event=payload.event, model=payload.model,
            status=BuildStatus.SKIPPED.value, created_at=now,
            **summarize_entry(payload.entry),
        )
        self.db.add(request)

        async with self.lock:
            if within_debounce(await self._last_triggered_at(), now, self.debounce_seconds):
                request.status = BuildStatus.COALESCED.value
            elif self.hook is not None:
                await self._call_hook(request, payload, now)
            await self.db.commit()
        await self.db.refresh(request)

        logger.info(
            f"Build request {request.status}",
            extra={"event": payload.event, "build_id": str(request.id)},
        )
        return request

    async def list_recent(
        self, limit: int = 20, offset: int = 0, status: str | None = None,
    ) -> list[BuildRequest]:
        query = select(BuildRequest).order_by(BuildRequest.created_at.desc())
        if status:
            query = query.where(BuildRequest.status == status)
        result = await self.db.execute(query.limit(limit).offset(offset))
        return list(result.scalars().all())

    async def _call_hook(
        self, request: BuildRequest, payload: CmsWebhookPayload, now: datetime,
    ) -> None:
        try:
            await self.hook.trigger({
                "event": payload.event,
                "model": payload.model,
                "entry_id": request.entry_id,
            })
        except BuildTriggerError as e:
            request.status = BuildStatus.FAILED.value
            request.error = e.message
            await self.db.commit()
            logger.error(
                f"Build hook failed for {payload.event}: {e.message}",
                extra={"event": payload.event, "error_code": e.code,
                       "status_code": e.status_code},
            )
            e.context = ErrorContext(event=payload.event)
            raise
        request.status = BuildStatus.TRIGGERED.value
        request.triggered_at = now

    async def _last_triggered_at(self) -> datetime | None:
        result = await self.db.execute(
            select(BuildRequest.triggered_at)
            .where(BuildRequest.status == BuildStatus.TRIGGERED.value)
            .order_by(BuildRequest.triggered_at.desc())
            .limit(1),
        )
        last = result.scalar_one_or_none()
        if last is not None and last.tzinfo is None:
            # SQLite drops tzinfo; stored values are always UTC
            last = last.replace(tzinfo=timezone.utc)
        return last
