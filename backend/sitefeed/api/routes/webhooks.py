"""Webhook Routes — CMS publish/unpublish notifications and build history.

Invariants:
    - Authorization header checked before the body is looked at
    - 202 for every accepted delivery (triggered, coalesced, skipped, ignored)
    - 502 when the deploy hook refused the build (row already recorded as failed)
"""

import logging

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from sitefeed.config import Settings, get_settings
from sitefeed.core.domain_types import BuildStatus
from sitefeed.core.errors import WebhookAuthError
from sitefeed.core.webhook_events import verify_webhook_secret
from sitefeed.infrastructure.build_hook_client import (
    BuildHookClient, get_build_hook_client,
)
from sitefeed.infrastructure.database import get_db
from sitefeed.schemas.webhook import (
    BuildRequestResponse, CmsWebhookPayload, WebhookAck,
)
from sitefeed.services.build_trigger import BuildTriggerService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["webhooks"])


def get_build_trigger_service(
    db: AsyncSession = Depends(get_db),
    hook: BuildHookClient | None = Depends(get_build_hook_client),
    settings: Settings = Depends(get_settings),
) -> BuildTriggerService:
    return BuildTriggerService(
        db, hook,
        trigger_events=settings.build_trigger_events,
        debounce_seconds=settings.build_debounce_seconds,
    )


def require_webhook_secret(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    if not verify_webhook_secret(authorization, settings.webhook_secret):
        logger.warning("Rejected webhook delivery with bad or missing secret")
        raise WebhookAuthError()


@router.post(
    "/webhooks/cms",
    response_model=WebhookAck,
    status_code=status.HTTP_202_ACCEPTED,
    dependencies=[Depends(require_webhook_secret)],
)
async def receive_cms_webhook(
    body: CmsWebhookPayload,
    service: BuildTriggerService = Depends(get_build_trigger_service),
):
    """Receive a CMS webhook and start (or coalesce) a site rebuild."""
    request = await service.handle(body)
    if request is None:
        return WebhookAck(status="ignored", event=body.event)
    return WebhookAck(status=request.status, build_id=request.id, event=body.event)


@router.get("/builds", response_model=list[BuildRequestResponse])
async def list_builds(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    status_filter: BuildStatus | None = Query(None, alias="status"),
    service: BuildTriggerService = Depends(get_build_trigger_service),
):
    """Recent build requests, newest first."""
    return await service.list_recent(
        limit=limit, offset=offset,
        status=status_filter.value if status_filter else None,
    )
