"""Webhook Schemas — CMS webhook body and the acknowledgement we return.

Invariants:
    - event is required; everything else is optional (media events carry no model)
    - Unknown top-level keys from the CMS are ignored
"""

from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CmsWebhookPayload(BaseModel):
    """Body of a Strapi-style webhook delivery."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    event: str = Field(min_length=1, max_length=50)
    model: str | None = Field(None, max_length=100)
    uid: str | None = Field(None, max_length=200)
    created_at: datetime | None = Field(None, alias="createdAt")
    entry: dict[str, Any] | None = None


class WebhookAck(BaseModel):
    """What the webhook receiver did with a delivery."""
    status: Literal["triggered", "coalesced", "skipped", "ignored"]
    build_id: UUID | None = None
    event: str


class BuildRequestResponse(BaseModel):
    """Public view of a recorded build request."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event: str
    model: str | None
    entry_id: str | None
    entry_slug: str | None
    status: str
    error: str | None
    created_at: datetime
    triggered_at: datetime | None
