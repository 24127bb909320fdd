"""Webhook Events — pure rules for authenticating and classifying CMS webhooks.

Invariants:
    - An empty configured secret authenticates nothing
    - Secret comparison is constant-time (hmac.compare_digest)
    - Only events listed in trigger_events cause a build
    - A build inside the debounce window is coalesced, never re-triggered
"""

import hmac
from datetime import datetime, timedelta
from typing import Any


def verify_webhook_secret(authorization: str | None, secret: str) -> bool:
    """Accept 'Bearer <secret>' or the bare secret in the Authorization header."""
    if not secret or not authorization:
        return False
    token = authorization.strip()
    if token[:7].lower() == "bearer ":
        token = token[7:].strip()
    return hmac.compare_digest(token.encode(), secret.encode())


def should_trigger(event: str, trigger_events: list[str]) -> bool:
    return event in trigger_events


def within_debounce(
    last_triggered_at: datetime | None, now: datetime, debounce_seconds: int,
) -> bool:
    """True when a previous build is recent enough that this one should coalesce."""
    if last_triggered_at is None or debounce_seconds <= 0:
        return False
    return now - last_triggered_at < timedelta(seconds=debounce_seconds)


def summarize_entry(entry: dict[str, Any] | None) -> dict[str, str | None]:
    """Extract the identifying bits of a webhook entry (never its content)."""
    if not isinstance(entry, dict):
        return {"entry_id": None, "entry_slug": None}
    entry_id = entry.get("documentId") or entry.get("id")
    slug = entry.get("slug")
    return {
        "entry_id": str(entry_id)[:100] if entry_id is not None else None,
        "entry_slug": slug[:200] if isinstance(slug, str) else None,
    }
