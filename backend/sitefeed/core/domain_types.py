"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ResourceName and Slug are lowercase [a-z0-9-] strings once constructed
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ResourceName = NewType("ResourceName", str)   # e.g. "posts"
Slug = NewType("Slug", str)                   # [a-z0-9-]+


# ─── Enums ───────────────────────────────────────────────────────

class ViolationReason(str, Enum):
    """Why a CMS value was rejected. One per failed constraint."""
    NOT_AN_OBJECT = "not_an_object"
    MISSING = "missing"
    NULL = "null"
    WRONG_TYPE = "wrong_type"
    TOO_SHORT = "too_short"
    TOO_LONG = "too_long"
    PATTERN_MISMATCH = "pattern_mismatch"
    BELOW_MINIMUM = "below_minimum"
    ABOVE_MAXIMUM = "above_maximum"
    NOT_IN_CHOICES = "not_in_choices"
    INVALID_EMAIL = "invalid_email"
    INVALID_URL = "invalid_url"
    INVALID_SLUG = "invalid_slug"
    INVALID_DATETIME = "invalid_datetime"


class WebhookEvent(str, Enum):
    """Events a Strapi-style CMS sends to webhook receivers."""
    ENTRY_CREATE = "entry.create"
    ENTRY_UPDATE = "entry.update"
    ENTRY_DELETE = "entry.delete"
    ENTRY_PUBLISH = "entry.publish"
    ENTRY_UNPUBLISH = "entry.unpublish"
    MEDIA_CREATE = "media.create"
    MEDIA_UPDATE = "media.update"
    MEDIA_DELETE = "media.delete"


class BuildStatus(str, Enum):
    """BuildRequest lifecycle — maps to DB `status` column."""
    TRIGGERED = "triggered"
    COALESCED = "coalesced"
    SKIPPED = "skipped"
    FAILED = "failed"
