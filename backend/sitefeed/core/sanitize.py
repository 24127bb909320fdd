"""Input Sanitization — slugs and filter values that reach the CMS query string.

Invariants:
    - A valid slug is non-empty and contains only [a-z0-9-]
    - require_slug() never rewrites input: it accepts or rejects
    - normalize_slug() is idempotent
"""

import re

from sitefeed.core.errors import InputValidationError

SLUG_PATTERN = r"^[a-z0-9-]+$"
SLUG_RE = re.compile(r"[a-z0-9-]+")
MAX_SLUG_LENGTH = 200
MAX_FILTER_VALUE_LENGTH = 200

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")
_SEPARATORS_RE = re.compile(r"[\s_]+")
_DISALLOWED_RE = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN_RE = re.compile(r"-{2,}")


def is_valid_slug(value: object) -> bool:
    return (
        isinstance(value, str)
        and 0 < len(value) <= MAX_SLUG_LENGTH
        and SLUG_RE.fullmatch(value) is not None
    )


def normalize_slug(raw: str) -> str:
    """Best-effort slug from a human title: 'Hello, World_2' -> 'hello-world-2'."""
    slug = _SEPARATORS_RE.sub("-", raw.strip().lower())
    slug = _DISALLOWED_RE.sub("", slug)
    slug = _HYPHEN_RUN_RE.sub("-", slug).strip("-")
    return slug[:MAX_SLUG_LENGTH].rstrip("-")


def require_slug(raw: str, field: str = "slug") -> str:
    """Return raw unchanged if it is a valid slug, else raise InputValidationError."""
    if not is_valid_slug(raw):
        raise InputValidationError(
            f"Invalid {field}: only lowercase letters, digits and '-' are allowed",
            field,
        )
    return raw


def clean_filter_value(value: str) -> str:
    """Strip control characters and surrounding whitespace; cap length."""
    cleaned = _CONTROL_CHARS_RE.sub("", value).strip()
    return cleaned[:MAX_FILTER_VALUE_LENGTH]
