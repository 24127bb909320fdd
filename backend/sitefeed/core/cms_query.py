"""CMS Query Building — REST paths, query params and response envelopes.

Invariants:
    - Resource paths are always /api/{resource} with resource matching [a-z0-9-]+
    - populate=* is sent unless the caller passes populate=None
    - Filters are equality filters only: filters[field][$eq]=value
    - extract_data() always returns a list of records

Design Decisions:
    - Params as a list of tuples, not a dict: order is stable and bracketed
      keys survive httpx encoding untouched
    - Strapi v4 {id, attributes} envelopes flattened here so validation only
      ever sees flat v5-style records
"""

from typing import Any

from sitefeed.core.content_schema import Violation
from sitefeed.core.domain_types import ViolationReason
from sitefeed.core.errors import ContentValidationError, InputValidationError
from sitefeed.core.sanitize import SLUG_RE, clean_filter_value

_FIELD_NAME_CHARS = frozenset(
    "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_"
)


def resource_path(resource: str) -> str:
    if not SLUG_RE.fullmatch(resource):
        raise InputValidationError(f"Invalid resource name: {resource!r}", "resource")
    return f"/api/{resource}"


def build_query(
    *,
    populate: str | None = "*",
    filters: dict[str, Any] | None = None,
    page: int | None = None,
    page_size: int | None = None,
    sort: str | None = None,
) -> list[tuple[str, str]]:
    """Build the query params of a collection GET."""
    params: list[tuple[str, str]] = []
    for field, value in (filters or {}).items():
        if not field or not set(field) <= _FIELD_NAME_CHARS:
            raise InputValidationError(f"Invalid filter field: {field!r}", "filters")
        params.append((f"filters[{field}][$eq]", clean_filter_value(str(value))))
    if populate is not None:
        params.append(("populate", populate))
    if page is not None:
        params.append(("pagination[page]", str(page)))
    if page_size is not None:
        params.append(("pagination[pageSize]", str(page_size)))
    if sort:
        params.append(("sort", sort))
    return params


def extract_data(body: Any, resource: str) -> list[Any]:
    """Pull the record list out of a { data: [...] } envelope."""
    if not isinstance(body, dict):
        raise ContentValidationError(resource, [Violation(
            "$", ViolationReason.NOT_AN_OBJECT, "response body must be an object",
        )])
    if "data" not in body:
        raise ContentValidationError(resource, [Violation(
            "data", ViolationReason.MISSING, "response has no data envelope",
        )])
    data = body["data"]
    if data is None:
        return []
    if isinstance(data, dict):
        return [data]
    if not isinstance(data, list):
        raise ContentValidationError(resource, [Violation(
            "data", ViolationReason.WRONG_TYPE, "data must be an array or object",
        )])
    return data


def extract_page_count(body: Any) -> int:
    """meta.pagination.pageCount, or 1 when the CMS did not paginate."""
    try:
        count = body["meta"]["pagination"]["pageCount"]
    except (KeyError, TypeError):
        return 1
    if isinstance(count, int) and not isinstance(count, bool) and count > 0:
        return count
    return 1


def flatten_entry(entry: Any) -> Any:
    """Flatten Strapi v4 envelopes; flat records pass through unchanged."""
    if isinstance(entry, list):
        return [flatten_entry(item) for item in entry]
    if not isinstance(entry, dict):
        return entry
    if set(entry) == {"data"}:
        return flatten_entry(entry["data"])
    if isinstance(entry.get("attributes"), dict):
        flat = {k: v for k, v in entry.items() if k != "attributes"}
        for key, value in entry["attributes"].items():
            flat[key] = flatten_entry(value)
        return flat
    return entry
