"""Content Loader — fetch, flatten and validate CMS content for the site build.

Invariants:
    - Every record returned has passed its resource model (schemas/content.py SHAPES)
    - Records are returned unchanged in value after validation
    - ContentFetchError / ContentValidationError are logged here with full detail
      and re-raised as ContentUnavailableError ("Failed to load content")
    - ResourceNotFoundError and InputValidationError pass through untouched
    - Slugs from callers are sanitized before they reach the CMS query string

Design Decisions:
    - One invalid record fails the whole collection: a partial site build
      silently missing pages is worse than a failed build
    - /posts returns typed Post models built from the same model that validated
      the records, so both content paths accept and reject identically
"""

import logging
from typing import Any

from sitefeed.core.content_schema import validate_collection, validate_record
from sitefeed.core.errors import (
    ContentFetchError,
    ContentUnavailableError,
    ContentValidationError,
    ErrorContext,
    ResourceNotFoundError,
)
from sitefeed.core.sanitize import require_slug
from sitefeed.infrastructure.cms_client import CMSClient
from sitefeed.schemas.content import Post, get_shape

logger = logging.getLogger(__name__)


class ContentLoader:
    """Loads validated content from the CMS."""

    def __init__(self, cms: CMSClient):
        self.cms = cms

    async def load_collection(
        self, resource: str, sort: str | None = None,
    ) -> list[dict[str, Any]]:
        """All records of resource, validated against its shape."""
        shape = get_shape(resource)
        try:
            records = await self.cms.fetch_all(resource, sort=sort)
            return validate_collection(records, shape, resource)
        except (ContentFetchError, ContentValidationError) as e:
            self._log_content_failure(e, resource)
            raise ContentUnavailableError(resource) from e

    async def load_entry(self, resource: str, slug: str) -> dict[str, Any]:
        """One record of resource by slug, validated against its shape."""
        shape = get_shape(resource)
        require_slug(slug)
        try:
            record = await self.cms.find_by(resource, "slug", slug)
            if record is None:
                raise ResourceNotFoundError(
                    shape.__name__, slug,
                    ErrorContext(resource=resource, slug=slug),
                )
            return validate_record(record, shape, resource)
        except (ContentFetchError, ContentValidationError) as e:
            self._log_content_failure(e, resource, slug)
            raise ContentUnavailableError(
                resource, ErrorContext(slug=slug),
            ) from e

    async def load_posts(self) -> list[Post]:
        records = await self.load_collection("posts", sort="publishedAt:desc")
        return [Post.model_validate(r) for r in records]

    async def load_post(self, slug: str) -> Post:
        return Post.model_validate(await self.load_entry("posts", slug))

    def _log_content_failure(
        self,
        error: ContentFetchError | ContentValidationError,
        resource: str,
        slug: str | None = None,
    ) -> None:
        extra: dict[str, Any] = {
            "error_code": error.code, "resource": resource, "slug": slug,
        }
        if isinstance(error, ContentValidationError):
            extra["violations"] = [v.to_dict() for v in error.violations]
        else:
            extra["status_code"] = error.status_code
            extra["url"] = error.url
        logger.error(f"Content load failed: {error.message}", extra=extra)
