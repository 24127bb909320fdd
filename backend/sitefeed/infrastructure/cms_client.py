"""CMS Client — GET wrapper over the headless CMS REST API with retry and error mapping.

Invariants:
    - Success (2xx) with a JSON body is the only path that returns data
    - Non-success status, transport failure and non-JSON bodies all raise ContentFetchError
    - Rate limits (429): backoff respecting Retry-After header
    - Transient errors (5xx, connection, timeout): up to max_retries retries with
      exponential backoff; max_retries=0 is a plain call-and-return
    - Client errors (4xx except 429): immediate failure, no retry
    - Every record returned by fetch_page/fetch_all is flattened (core/cms_query.py)

Design Decisions:
    - httpx.AsyncClient with injectable transport: tests swap in httpx.MockTransport
    - ±25% jitter on backoff: prevents rebuild storms hammering the CMS in lockstep
    - Validation is NOT done here: the client returns raw records, the content
      loader owns shapes and the generic-error policy
"""

import asyncio
import random
import logging
from typing import Any

import httpx

from sitefeed.config import Settings
from sitefeed.core.cms_query import (
    build_query,
    extract_data,
    extract_page_count,
    flatten_entry,
    resource_path,
)
from sitefeed.core.errors import ContentFetchError

logger = logging.getLogger(__name__)


class CMSClient:
    """Async client for `GET {base}/api/{resource}` style endpoints."""

    def __init__(
        self,
        base_url: str,
        api_token: str | None = None,
        timeout_seconds: float = 10.0,
        max_retries: int = 2,
        base_delay_ms: int = 250,
        max_delay_ms: int = 4_000,
        page_size: int = 100,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        headers = {"Accept": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self.page_size = page_size

    async def aclose(self) -> None:
        await self.client.aclose()

    async def get_json(
        self,
        path: str,
        params: list[tuple[str, str]] | None = None,
        resource: str | None = None,
    ) -> Any:
        """GET base_url + path, return the parsed JSON body."""
        url = f"{self.base_url}{path}"
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.get(path, params=params)
            except httpx.TransportError as e:
                await self._handle_transient_error(e, attempt, url, resource)
                continue

            if response.status_code == 429:
                await self._handle_rate_limit(response, attempt, url, resource)
                continue
            if response.status_code >= 500:
                await self._handle_transient_error(
                    f"HTTP {response.status_code}", attempt, url, resource,
                    status_code=response.status_code,
                )
                continue
            if not response.is_success:
                raise ContentFetchError(
                    f"HTTP {response.status_code}", url, response.status_code,
                )

            logger.debug(
                "CMS request succeeded",
                extra={
                    "resource": resource, "status_code": response.status_code,
                    "attempt": attempt + 1,
                },
            )
            return self._parse_json(response, url)

    async def fetch_page(
        self,
        resource: str,
        filters: dict[str, Any] | None = None,
        page: int = 1,
        page_size: int | None = None,
        sort: str | None = None,
    ) -> tuple[list[Any], int]:
        """One page of a collection. Returns (flattened records, page count)."""
        params = build_query(
            filters=filters, page=page,
            page_size=page_size or self.page_size, sort=sort,
        )
        body = await self.get_json(
            resource_path(resource), params, resource=resource,
        )
        records = [flatten_entry(e) for e in extract_data(body, resource)]
        return records, extract_page_count(body)

    async def fetch_all(
        self,
        resource: str,
        filters: dict[str, Any] | None = None,
        sort: str | None = None,
    ) -> list[Any]:
        """Every record of a collection, walking meta.pagination.pageCount."""
        records, page_count = await self.fetch_page(resource, filters, 1, sort=sort)
        for page in range(2, page_count + 1):
            page_records, _ = await self.fetch_page(resource, filters, page, sort=sort)
            records.extend(page_records)
        return records

    async def find_by(
        self, resource: str, field: str, value: Any,
    ) -> Any | None:
        """First record with field == value, or None."""
        records, _ = await self.fetch_page(
            resource, filters={field: value}, page=1, page_size=1,
        )
        return records[0] if records else None

    def _parse_json(self, response: httpx.Response, url: str) -> Any:
        try:
            return response.json()
        except ValueError:
            raise ContentFetchError(
                "response body is not valid JSON", url, response.status_code,
            )

    async def _handle_rate_limit(
        self,
        response: httpx.Response,
        attempt: int,
        url: str,
        resource: str | None,
    ) -> None:
        """Handle 429 with retry or raise."""
        if attempt >= self.max_retries:
            raise ContentFetchError(
                "rate limited after retries", url, response.status_code,
            )
        delay = self._extract_retry_after(response) or self._backoff(attempt)
        logger.warning(
            f"CMS rate limit hit, retry after {delay}ms (attempt {attempt + 1})",
            extra={"resource": resource, "attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self,
        error: Exception | str,
        attempt: int,
        url: str,
        resource: str | None,
        status_code: int | None = None,
    ) -> None:
        """Handle transient errors with retry or raise."""
        if attempt >= self.max_retries:
            raise ContentFetchError(
                f"transient failure after {self.max_retries} retries: {error}",
                url, status_code,
            )
        delay = self._backoff(attempt)
        logger.warning(
            f"CMS transient error, retry after {delay}ms: {error}",
            extra={
                "resource": resource, "attempt": attempt + 1,
                "status_code": status_code,
            },
        )
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    def _extract_retry_after(self, response: httpx.Response) -> int | None:
        """Retry-After header in milliseconds (integer seconds form only)."""
        val = response.headers.get("retry-after")
        if val and val.strip().isdigit():
            return int(val) * 1000
        return None


# Singleton (initialized on startup)
cms_client: CMSClient | None = None


def init_cms_client(settings: Settings) -> CMSClient:
    global cms_client
    cms_client = CMSClient(
        settings.cms_url,
        api_token=settings.cms_api_token,
        timeout_seconds=settings.cms_timeout_seconds,
        max_retries=settings.cms_max_retries,
        base_delay_ms=settings.cms_base_delay_ms,
        max_delay_ms=settings.cms_max_delay_ms,
        page_size=settings.cms_page_size,
    )
    return cms_client


async def close_cms_client() -> None:
    global cms_client
    if cms_client:
        await cms_client.aclose()
        cms_client = None


def get_cms_client() -> CMSClient:
    """FastAPI dependency for the shared CMS client."""
    if not cms_client:
        raise RuntimeError("CMS client not initialized")
    return cms_client
