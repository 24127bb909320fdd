"""Build Hook Client — POSTs to the static host's deploy hook to start a site rebuild.

Invariants:
    - One POST per trigger() call, no retry (the CMS webhook is the retry boundary)
    - Non-success status and transport failures raise BuildTriggerError

Design Decisions:
    - Separate from CMSClient: different host, different failure policy
"""

import logging
from typing import Any

import httpx

from sitefeed.config import Settings
from sitefeed.core.errors import BuildTriggerError

logger = logging.getLogger(__name__)


class BuildHookClient:
    """Calls a deploy hook URL (Netlify/Vercel/Cloudflare style)."""

    def __init__(
        self,
        hook_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.hook_url = hook_url
        self.client = httpx.AsyncClient(
            timeout=timeout_seconds, transport=transport,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def trigger(self, payload: dict[str, Any]) -> int:
        """Start a build. Returns the hook's HTTP status code."""
        try:
            response = await self.client.post(self.hook_url, json=payload)
        except httpx.TransportError as e:
            raise BuildTriggerError(f"transport error: {e}")
        if not response.is_success:
            raise BuildTriggerError(
                f"HTTP {response.status_code}", response.status_code,
            )
        logger.info(
            "Build hook accepted",
            extra={"status_code": response.status_code, "event": payload.get("event")},
        )
        return response.status_code


# Singleton (initialized on startup; stays None when no hook is configured)
build_hook_client: BuildHookClient | None = None


def init_build_hook_client(settings: Settings) -> BuildHookClient | None:
    global build_hook_client
    if settings.build_hook_url:
        build_hook_client = BuildHookClient(
            settings.build_hook_url,
            timeout_seconds=settings.build_hook_timeout_seconds,
        )
    else:
        logger.warning("BUILD_HOOK_URL not set: webhook builds will be skipped")
        build_hook_client = None
    return build_hook_client


async def close_build_hook_client() -> None:
    global build_hook_client
    if build_hook_client:
        await build_hook_client.aclose()
        build_hook_client = None


def get_build_hook_client() -> BuildHookClient | None:
    """FastAPI dependency; None means builds are recorded as skipped."""
    return build_hook_client
