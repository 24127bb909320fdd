"""Build hook client tests — one POST per trigger, errors mapped."""

import httpx
import pytest

from sitefeed.core.errors import BuildTriggerError
from sitefeed.infrastructure.build_hook_client import BuildHookClient


async def test_trigger_posts_json(build_hook):
    status = await build_hook["client"].trigger({"event": "entry.publish"})
    assert status == 200
    request = build_hook["calls"][0]
    assert str(request.url) == "https://deploy.test/hooks/build"
    assert b"entry.publish" in request.content


async def test_non_success_raises(build_hook):
    build_hook["status"] = 404
    with pytest.raises(BuildTriggerError) as exc:
        await build_hook["client"].trigger({"event": "entry.publish"})
    assert exc.value.status_code == 404


async def test_transport_error_raises():
    def handler(request):
        raise httpx.ConnectTimeout("timed out", request=request)

    client = BuildHookClient("https://deploy.test/h", transport=httpx.MockTransport(handler))
    with pytest.raises(BuildTriggerError) as exc:
        await client.trigger({})
    assert exc.value.status_code is None
    await client.aclose()
