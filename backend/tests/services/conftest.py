"""Service test fixtures — async DB, fake CMS, fake deploy hook, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db, get_cms_client and get_build_hook_client are overridden per test
    - No test performs real network IO (httpx.MockTransport everywhere)

Design Decisions:
    - SQLite in-memory: fast, no external dependency, sufficient for route tests
    - CMS retries configured with zero delay so retry tests stay fast
"""

import httpx
import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from sitefeed.db.base import Base
from sitefeed.infrastructure.build_hook_client import (
    BuildHookClient, get_build_hook_client,
)
from sitefeed.infrastructure.cms_client import CMSClient, get_cms_client
from sitefeed.infrastructure.database import get_db
import sitefeed.models  # noqa: F401
from sitefeed.main import app

from tests.services.fake_cms import FakeCMS, make_post


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def fake_cms():
    return FakeCMS({
        "posts": [
            make_post(),
            make_post(id=2, documentId="def456", title="Second", slug="second-post"),
        ],
        "categories": [
            {"id": 1, "name": "News", "slug": "news"},
        ],
    })


@pytest.fixture
async def cms_client(fake_cms):
    client = CMSClient(
        "http://cms.test",
        api_token="test-cms-token",
        max_retries=2,
        base_delay_ms=0,
        page_size=25,
        transport=fake_cms.transport(),
    )
    yield client
    await client.aclose()


@pytest.fixture
def build_hook():
    """Fake deploy hook. Set hook['status'] to change the reply; calls land in hook['calls']."""
    state = {"status": 200, "calls": []}

    def handler(request: httpx.Request) -> httpx.Response:
        state["calls"].append(request)
        return httpx.Response(state["status"], json={"ok": state["status"] < 400})

    state["client"] = BuildHookClient(
        "https://deploy.test/hooks/build", transport=httpx.MockTransport(handler),
    )
    return state


@pytest.fixture
async def client(test_session_factory, cms_client, build_hook):
    """FastAPI test client with DB, CMS and build hook dependencies overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cms_client] = lambda: cms_client
    app.dependency_overrides[get_build_hook_client] = lambda: build_hook["client"]

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    await build_hook["client"].aclose()
