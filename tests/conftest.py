import json
import os
from datetime import datetime, timedelta, timezone

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

# Settings are read at import time; keep the default postgres URL out of tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
os.environ.setdefault("DEBUG", "false")

from contracts_api.main import app  # noqa: E402
from contracts_api.database import Base, get_db  # noqa: E402
from contracts_api.api.deps import get_estimate_source, get_schedule_store  # noqa: E402
from contracts_api.services.schedule_store import ScheduleStoreClient  # noqa: E402


class FakeScheduleStore:
    """In-memory schedule store reachable through ``httpx.MockTransport``.

    Records every request so tests can assert which remote writes were issued.
    """

    BASE_URL = "http://schedules.test"

    def __init__(self):
        self.entries: dict[str, dict] = {}
        self.requests: list[tuple[str, str]] = []
        self.fail_lookup = False
        self.fail_writes = False

    def add(self, entry: dict, key: str | None = None) -> dict:
        self.entries[key if key is not None else entry["id"]] = entry
        return entry

    @property
    def writes(self) -> list[tuple[str, str]]:
        return [r for r in self.requests if r[0] in ("POST", "PUT")]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        self.requests.append((request.method, path))

        if request.method == "GET" and path == "/schedules":
            if self.fail_lookup:
                return httpx.Response(503, json={"error": "unavailable"})
            return httpx.Response(200, json=list(self.entries.values()))

        if self.fail_writes:
            return httpx.Response(500, json={"error": "write failed"})

        if request.method == "POST" and path == "/schedules":
            entry = json.loads(request.content)
            self.entries[entry["id"]] = entry
            return httpx.Response(201, json=entry)

        if request.method == "PUT" and path.startswith("/schedules/"):
            schedule_id = path.rsplit("/", 1)[1]
            if schedule_id not in self.entries:
                return httpx.Response(404, json={"error": "not found"})
            self.entries[schedule_id] = json.loads(request.content)
            return httpx.Response(200, json=self.entries[schedule_id])

        return httpx.Response(404)

    def client(self) -> ScheduleStoreClient:
        return ScheduleStoreClient(self.BASE_URL, transport=httpx.MockTransport(self.handler))


class FakeClock:
    """Deterministic UTC clock; ``advance`` moves it forward."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> datetime:
        self.current = self.current + timedelta(**kwargs)
        return self.current


@pytest.fixture
def clock():
    # 2025-01-01 12:00 in Asia/Seoul
    return FakeClock(datetime(2025, 1, 1, 3, 0, tzinfo=timezone.utc))


@pytest.fixture
def schedule_server():
    return FakeScheduleStore()


@pytest.fixture
def schedule_store(schedule_server: FakeScheduleStore) -> ScheduleStoreClient:
    return schedule_server.client()


@pytest_asyncio.fixture
async def test_db(tmp_path):
    """Create test database and tables."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def client(test_db: AsyncSession, schedule_server: FakeScheduleStore):
    """Create test client with overridden database and collaborators."""

    async def override_get_db():
        yield test_db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_schedule_store] = schedule_server.client
    app.dependency_overrides[get_estimate_source] = lambda: None

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
