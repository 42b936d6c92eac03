"""Integration-test fixtures.

Requires PostgreSQL with migrations applied (alembic upgrade head). When the
database is unreachable every test in this directory is skipped. Redis is
optional: change notifications are best-effort.

All integration tests share one event loop so the module-level engine pool
stays valid for the whole session.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text

from src.main import app
from src.pm_common.database import engine


@pytest_asyncio.fixture(loop_scope="session", scope="session", autouse=True)
async def _database() -> None:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1 FROM votes LIMIT 1"))
    except Exception as exc:  # noqa: BLE001
        pytest.skip(f"PostgreSQL not available for integration tests: {exc}")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client() -> AsyncClient:  # type: ignore[override]
    """Session-scoped client, keeps the engine pool on one loop."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
