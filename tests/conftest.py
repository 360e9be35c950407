"""Pytest configuration and shared fixtures.

Usage Guide:
- For store tests: use `session_factory` / `db_session` / `gateway` (temp-file SQLite)
- For GitHub payloads: import dict/schema factories from tests.factories
- For access layer tests: use `recording_sleep` and `fixed_clock`
"""

from datetime import UTC, datetime

import pytest

from github_org_sync.db import (
    PersistenceGateway,
    create_engine,
    create_session_factory,
    create_tables,
)

# -----------------------------------------------------------------------------
# Test Timeline Constants
#
# A consistent "test epoch" for deterministic cursor comparisons.
# T1 < T2 < T3 < NOW.
# -----------------------------------------------------------------------------
T1 = datetime(2024, 1, 10, 9, 0, 0, tzinfo=UTC)
T2 = datetime(2024, 1, 12, 16, 0, 0, tzinfo=UTC)
T3 = datetime(2024, 1, 15, 10, 0, 0, tzinfo=UTC)
NOW = datetime(2024, 1, 20, 12, 0, 0, tzinfo=UTC)

# ISO 8601 strings (for GitHub API mocks)
T1_ISO = "2024-01-10T09:00:00Z"
T2_ISO = "2024-01-12T16:00:00Z"
T3_ISO = "2024-01-15T10:00:00Z"


# -----------------------------------------------------------------------------
# Database Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
async def test_engine(tmp_path):
    """Create a temp-file SQLite engine with all tables.

    A file database (not :memory:) so every session gets its own
    connection, as in production.
    """
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return create_session_factory(test_engine)


@pytest.fixture
async def db_session(session_factory):
    """Create an async session with auto-rollback."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def gateway(session_factory) -> PersistenceGateway:
    return PersistenceGateway(session_factory)


# -----------------------------------------------------------------------------
# Time Fixtures
# -----------------------------------------------------------------------------
class RecordingSleep:
    """Awaitable stand-in for asyncio.sleep that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)

    @property
    def total(self) -> float:
        return sum(self.delays)


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fixed_clock():
    """Clock that always reports NOW."""
    return lambda: NOW
