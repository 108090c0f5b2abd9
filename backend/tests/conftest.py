"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from lingotutor.db.sqlite import get_db, init_sqlite
from lingotutor.services.session_registry import clear_sessions

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture(autouse=True)
def _reset_sessions():
    yield
    clear_sessions()


@pytest_asyncio.fixture
async def db(tmp_path):
    await init_sqlite(tmp_path)
    async for conn in get_db():
        yield conn
