"""Pytest configuration and fixtures."""

import pytest
import pytest_asyncio

from app.core.database.engine import build_engine, build_session_factory, init_db
from app.features.clipboard.events import EventChannel, HostWindow, KeyEventSource
from app.features.permissions.service import PermissionService
from app.features.users.service import UserDirectoryService


@pytest_asyncio.fixture
async def engine(tmp_path):
    """Async engine over a throwaway SQLite file, with all tables created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def permission_service(session_factory):
    return PermissionService(session_factory)


@pytest.fixture
def user_service(session_factory):
    return UserDirectoryService(session_factory)


@pytest.fixture
def window():
    return HostWindow()


@pytest.fixture
def keys():
    return KeyEventSource()


@pytest.fixture
def broadcast():
    return EventChannel()
