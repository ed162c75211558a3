"""Shared fixtures for campfire tests."""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from campfire.config import Settings
from campfire.db.engine import create_session_factory, init_models
from campfire.engine import DuelEngine, DuelLogger, FireLocks
from campfire.services import CampfireService
from campfire.stores import InMemoryCampfireStore, SqlCampfireStore
from campfire.tools import Toolbox


@pytest.fixture
def settings() -> Settings:
    """Settings that never touch a real database."""
    return Settings(service_name="test-campfire", storage_backend="memory")


@pytest.fixture
def memory_store() -> InMemoryCampfireStore:
    """Fresh in-memory store."""
    return InMemoryCampfireStore()


@pytest.fixture
async def async_engine():
    """Create async SQLite in-memory engine for testing."""
    # StaticPool keeps every session on the same in-memory database
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )
    await init_models(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def sql_store(async_engine) -> SqlCampfireStore:
    """SQL store over the in-memory SQLite engine."""
    return SqlCampfireStore(create_session_factory(async_engine))


@pytest.fixture(params=["memory", "sql"])
def any_store(request, memory_store, sql_store):
    """Run a test once per store adapter."""
    if request.param == "memory":
        return memory_store
    return sql_store


@pytest.fixture
def duel_logger() -> DuelLogger:
    """Transcript logger shared by the engine fixture."""
    return DuelLogger()


@pytest.fixture
def engine(any_store, duel_logger) -> DuelEngine:
    """Duel engine over each store adapter."""
    return DuelEngine(fires=any_store, duels=any_store, locks=FireLocks(), duel_logger=duel_logger)


@pytest.fixture
def service(any_store, engine) -> CampfireService:
    """Campfire service sharing the engine's store and locks."""
    return CampfireService(fires=any_store, battle_plans=any_store, engine=engine)


@pytest.fixture
def toolbox(service, engine, settings) -> Toolbox:
    """Toolbox over the service and engine fixtures."""
    return Toolbox(service=service, engine=engine, settings=settings)