"""Application setup - wires stores, engine, service and tools."""

import logging

from campfire.config import Settings, get_settings
from campfire.db.engine import create_engine, create_session_factory, init_models
from campfire.engine import DuelEngine, DuelLogger, FireLocks
from campfire.services import CampfireService
from campfire.stores import InMemoryCampfireStore, SqlCampfireStore
from campfire.tools import Toolbox


def setup_logging(settings: Settings | None = None) -> None:
    """Configure root logging."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_store(settings: Settings | None = None) -> InMemoryCampfireStore | SqlCampfireStore:
    """Create the store selected by settings.storage_backend."""
    settings = settings or get_settings()
    if settings.storage_backend == "sql":
        return SqlCampfireStore(create_session_factory(create_engine(settings)))
    return InMemoryCampfireStore()


def create_toolbox(
    settings: Settings | None = None,
    store: InMemoryCampfireStore | SqlCampfireStore | None = None,
) -> Toolbox:
    """Create the toolbox with every campfire tool registered."""
    settings = settings or get_settings()
    store = store or create_store(settings)

    engine = DuelEngine(fires=store, duels=store, locks=FireLocks(), duel_logger=DuelLogger())
    service = CampfireService(fires=store, battle_plans=store, engine=engine)
    return Toolbox(service=service, engine=engine, settings=settings)


async def prepare_database(settings: Settings | None = None) -> None:
    """Create missing tables for the SQL backend."""
    settings = settings or get_settings()
    engine = create_engine(settings)
    try:
        await init_models(engine)
    finally:
        await engine.dispose()
