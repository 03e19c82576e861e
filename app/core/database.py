from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from app.core.config import settings
import logging
from sqlalchemy import event

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> AsyncEngine:
    """Create the async engine, pool sizing only applies to server databases"""
    engine_kwargs = {
        "echo": settings.log_level == "DEBUG",
        "future": True,
    }
    if not database_url.startswith("sqlite"):
        engine_kwargs["pool_size"] = settings.db_pool_size
        engine_kwargs["max_overflow"] = settings.db_max_overflow

    new_engine = create_async_engine(database_url, **engine_kwargs)

    if database_url.startswith("postgresql"):
        # Set search_path to the schema from settings after connecting
        @event.listens_for(new_engine.sync_engine, "connect")
        def set_search_path(dbapi_connection, connection_record):
            logger.info("Setting search path to %s", settings.db_schema)
            cursor = dbapi_connection.cursor()
            cursor.execute(f"SET search_path TO {settings.db_schema}")
            cursor.close()

    return new_engine


def build_session_maker(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine: AsyncEngine = build_engine(settings.database_url)

async_session_maker = build_session_maker(engine)


async def create_db_and_tables(bind: AsyncEngine = None):
    # Import table models so they register on SQLModel.metadata
    from app import models  # noqa: F401

    logger.info("Creating database tables")
    async with (bind or engine).begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async def close_db():
    await engine.dispose()
