"""
Async SQLAlchemy engine, session factory and the FastAPI `get_db` dependency.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import get_settings

logger = logging.getLogger(__name__)

engine = create_async_engine(get_settings().database_url, pool_pre_ping=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db():
    async with SessionLocal() as session:
        yield session


def registered_tables() -> list[str]:
    """Names of every table the models declare, in dependency order."""
    import app.models.db  # noqa: F401  registers the tables on Base.metadata

    return [table.name for table in Base.metadata.sorted_tables]


async def init_db(drop_existing: bool = False) -> list[str]:
    """
    Create all tables and return their names. Alembic owns migrations; this
    is for fresh databases. `drop_existing` wipes the schema first.
    """
    tables = registered_tables()
    async with engine.begin() as conn:
        if drop_existing:
            await conn.run_sync(Base.metadata.drop_all)
            logger.warning(f"Dropped tables: {', '.join(reversed(tables))}")
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Database tables ready: {', '.join(tables)}")
    return tables
