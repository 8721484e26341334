from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from wip_planner.utils.settings import get_settings


class Base(DeclarativeBase):
    """Base class for all database models"""
    pass


# Global variables for engine and session factory
_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def get_engine() -> AsyncEngine:
    """Get or create the database engine"""
    global _engine, _session_factory

    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(
            settings.DATABASE_URL,
            echo=False,  # Set to True for SQL query logging
            pool_pre_ping=True,
            pool_size=10,
            max_overflow=20,
            connect_args={
                "server_settings": {
                    "application_name": "wip_planner",
                },
                "command_timeout": 60
            }
        )
        _session_factory = async_sessionmaker(
            bind=_engine,
            expire_on_commit=False,
            class_=AsyncSession
        )

    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get the session factory for creating database sessions"""
    if _session_factory is None:
        get_engine()

    assert _session_factory is not None
    return _session_factory


async def close_engine():
    """Close the database engine and clean up resources"""
    global _engine, _session_factory

    if _engine:
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def create_all_tables():
    """Create every mapped table that does not exist yet"""
    # Import models so they register on Base.metadata
    import wip_planner.models  # noqa: F401

    engine = get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

