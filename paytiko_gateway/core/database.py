from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.orm import declarative_base
from typing import AsyncGenerator
from fastapi import Request
import logging

from paytiko_gateway.core.config import Settings

logger = logging.getLogger(__name__)

# Create base class for models
Base = declarative_base()


def create_engine(settings: Settings) -> AsyncEngine:
    """Async engine for the configured database."""
    url = settings.DATABASE_URL
    if url.startswith("postgresql://"):
        url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
    options = {"pool_pre_ping": True, "echo": settings.DEBUG}
    if url.startswith("postgresql"):
        options.update(
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
        )
    return create_async_engine(url, **options)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database session.
    """
    session_factory = request.app.state.db.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception as e:
            logger.error(f"Database session error: {e}")
            await session.rollback()
            raise


class DatabaseManager:
    """
    Database manager for handling connections and transactions.
    """

    def __init__(self, settings: Settings):
        self.engine = create_engine(settings)
        self.session_factory = create_session_factory(self.engine)

    async def close_connections(self):
        """Close all database connections."""
        await self.engine.dispose()
        logger.info("Database connections closed")
