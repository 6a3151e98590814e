from abc import ABC
from sqlalchemy.ext.asyncio import AsyncSession

from paytiko_gateway.core.config import Settings
from paytiko_gateway.core.logging import get_logger
from paytiko_gateway.repositories import TransactionRepository


class BaseService(ABC):
    """Base service class with common functionality."""

    def __init__(self, session: AsyncSession, settings: Settings):
        self.session = session
        self.settings = settings
        self.logger = get_logger(self.__class__.__name__, enabled=settings.PAYTIKO_LOGGING_ENABLED)

        # Initialize repositories
        self.transaction_repo = TransactionRepository(session)

    async def commit(self):
        """Commit the current transaction."""
        try:
            await self.session.commit()
        except Exception as e:
            self.logger.error(f"Error committing transaction: {e}")
            await self.session.rollback()
            raise

    async def rollback(self):
        """Rollback the current transaction."""
        try:
            await self.session.rollback()
        except Exception as e:
            self.logger.error(f"Error rolling back transaction: {e}")
            raise
