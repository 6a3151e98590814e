from typing import Generic, TypeVar, Type
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from paytiko_gateway.core.database import Base

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """Base repository bound to one model and one session."""

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def save(self, db_obj: ModelType) -> ModelType:
        """Flush pending changes of an already loaded record."""
        try:
            self.session.add(db_obj)
            await self.session.flush()
            return db_obj
        except Exception as e:
            logger.error(f"Error saving {self.model.__name__}: {e}")
            await self.session.rollback()
            raise
