from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_

from .base_repository import BaseRepository
from paytiko_gateway.models.transaction import Transaction

PROCESSOR_NAME = "paytiko"


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for Paytiko transactions."""

    def __init__(self, session: AsyncSession):
        super().__init__(Transaction, session)

    async def get_by_order_id(self, order_id: str) -> Optional[Transaction]:
        """
        Find the Paytiko transaction for a gateway order id.

        Looks at ``processor_transaction_id`` first and only falls back to
        ``metadata.order_id`` when the primary path has no match.
        """
        transaction = await self.get_by_processor_transaction_id(order_id)
        if transaction is not None:
            return transaction
        return await self.get_by_metadata_order_id(order_id)

    async def get_by_processor_transaction_id(self, order_id: str) -> Optional[Transaction]:
        query = select(Transaction).where(
            and_(
                Transaction.processor_name == PROCESSOR_NAME,
                Transaction.processor_transaction_id == order_id,
            )
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    async def get_by_metadata_order_id(self, order_id: str) -> Optional[Transaction]:
        query = select(Transaction).where(
            and_(
                Transaction.processor_name == PROCESSOR_NAME,
                Transaction.transaction_metadata["order_id"].as_string() == order_id,
            )
        )
        result = await self.session.execute(query)
        return result.scalars().first()
