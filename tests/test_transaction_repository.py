"""
Tests for transaction lookup by gateway order id.
"""
from unittest.mock import MagicMock

import pytest

from paytiko_gateway.repositories import TransactionRepository
from conftest import ORDER_ID


def query_result(transaction):
    result = MagicMock()
    result.scalars.return_value.first.return_value = transaction
    return result


class TestGetByOrderId:

    @pytest.mark.asyncio
    async def test_primary_match_skips_fallback(self, mock_session, sample_transaction):
        mock_session.execute.return_value = query_result(sample_transaction)
        repo = TransactionRepository(mock_session)

        transaction = await repo.get_by_order_id(ORDER_ID)

        assert transaction is sample_transaction
        assert mock_session.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_falls_back_to_metadata(self, mock_session, sample_transaction):
        mock_session.execute.side_effect = [query_result(None), query_result(sample_transaction)]
        repo = TransactionRepository(mock_session)

        transaction = await repo.get_by_order_id(ORDER_ID)

        assert transaction is sample_transaction
        assert mock_session.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_no_match(self, mock_session):
        mock_session.execute.return_value = query_result(None)
        repo = TransactionRepository(mock_session)

        assert await repo.get_by_order_id("unknown") is None
        assert mock_session.execute.await_count == 2
