"""
Pytest configuration and fixtures for Paytiko gateway tests.
"""
import copy
import hashlib
from decimal import Decimal
from typing import Any, Callable, Dict, List, Tuple, Union
from uuid import uuid4

import httpx
import pytest
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.ext.asyncio import AsyncSession

from paytiko_gateway.core.config import Settings
from paytiko_gateway.core.gateway_client import PaytikoApiClient
from paytiko_gateway.events.dispatcher import EventDispatcher
from paytiko_gateway.events.events import ALL_EVENTS
from paytiko_gateway.models.transaction import Transaction

SECRET = "test_secret_key"
ORDER_ID = "3aa1e912-6ff3-4925-82dc-66bd7927676c"


def sign(order_id: str, secret: str = SECRET) -> str:
    return hashlib.sha256(f"{secret}:{order_id}".encode()).hexdigest()


Route = Union[Tuple[int, Any], Callable[[httpx.Request], httpx.Response]]


class FakePaytiko:
    """Stand-in for the Paytiko core API behind an httpx.MockTransport."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, status_code: int = 200, json: Any = None):
        self.routes[(method, path)] = (status_code, json)

    def add_handler(self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]):
        self.routes[(method, path)] = handler

    def paths(self) -> List[str]:
        return [request.url.path for request in self.requests]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"title": "Not Found"})
        if callable(route):
            return route(request)
        status_code, body = route
        if body is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)


@pytest.fixture
def settings():
    """Isolated settings; nothing is read from the environment file."""
    return Settings(
        _env_file=None,
        PAYTIKO_MERCHANT_SECRET_KEY=SECRET,
        PAYTIKO_CORE_URL="https://uat-core.paytiko.com",
        APP_BASE_URL="https://shop.example.com",
        PAYTIKO_DEFAULT_CURRENCY="USD",
        PAYTIKO_VERIFY_WEBHOOK_SIGNATURE=True,
        PAYTIKO_LOG_CHANNEL="console",
    )


@pytest.fixture
def fake_paytiko():
    return FakePaytiko()


@pytest.fixture
def api_client(settings, fake_paytiko):
    return PaytikoApiClient(settings, transport=fake_paytiko.transport)


@pytest.fixture
def sample_webhook_payload():
    """Webhook body as Paytiko delivers it, signed with the test secret."""
    return {
        "OrderId": ORDER_ID,
        "AccountId": "c5b4a6f2-7d8e-4f9a-b1c2-d3e4f5a6b7c8",
        "AccountDetails": {
            "MerchantId": 20115,
            "CreatedDate": "2023-08-15T10:23:44.123",
            "FirstName": "John",
            "LastName": "Doe",
            "Email": "john@doe.com",
            "Currency": "GBP",
            "Country": "GB",
            "Dob": "12/16/1990",
            "City": "London",
            "ZipCode": "5123",
            "Region": "London",
            "Street": "Baker Str. 12",
            "Phone": "+44839958434",
        },
        "TransactionType": "PayIn",
        "TransactionStatus": "Success",
        "InitialAmount": 12.58,
        "Currency": "EUR",
        "TransactionId": 179411,
        "ExternalTransactionId": "63793736354518895200",
        "PaymentProcessor": "World Pay",
        "CardType": "Visa",
        "LastCcDigits": "5432",
        "IssueDate": "2023-08-15T10:25:01.456",
        "InternalPspId": "5456650000021055202",
        "MaskedPan": "455636******5432",
        "Signature": sign(ORDER_ID),
    }


@pytest.fixture
def make_payload(sample_webhook_payload):
    """Copy of the sample payload with overrides, re-signed for its OrderId."""

    def _make(**overrides):
        payload = copy.deepcopy(sample_webhook_payload)
        payload.update(overrides)
        if "Signature" not in overrides and isinstance(payload.get("OrderId"), str):
            payload["Signature"] = sign(payload["OrderId"])
        return payload

    return _make


@pytest.fixture
def sample_billing_details():
    return {
        "first_name": "John",
        "last_name": "Doe",
        "email": "john@doe.com",
        "country": "GB",
        "phone": "+44839958434",
        "city": "London",
    }


@pytest.fixture
def mock_session():
    """Mock database session."""
    session = AsyncMock(spec=AsyncSession)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    return session


@pytest.fixture
def sample_transaction():
    """Pending Paytiko transaction for the sample order."""
    return Transaction(
        id=uuid4(),
        processor_name="paytiko",
        processor_transaction_id=ORDER_ID,
        amount=Decimal("12.58"),
        currency="EUR",
        status="pending",
        processor_response=None,
        transaction_metadata={"order_id": ORDER_ID},
    )


@pytest.fixture
def mock_transaction_repo():
    """Mock transaction repository."""
    repo = AsyncMock()
    repo.get_by_order_id = AsyncMock(return_value=None)
    repo.save = AsyncMock(side_effect=lambda transaction: transaction)
    return repo


@pytest.fixture
def mock_redis():
    """Mock Redis client."""
    redis_mock = MagicMock()
    redis_mock.queue_message = AsyncMock()
    return redis_mock


@pytest.fixture
def recorded_events():
    return []


@pytest.fixture
def event_dispatcher(recorded_events):
    """Dispatcher that records every event it sees."""
    dispatcher = EventDispatcher()
    for event_type in ALL_EVENTS:
        dispatcher.listen(event_type, recorded_events.append)
    return dispatcher
