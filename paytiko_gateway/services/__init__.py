from .hosted_page_service import HostedPageService
from .processor import PaytikoProcessor
from .resync_service import ResyncService
from .transaction_updater import TransactionUpdater, map_gateway_status
from .webhook_dispatcher import WebhookDispatcher, WebhookOutcome, WebhookState
from .webhook_parser import parse_webhook_payload

__all__ = [
    "HostedPageService",
    "PaytikoProcessor",
    "ResyncService",
    "TransactionUpdater",
    "WebhookDispatcher",
    "WebhookOutcome",
    "WebhookState",
    "map_gateway_status",
    "parse_webhook_payload",
]
