from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from paytiko_gateway.core.config import Settings
from paytiko_gateway.core.exceptions import SignatureError
from paytiko_gateway.core.logging import get_logger, redact_webhook_payload
from paytiko_gateway.core.signature import SignatureService
from paytiko_gateway.events.dispatcher import EventDispatcher
from paytiko_gateway.events.events import (
    PaytikoEvent,
    PaytikoPaymentFailed,
    PaytikoPaymentSuccessful,
    PaytikoRefundProcessed,
    PaytikoWebhookReceived,
)
from paytiko_gateway.schemas.webhook import WebhookEvent
from paytiko_gateway.services.webhook_parser import parse_webhook_payload


class WebhookState(str, Enum):
    RECEIVED = "received"
    VERIFIED = "verified"
    PARSED = "parsed"
    CLASSIFIED = "classified"
    DISPATCHED = "dispatched"
    REJECTED = "rejected"
    FAILED = "failed"


@dataclass
class WebhookOutcome:
    state: WebhookState
    event: Optional[WebhookEvent] = None
    error: Optional[str] = None
    failed_at: Optional[WebhookState] = None

    @property
    def accepted(self) -> bool:
        return self.state is WebhookState.DISPATCHED

    @property
    def rejected(self) -> bool:
        return self.state is WebhookState.REJECTED

    @property
    def failed(self) -> bool:
        return self.state is WebhookState.FAILED


def outcome_event_for(event: WebhookEvent) -> PaytikoEvent:
    """Refunds always map to a refund event; otherwise success or failure by status."""
    if event.is_refund():
        return PaytikoRefundProcessed(event)
    if event.is_successful():
        return PaytikoPaymentSuccessful(event)
    return PaytikoPaymentFailed(event)


class WebhookDispatcher:
    """
    Handles one inbound Paytiko webhook.

    received -> verified -> parsed -> classified -> dispatched, or
    received -> rejected on a bad signature, or any state -> failed.
    Never raises: the outcome tells the caller which response to send.
    """

    def __init__(
        self,
        settings: Settings,
        events: EventDispatcher,
        signature_service: Optional[SignatureService] = None,
    ):
        self.settings = settings
        self.events = events
        self.signature_service = signature_service or SignatureService(settings.PAYTIKO_MERCHANT_SECRET_KEY)
        self.logger = get_logger(self.__class__.__name__, enabled=settings.PAYTIKO_LOGGING_ENABLED)

    async def handle(self, payload: Dict[str, Any]) -> WebhookOutcome:
        state = WebhookState.RECEIVED
        try:
            if self.settings.PAYTIKO_VERIFY_WEBHOOK_SIGNATURE:
                try:
                    self.signature_service.verify_webhook(payload)
                except SignatureError as e:
                    self.logger.warning(
                        "Paytiko webhook rejected: invalid signature",
                        payload=redact_webhook_payload(payload),
                    )
                    return WebhookOutcome(WebhookState.REJECTED, error=e.message)
            state = WebhookState.VERIFIED

            event = parse_webhook_payload(payload)
            state = WebhookState.PARSED

            outcome = outcome_event_for(event)
            state = WebhookState.CLASSIFIED

            await self.events.dispatch(PaytikoWebhookReceived(event, raw_payload=dict(payload)))
            await self.events.dispatch(outcome)
            state = WebhookState.DISPATCHED

        except Exception as e:
            self.logger.error(
                "Paytiko webhook processing failed",
                state=state.value,
                error=str(e),
                payload=redact_webhook_payload(payload),
                exc_info=True,
            )
            return WebhookOutcome(WebhookState.FAILED, error=str(e), failed_at=state)

        self.logger.info(
            "Paytiko webhook processed",
            order_id=event.order_id,
            transaction_type=event.transaction_type,
            transaction_status=event.transaction_status,
            outcome=outcome.name,
        )
        return WebhookOutcome(WebhookState.DISPATCHED, event=event)
