from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict

from paytiko_gateway.schemas.webhook import WebhookEvent


@dataclass(frozen=True)
class PaytikoEvent:
    """Base class for events raised while handling Paytiko webhooks."""

    webhook: WebhookEvent
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc), kw_only=True)

    @property
    def name(self) -> str:
        return type(self).__name__

    def to_message(self) -> Dict[str, Any]:
        return {
            "event": self.name,
            "order_id": self.webhook.order_id,
            "occurred_at": self.occurred_at.isoformat(),
            "webhook": self.webhook.model_dump(mode="json"),
        }


@dataclass(frozen=True)
class PaytikoWebhookReceived(PaytikoEvent):
    """
    Raised for every accepted webhook, live or replayed by an operator.

    ``raw_payload`` keeps fields the parsed event does not map.
    """

    raw_payload: Dict[str, Any] = field(default_factory=dict)
    source: str = "webhook"

    def to_message(self) -> Dict[str, Any]:
        message = super().to_message()
        message["source"] = self.source
        message["raw_payload"] = self.raw_payload
        return message


@dataclass(frozen=True)
class PaytikoPaymentSuccessful(PaytikoEvent):
    pass


@dataclass(frozen=True)
class PaytikoPaymentFailed(PaytikoEvent):
    pass


@dataclass(frozen=True)
class PaytikoRefundProcessed(PaytikoEvent):
    pass


OUTCOME_EVENTS = (PaytikoPaymentSuccessful, PaytikoPaymentFailed, PaytikoRefundProcessed)
ALL_EVENTS = (PaytikoWebhookReceived,) + OUTCOME_EVENTS
