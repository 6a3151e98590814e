from .events import (
    PaytikoEvent,
    PaytikoPaymentFailed,
    PaytikoPaymentSuccessful,
    PaytikoRefundProcessed,
    PaytikoWebhookReceived,
)
from .dispatcher import EventDispatcher

__all__ = [
    "EventDispatcher",
    "PaytikoEvent",
    "PaytikoPaymentFailed",
    "PaytikoPaymentSuccessful",
    "PaytikoRefundProcessed",
    "PaytikoWebhookReceived",
]
