from .hosted_page import BillingDetails, HostedPageRequest, HostedPageResponse, PaymentData
from .webhook import AccountDetails, WebhookEvent
from .payment import PaymentMethodSnapshot, PaymentMethodType, PaymentResult, PaymentStatus
from .resync import (
    PayloadExtractionResult,
    ResyncAction,
    ResyncResult,
    ResyncStatusResult,
    SingleResyncResult,
)

__all__ = [
    "AccountDetails",
    "BillingDetails",
    "HostedPageRequest",
    "HostedPageResponse",
    "PayloadExtractionResult",
    "PaymentData",
    "PaymentMethodSnapshot",
    "PaymentMethodType",
    "PaymentResult",
    "PaymentStatus",
    "ResyncAction",
    "ResyncResult",
    "ResyncStatusResult",
    "SingleResyncResult",
    "WebhookEvent",
]
