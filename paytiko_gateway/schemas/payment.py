from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, Field


class PaymentStatus(str, Enum):
    """Local transaction status."""
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"
    REQUIRES_ACTION = "requires_action"
    REQUIRES_CAPTURE = "requires_capture"
    REQUIRES_CONFIRMATION = "requires_confirmation"


class PaymentMethodType(str, Enum):
    CARD = "card"
    WALLET = "wallet"
    BANK_TRANSFER = "bank_transfer"
    OTHER = "other"


class PaymentMethodSnapshot(BaseModel):
    """Canonical payment method stored against a transaction."""

    type: PaymentMethodType
    brand: str
    last_four: Optional[str] = None
    display_name: Optional[str] = None

    def to_columns(self) -> Dict[str, Any]:
        return {
            "payment_method_type": self.type.value,
            "payment_method_brand": self.brand,
            "payment_method_last_four": self.last_four,
            "payment_method_display_name": self.display_name,
        }


class PaymentResult(BaseModel):
    """Result of starting a payment. Amounts are in major currency units."""

    success: bool
    transaction_id: str
    amount: Decimal
    currency: str
    status: PaymentStatus
    message: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ChargeRequest(BaseModel):
    """Request body for starting a hosted-page payment."""

    amount: Decimal = Field(..., description="Amount in major currency units")
    currency: Optional[str] = None
    order_id: Optional[str] = None
    description: Optional[str] = None
    billing_details: Dict[str, Any]
    disabled_psp_ids: Optional[List[Union[int, str]]] = None
    credit_card_only: Optional[bool] = None
    is_pay_out: Optional[bool] = None
    metadata: Optional[Dict[str, Any]] = None
