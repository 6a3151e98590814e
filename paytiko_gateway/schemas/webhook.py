from decimal import Decimal
from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict


class AccountDetails(BaseModel):
    """Payer account snapshot as reported in a webhook."""

    model_config = ConfigDict(frozen=True)

    merchant_id: int
    created_date: str
    first_name: str
    last_name: str
    email: str
    currency: str
    country: str
    dob: str
    city: Optional[str] = None
    zip_code: Optional[str] = None
    region: Optional[str] = None
    street: Optional[str] = None
    phone: Optional[str] = None


class WebhookEvent(BaseModel):
    """
    Parsed Paytiko webhook notification.

    Status and type predicates compare case-insensitively, so ``SUCCESS``,
    ``success`` and ``Success`` classify the same way.
    """

    model_config = ConfigDict(frozen=True)

    order_id: str
    account_id: str
    account_details: AccountDetails
    transaction_type: str
    transaction_status: str
    initial_amount: Decimal
    currency: str
    transaction_id: int
    external_transaction_id: str
    payment_processor: str
    issue_date: str
    internal_psp_id: Optional[str] = None
    signature: str
    decline_reason_text: Optional[str] = None
    card_type: Optional[str] = None
    last_cc_digits: Optional[str] = None
    cascading_info: Optional[Union[Dict[str, Any], List[Any]]] = None
    masked_pan: Optional[str] = None

    def is_successful(self) -> bool:
        return self.transaction_status.lower() == "success"

    def is_rejected(self) -> bool:
        return self.transaction_status.lower() == "rejected"

    def is_failed(self) -> bool:
        return self.transaction_status.lower() == "failed"

    def is_pay_in(self) -> bool:
        return self.transaction_type.lower() == "payin"

    def is_pay_out(self) -> bool:
        return self.transaction_type.lower() == "payout"

    def is_refund(self) -> bool:
        return self.transaction_type.lower() == "refund"
