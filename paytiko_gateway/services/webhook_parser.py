"""
Explicit mapping of the PascalCase Paytiko webhook payload onto ``WebhookEvent``.

Every wire field is read by name in one place. A missing required field, or
one of the wrong type, raises ``WebhookParseError`` naming the field.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Optional

from paytiko_gateway.core.exceptions import WebhookParseError
from paytiko_gateway.schemas.webhook import AccountDetails, WebhookEvent

INTEGER_PATTERN = re.compile(r"-?[0-9]+")


def parse_webhook_payload(payload: Mapping[str, Any]) -> WebhookEvent:
    """Build a ``WebhookEvent`` from a raw webhook or resync payload."""
    if not isinstance(payload, Mapping):
        raise WebhookParseError("payload", "must be an object")

    order_id = _required_str(payload, "OrderId")
    if not order_id:
        raise WebhookParseError("OrderId", "must not be empty")

    return WebhookEvent(
        order_id=order_id,
        account_id=_required_str(payload, "AccountId"),
        account_details=parse_account_details(payload.get("AccountDetails")),
        transaction_type=_required_str(payload, "TransactionType"),
        transaction_status=_required_str(payload, "TransactionStatus"),
        initial_amount=_required_decimal(payload, "InitialAmount"),
        currency=_required_str(payload, "Currency"),
        transaction_id=_required_int(payload, "TransactionId"),
        external_transaction_id=_required_str(payload, "ExternalTransactionId"),
        payment_processor=_required_str(payload, "PaymentProcessor"),
        issue_date=_required_str(payload, "IssueDate"),
        internal_psp_id=_optional_str(payload, "InternalPspId"),
        signature=_required_str(payload, "Signature"),
        decline_reason_text=_optional_str(payload, "DeclineReasonText"),
        card_type=_optional_str(payload, "CardType"),
        last_cc_digits=_optional_str(payload, "LastCcDigits"),
        cascading_info=_optional_structure(payload, "CascadingInfo"),
        masked_pan=_optional_str(payload, "MaskedPan"),
    )


def parse_account_details(data: Any) -> AccountDetails:
    if data is None:
        raise WebhookParseError("AccountDetails")
    if not isinstance(data, Mapping):
        raise WebhookParseError("AccountDetails", "must be an object")

    prefix = "AccountDetails."
    return AccountDetails(
        merchant_id=_required_int(data, "MerchantId", prefix),
        created_date=_required_str(data, "CreatedDate", prefix),
        first_name=_required_str(data, "FirstName", prefix),
        last_name=_required_str(data, "LastName", prefix),
        email=_required_str(data, "Email", prefix),
        currency=_required_str(data, "Currency", prefix),
        country=_required_str(data, "Country", prefix),
        dob=_required_str(data, "Dob", prefix),
        city=_optional_str(data, "City", prefix),
        zip_code=_optional_str(data, "ZipCode", prefix),
        region=_optional_str(data, "Region", prefix),
        street=_optional_str(data, "Street", prefix),
        phone=_optional_str(data, "Phone", prefix),
    )


def _required(data: Mapping[str, Any], key: str, prefix: str) -> Any:
    value = data.get(key)
    if value is None:
        raise WebhookParseError(prefix + key)
    return value


def _as_str(value: Any, field: str) -> str:
    # numeric ids are accepted and kept as text
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    raise WebhookParseError(field, "must be a string")


def _required_str(data: Mapping[str, Any], key: str, prefix: str = "") -> str:
    return _as_str(_required(data, key, prefix), prefix + key)


def _optional_str(data: Mapping[str, Any], key: str, prefix: str = "") -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    return _as_str(value, prefix + key)


def _required_int(data: Mapping[str, Any], key: str, prefix: str = "") -> int:
    value = _required(data, key, prefix)
    if isinstance(value, bool):
        raise WebhookParseError(prefix + key, "must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and INTEGER_PATTERN.fullmatch(value.strip()):
        return int(value.strip())
    raise WebhookParseError(prefix + key, "must be an integer")


def _required_decimal(data: Mapping[str, Any], key: str, prefix: str = "") -> Decimal:
    value = _required(data, key, prefix)
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise WebhookParseError(prefix + key, "must be a number")
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise WebhookParseError(prefix + key, "must be a number")
    if not amount.is_finite():
        raise WebhookParseError(prefix + key, "must be a number")
    return amount


def _optional_structure(data: Mapping[str, Any], key: str, prefix: str = ""):
    value = data.get(key)
    if value is None or isinstance(value, (dict, list)):
        return value
    raise WebhookParseError(prefix + key, "must be an object or list")
