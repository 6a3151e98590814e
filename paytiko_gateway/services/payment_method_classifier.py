"""
Canonical payment-method classification for Paytiko payloads.

Pure functions: no I/O, and unknown inputs fall into a default bucket
instead of raising.
"""
from typing import Any, Mapping, Optional

from paytiko_gateway.schemas.payment import PaymentMethodSnapshot, PaymentMethodType

CARD_BRANDS = {
    "visa": "visa",
    "mastercard": "mastercard",
    "master": "mastercard",
    "mc": "mastercard",
    "amex": "american_express",
    "american express": "american_express",
    "americanexpress": "american_express",
    "discover": "discover",
    "jcb": "jcb",
    "diners": "diners_club",
    "diners club": "diners_club",
    "dinersclub": "diners_club",
    "unionpay": "union_pay",
    "union pay": "union_pay",
}

# Unrecognized card text is stored as visa. Kept for compatibility with
# existing records until product confirms the intended default.
DEFAULT_CARD_BRAND = "visa"

WALLET_BRANDS = {
    "fawry": "fawry",
    "vodafone": "vodafone",
    "vodafone cash": "vodafone",
    "orange": "orange",
    "orange money": "orange",
    "etisalat": "etisalat",
    "etisalat cash": "etisalat",
    "instapay": "instapay",
    "valu": "valu",
    "binance": "binance_pay",
    "binance pay": "binance_pay",
    "paypal": "paypal",
    "apple pay": "apple_pay",
    "applepay": "apple_pay",
    "google pay": "google_pay",
    "googlepay": "google_pay",
    "samsung pay": "samsung_pay",
    "samsungpay": "samsung_pay",
    "alipay": "alipay",
    "wechat": "wechat",
    "wechat pay": "wechat",
}

# Checked in order against the lowercased PSP id.
PSP_FRAGMENTS = (
    ("fawry", "fawry"),
    ("vodafone", "vodafone"),
    ("orange", "orange"),
    ("etisalat", "etisalat"),
    ("instapay", "instapay"),
    ("valu", "valu"),
    ("binance", "binance_pay"),
    ("wire", "wire_transfer"),
    ("bank", "wire_transfer"),
)

OTHER = "other"


def brand_label(brand: str) -> str:
    return brand.replace("_", " ").title()


def classify_card(card_type: str, last_four: str, masked_pan: Optional[str] = None) -> PaymentMethodSnapshot:
    brand = CARD_BRANDS.get(card_type.strip().lower(), DEFAULT_CARD_BRAND)
    display_name = f"{brand_label(brand)} {masked_pan}" if masked_pan else None
    return PaymentMethodSnapshot(
        type=PaymentMethodType.CARD,
        brand=brand,
        last_four=last_four[-4:],
        display_name=display_name,
    )


def classify_wallet(processor: str) -> PaymentMethodSnapshot:
    brand = WALLET_BRANDS.get(processor.strip().lower(), OTHER)
    return PaymentMethodSnapshot(
        type=PaymentMethodType.WALLET,
        brand=brand,
        display_name=brand_label(brand),
    )


def classify_psp_id(psp_id: str) -> PaymentMethodSnapshot:
    lowered = psp_id.lower()
    brand = next((brand for fragment, brand in PSP_FRAGMENTS if fragment in lowered), OTHER)
    method_type = PaymentMethodType.BANK_TRANSFER if brand == "wire_transfer" else PaymentMethodType.WALLET
    return PaymentMethodSnapshot(type=method_type, brand=brand, display_name=brand_label(brand))


def classify_payment_method(
    card_type: Optional[str] = None,
    last_four: Optional[str] = None,
    masked_pan: Optional[str] = None,
    payment_processor: Optional[str] = None,
    internal_psp_id: Optional[str] = None,
) -> Optional[PaymentMethodSnapshot]:
    """
    Pick a payment method from the strongest signal available.

    Card data wins over the processor name, which wins over the PSP id.
    Returns None when none of them is present.
    """
    if card_type and last_four:
        return classify_card(card_type, last_four, masked_pan)
    if payment_processor:
        return classify_wallet(payment_processor)
    if internal_psp_id:
        return classify_psp_id(internal_psp_id)
    return None


def classify_payload(payload: Mapping[str, Any]) -> Optional[PaymentMethodSnapshot]:
    """Classify straight from a PascalCase webhook or resync payload."""

    def text(key: str) -> Optional[str]:
        value = payload.get(key)
        return None if value is None else str(value)

    return classify_payment_method(
        card_type=text("CardType"),
        last_four=text("LastCcDigits"),
        masked_pan=text("MaskedPan"),
        payment_processor=text("PaymentProcessor"),
        internal_psp_id=text("InternalPspId"),
    )


def should_update_payment_method(transaction: Any, snapshot: PaymentMethodSnapshot) -> bool:
    """
    Only fill in missing data: absent type or brand, or a last-four the
    stored record lacks. A complete record is never overwritten.
    """
    if not transaction.payment_method_type or not transaction.payment_method_brand:
        return True
    return bool(snapshot.last_four) and not transaction.payment_method_last_four
