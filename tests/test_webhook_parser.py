"""
Tests for the PascalCase webhook payload mapping.
"""
from decimal import Decimal

import pytest

from paytiko_gateway.core.exceptions import WebhookParseError
from paytiko_gateway.services.webhook_parser import parse_webhook_payload
from conftest import ORDER_ID

REQUIRED_FIELDS = [
    "OrderId",
    "AccountId",
    "AccountDetails",
    "TransactionType",
    "TransactionStatus",
    "InitialAmount",
    "Currency",
    "TransactionId",
    "ExternalTransactionId",
    "PaymentProcessor",
    "IssueDate",
    "Signature",
]

REQUIRED_ACCOUNT_FIELDS = [
    "MerchantId",
    "CreatedDate",
    "FirstName",
    "LastName",
    "Email",
    "Currency",
    "Country",
    "Dob",
]


class TestParseWebhookPayload:
    """parse_webhook_payload."""

    def test_maps_every_field(self, sample_webhook_payload):
        event = parse_webhook_payload(sample_webhook_payload)

        assert event.order_id == ORDER_ID
        assert event.account_id == sample_webhook_payload["AccountId"]
        assert event.transaction_type == "PayIn"
        assert event.transaction_status == "Success"
        assert event.initial_amount == Decimal("12.58")
        assert event.currency == "EUR"
        assert event.transaction_id == 179411
        assert event.external_transaction_id == "63793736354518895200"
        assert event.payment_processor == "World Pay"
        assert event.issue_date == "2023-08-15T10:25:01.456"
        assert event.internal_psp_id == "5456650000021055202"
        assert event.signature == sample_webhook_payload["Signature"]
        assert event.card_type == "Visa"
        assert event.last_cc_digits == "5432"
        assert event.masked_pan == "455636******5432"
        assert event.decline_reason_text is None
        assert event.cascading_info is None

    def test_maps_account_details(self, sample_webhook_payload):
        details = parse_webhook_payload(sample_webhook_payload).account_details

        assert details.merchant_id == 20115
        assert details.first_name == "John"
        assert details.last_name == "Doe"
        assert details.email == "john@doe.com"
        assert details.currency == "GBP"
        assert details.country == "GB"
        assert details.dob == "12/16/1990"
        assert details.city == "London"
        assert details.zip_code == "5123"
        assert details.street == "Baker Str. 12"
        assert details.phone == "+44839958434"

    def test_pay_in_success_classification(self, sample_webhook_payload):
        event = parse_webhook_payload(sample_webhook_payload)

        assert event.is_successful()
        assert event.is_pay_in()
        assert not event.is_rejected()
        assert not event.is_failed()
        assert not event.is_pay_out()
        assert not event.is_refund()

    @pytest.mark.parametrize("status", ["SUCCESS", "success", "Success"])
    def test_status_is_case_insensitive(self, make_payload, status):
        assert parse_webhook_payload(make_payload(TransactionStatus=status)).is_successful()

    @pytest.mark.parametrize("transaction_type,predicate", [
        ("PAYOUT", "is_pay_out"),
        ("payout", "is_pay_out"),
        ("Refund", "is_refund"),
        ("REFUND", "is_refund"),
    ])
    def test_type_is_case_insensitive(self, make_payload, transaction_type, predicate):
        event = parse_webhook_payload(make_payload(TransactionType=transaction_type))

        assert getattr(event, predicate)()
        assert not event.is_pay_in()

    @pytest.mark.parametrize("status,predicate", [("Rejected", "is_rejected"), ("FAILED", "is_failed")])
    def test_negative_statuses(self, make_payload, status, predicate):
        event = parse_webhook_payload(make_payload(TransactionStatus=status))

        assert getattr(event, predicate)()
        assert not event.is_successful()

    @pytest.mark.parametrize("field", REQUIRED_FIELDS)
    def test_missing_required_field(self, sample_webhook_payload, field):
        del sample_webhook_payload[field]

        with pytest.raises(WebhookParseError) as exc_info:
            parse_webhook_payload(sample_webhook_payload)

        assert exc_info.value.field == field

    @pytest.mark.parametrize("field", REQUIRED_FIELDS)
    def test_null_required_field(self, sample_webhook_payload, field):
        sample_webhook_payload[field] = None

        with pytest.raises(WebhookParseError) as exc_info:
            parse_webhook_payload(sample_webhook_payload)

        assert exc_info.value.field == field

    @pytest.mark.parametrize("field", REQUIRED_ACCOUNT_FIELDS)
    def test_missing_account_field(self, sample_webhook_payload, field):
        del sample_webhook_payload["AccountDetails"][field]

        with pytest.raises(WebhookParseError) as exc_info:
            parse_webhook_payload(sample_webhook_payload)

        assert exc_info.value.field == f"AccountDetails.{field}"
        assert f"AccountDetails.{field}" in exc_info.value.errors

    def test_optional_fields_default_to_none(self, sample_webhook_payload):
        for key in ("InternalPspId", "CardType", "LastCcDigits", "MaskedPan"):
            del sample_webhook_payload[key]
        for key in ("City", "ZipCode", "Region", "Street", "Phone"):
            del sample_webhook_payload["AccountDetails"][key]

        event = parse_webhook_payload(sample_webhook_payload)

        assert event.internal_psp_id is None
        assert event.card_type is None
        assert event.last_cc_digits is None
        assert event.masked_pan is None
        assert event.account_details.city is None
        assert event.account_details.phone is None

    def test_empty_order_id(self, make_payload):
        with pytest.raises(WebhookParseError) as exc_info:
            parse_webhook_payload(make_payload(OrderId=""))

        assert exc_info.value.field == "OrderId"

    def test_numeric_strings_accepted(self, make_payload):
        event = parse_webhook_payload(make_payload(TransactionId="179411", InitialAmount="12.58"))

        assert event.transaction_id == 179411
        assert event.initial_amount == Decimal("12.58")

    def test_numeric_ids_kept_as_text(self, make_payload):
        event = parse_webhook_payload(make_payload(ExternalTransactionId=63793736, LastCcDigits=5432))

        assert event.external_transaction_id == "63793736"
        assert event.last_cc_digits == "5432"

    @pytest.mark.parametrize("value", ["abc", 12.5, True, [1], "--5", "²", "1_000", "+-3"])
    def test_invalid_transaction_id(self, make_payload, value):
        with pytest.raises(WebhookParseError) as exc_info:
            parse_webhook_payload(make_payload(TransactionId=value))

        assert exc_info.value.field == "TransactionId"

    @pytest.mark.parametrize("value", ["twelve", True, {"value": 1}, "NaN"])
    def test_invalid_amount(self, make_payload, value):
        with pytest.raises(WebhookParseError) as exc_info:
            parse_webhook_payload(make_payload(InitialAmount=value))

        assert exc_info.value.field == "InitialAmount"

    def test_account_details_must_be_object(self, make_payload):
        with pytest.raises(WebhookParseError) as exc_info:
            parse_webhook_payload(make_payload(AccountDetails="john@doe.com"))

        assert exc_info.value.field == "AccountDetails"

    def test_cascading_info_structure(self, make_payload):
        cascading = [{"PspId": 1, "Status": "Rejected"}, {"PspId": 2, "Status": "Success"}]

        assert parse_webhook_payload(make_payload(CascadingInfo=cascading)).cascading_info == cascading

        with pytest.raises(WebhookParseError):
            parse_webhook_payload(make_payload(CascadingInfo="psp-1,psp-2"))

    def test_payload_must_be_mapping(self):
        with pytest.raises(WebhookParseError):
            parse_webhook_payload(["not", "a", "dict"])

    def test_event_is_immutable(self, sample_webhook_payload):
        event = parse_webhook_payload(sample_webhook_payload)

        with pytest.raises(Exception):
            event.transaction_status = "Failed"
