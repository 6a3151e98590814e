"""
Tests for payment method classification.
"""
from types import SimpleNamespace

import pytest

from paytiko_gateway.schemas.payment import PaymentMethodSnapshot, PaymentMethodType
from paytiko_gateway.services.payment_method_classifier import (
    classify_payload,
    classify_payment_method,
    should_update_payment_method,
)


class TestCardClassification:

    def test_mc_maps_to_mastercard(self):
        snapshot = classify_payment_method(card_type="MC", last_four="1234")

        assert snapshot.type is PaymentMethodType.CARD
        assert snapshot.brand == "mastercard"
        assert snapshot.last_four == "1234"

    def test_unknown_brand_falls_back_to_visa(self):
        snapshot = classify_payment_method(card_type="unknown-brand", last_four="1234")

        assert snapshot.type is PaymentMethodType.CARD
        assert snapshot.brand == "visa"

    @pytest.mark.parametrize("card_type,brand", [
        ("Visa", "visa"),
        ("MasterCard", "mastercard"),
        ("master", "mastercard"),
        ("AMEX", "american_express"),
        ("American Express", "american_express"),
        ("americanexpress", "american_express"),
        ("Discover", "discover"),
        ("JCB", "jcb"),
        ("Diners", "diners_club"),
        ("Diners Club", "diners_club"),
        ("DinersClub", "diners_club"),
        ("UnionPay", "union_pay"),
        ("Union Pay", "union_pay"),
    ])
    def test_brand_table(self, card_type, brand):
        assert classify_payment_method(card_type=card_type, last_four="0000").brand == brand

    def test_display_name_uses_masked_pan(self):
        snapshot = classify_payment_method(card_type="mc", last_four="1234", masked_pan="555555******1234")

        assert snapshot.display_name == "Mastercard 555555******1234"

    def test_no_display_name_without_masked_pan(self):
        assert classify_payment_method(card_type="visa", last_four="1234").display_name is None

    def test_card_wins_over_processor(self):
        snapshot = classify_payment_method(card_type="visa", last_four="1234", payment_processor="PayPal")

        assert snapshot.type is PaymentMethodType.CARD

    def test_card_type_without_digits_is_not_a_card(self):
        snapshot = classify_payment_method(card_type="visa", payment_processor="PayPal")

        assert snapshot.type is PaymentMethodType.WALLET
        assert snapshot.brand == "paypal"


class TestWalletClassification:

    @pytest.mark.parametrize("processor,brand", [
        ("Fawry", "fawry"),
        ("Vodafone Cash", "vodafone"),
        ("Orange Money", "orange"),
        ("Etisalat Cash", "etisalat"),
        ("InstaPay", "instapay"),
        ("valU", "valu"),
        ("Binance Pay", "binance_pay"),
        ("binance", "binance_pay"),
        ("PayPal", "paypal"),
        ("Apple Pay", "apple_pay"),
        ("GooglePay", "google_pay"),
        ("Samsung Pay", "samsung_pay"),
        ("Alipay", "alipay"),
        ("WeChat Pay", "wechat"),
    ])
    def test_wallet_table(self, processor, brand):
        snapshot = classify_payment_method(payment_processor=processor)

        assert snapshot.type is PaymentMethodType.WALLET
        assert snapshot.brand == brand

    def test_unknown_processor_is_other(self):
        assert classify_payment_method(payment_processor="World Pay").brand == "other"


class TestPspIdClassification:

    @pytest.mark.parametrize("psp_id,brand", [
        ("PSP-FAWRY-01", "fawry"),
        ("vodafone_eg", "vodafone"),
        ("binance-gw", "binance_pay"),
        ("valu-installments", "valu"),
    ])
    def test_fragment_match(self, psp_id, brand):
        snapshot = classify_payment_method(internal_psp_id=psp_id)

        assert snapshot.type is PaymentMethodType.WALLET
        assert snapshot.brand == brand

    @pytest.mark.parametrize("psp_id", ["WIRE-EU", "local_bank_42"])
    def test_wire_and_bank_are_bank_transfer(self, psp_id):
        snapshot = classify_payment_method(internal_psp_id=psp_id)

        assert snapshot.type is PaymentMethodType.BANK_TRANSFER
        assert snapshot.brand == "wire_transfer"

    def test_unmatched_psp_id_is_other(self):
        assert classify_payment_method(internal_psp_id="5456650000021055202").brand == "other"

    def test_nothing_to_classify(self):
        assert classify_payment_method() is None
        assert classify_payment_method(card_type="", payment_processor="", internal_psp_id="") is None


class TestClassifyPayload:

    def test_sample_payload_is_visa_card(self, sample_webhook_payload):
        snapshot = classify_payload(sample_webhook_payload)

        assert snapshot.type is PaymentMethodType.CARD
        assert snapshot.brand == "visa"
        assert snapshot.last_four == "5432"
        assert snapshot.display_name == "Visa 455636******5432"

    def test_to_columns(self, sample_webhook_payload):
        assert classify_payload(sample_webhook_payload).to_columns() == {
            "payment_method_type": "card",
            "payment_method_brand": "visa",
            "payment_method_last_four": "5432",
            "payment_method_display_name": "Visa 455636******5432",
        }


class TestShouldUpdatePaymentMethod:

    @staticmethod
    def record(type=None, brand=None, last_four=None):
        return SimpleNamespace(
            payment_method_type=type,
            payment_method_brand=brand,
            payment_method_last_four=last_four,
        )

    card = PaymentMethodSnapshot(type=PaymentMethodType.CARD, brand="visa", last_four="1234")
    wallet = PaymentMethodSnapshot(type=PaymentMethodType.WALLET, brand="paypal")

    def test_empty_record_is_filled(self):
        assert should_update_payment_method(self.record(), self.wallet)

    def test_missing_brand_is_filled(self):
        assert should_update_payment_method(self.record(type="card"), self.card)

    def test_new_last_four_fills_gap(self):
        assert should_update_payment_method(self.record(type="card", brand="visa"), self.card)

    def test_complete_record_is_kept(self):
        complete = self.record(type="card", brand="mastercard", last_four="9999")

        assert not should_update_payment_method(complete, self.card)

    def test_wallet_does_not_overwrite_card(self):
        assert not should_update_payment_method(self.record(type="card", brand="visa"), self.wallet)
