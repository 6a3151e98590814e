"""
Tests for the context logger and log redaction helpers.
"""
from unittest.mock import MagicMock

from paytiko_gateway.core.logging import ContextLogger, mask_secret, redact_headers, redact_webhook_payload


class TestContextLogger:

    def test_with_context_binds_fields(self):
        underlying = MagicMock()
        logger = ContextLogger("test", logger=underlying)

        bound = logger.with_context(order_id="order-1")
        bound.info("resync requested")

        underlying.bind.assert_called_once_with(order_id="order-1")
        underlying.bind.return_value.info.assert_called_once_with("resync requested")

    def test_with_context_keeps_toggle(self):
        underlying = MagicMock()
        bound = ContextLogger("test", enabled=False, logger=underlying).with_context(order_id="order-1")

        bound.info("dropped")
        bound.debug("dropped")
        bound.warning("kept")

        assert bound.enabled is False
        underlying.bind.return_value.info.assert_not_called()
        underlying.bind.return_value.debug.assert_not_called()
        underlying.bind.return_value.warning.assert_called_once_with("kept")


class TestRedaction:

    def test_mask_secret(self):
        assert mask_secret("supersecret") == "*******cret"
        assert mask_secret("abc") == "***"
        assert mask_secret(None) == ""

    def test_redact_headers(self):
        headers = redact_headers({"X-Merchant-Secret": "supersecret", "Accept": "application/json"})

        assert headers == {"X-Merchant-Secret": "*******cret", "Accept": "application/json"}

    def test_redact_webhook_payload(self, sample_webhook_payload):
        redacted = redact_webhook_payload(sample_webhook_payload)

        assert redacted["Signature"].endswith(sample_webhook_payload["Signature"][-4:])
        assert redacted["Signature"] != sample_webhook_payload["Signature"]
        assert redacted["MaskedPan"] == "************5432"
        assert redacted["OrderId"] == sample_webhook_payload["OrderId"]
