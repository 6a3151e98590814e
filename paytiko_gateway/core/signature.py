import hashlib
import hmac
from typing import Any, Dict

from paytiko_gateway.core.exceptions import SignatureError
from paytiko_gateway.core.logging import get_logger, mask_secret

logger = get_logger(__name__)


def hosted_page_signature(email: str, timestamp: int, secret: str) -> str:
    """SHA-256 hex of ``"{email};{timestamp};{secret}"``."""
    return hashlib.sha256(f"{email};{timestamp};{secret}".encode("utf-8")).hexdigest()


def webhook_signature(order_id: str, secret: str) -> str:
    """SHA-256 hex of ``"{secret}:{order_id}"``."""
    return hashlib.sha256(f"{secret}:{order_id}".encode("utf-8")).hexdigest()


class SignatureService:
    """Signatures for outbound hosted-page requests and inbound webhooks."""

    def __init__(self, merchant_secret: str):
        self.merchant_secret = merchant_secret

    def sign_hosted_page(self, email: str, timestamp: int) -> str:
        return hosted_page_signature(email, timestamp, self.merchant_secret)

    def sign_webhook(self, order_id: str) -> str:
        return webhook_signature(order_id, self.merchant_secret)

    def verify_webhook_payload(self, payload: Dict[str, Any]) -> bool:
        """
        Check ``Signature`` against the expected value for ``OrderId``.

        Returns False, never raises, when either field is absent, empty or
        not a string. The comparison runs in constant time.
        """
        signature = payload.get("Signature")
        order_id = payload.get("OrderId")

        if not isinstance(signature, str) or not signature:
            logger.warning("Webhook signature missing")
            return False
        if not isinstance(order_id, str) or not order_id:
            logger.warning("Webhook order id missing, cannot verify signature")
            return False

        expected = self.sign_webhook(order_id)
        if not hmac.compare_digest(signature.encode("utf-8"), expected.encode("utf-8")):
            logger.warning(
                "Webhook signature verification failed",
                order_id=order_id,
                received=mask_secret(signature),
            )
            return False

        return True

    def verify_webhook(self, payload: Dict[str, Any]) -> None:
        """Raise ``SignatureError`` unless the payload signature verifies."""
        if not self.verify_webhook_payload(payload):
            raise SignatureError()
