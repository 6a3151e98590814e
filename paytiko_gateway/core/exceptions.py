from typing import Any, Dict, Iterable, List, Optional, Tuple


class PaytikoError(Exception):
    """Base class for gateway integration errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PaytikoError):
    """Input failed validation; ``errors`` maps field name to messages."""

    def __init__(self, message: str = "Validation failed", errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message)
        self.errors = errors or {}


class WebhookParseError(ValidationError):
    """A required webhook field is missing or has the wrong type."""

    def __init__(self, field: str, reason: str = "is required"):
        super().__init__(f"Webhook field {field} {reason}", errors={field: [reason]})
        self.field = field


class SignatureError(PaytikoError):
    """Webhook signature did not verify."""

    def __init__(self, message: str = "Invalid signature"):
        super().__init__(message)


class TransportError(PaytikoError):
    """
    Gateway call failed: network error or a non-2xx response.

    ``error_data`` holds the decoded response body when there was one.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_data: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.error_data = error_data

    def message_from(self, *keys: str) -> str:
        """First non-empty ``error_data[key]`` in order, else the exception message."""
        if isinstance(self.error_data, dict):
            for key in keys:
                value = self.error_data.get(key)
                if value:
                    return str(value)
        return self.message


class ProcessingError(PaytikoError):
    """Business failure reported by the gateway."""

    def __init__(self, message: str, transaction_id: Optional[str] = None):
        super().__init__(message)
        self.transaction_id = transaction_id


class NotFoundError(PaytikoError):
    """No stored transaction matches a gateway order id."""

    def __init__(self, order_id: str):
        super().__init__(f"No Paytiko transaction for order {order_id}")
        self.order_id = order_id


def field_errors(errors: Iterable[Dict[str, Any]], skip: Tuple[str, ...] = ("body",)) -> Dict[str, List[str]]:
    """Group pydantic error dicts by dotted field path."""
    grouped: Dict[str, List[str]] = {}
    for error in errors:
        parts = [str(part) for part in error.get("loc", ()) if part not in skip]
        field = ".".join(parts) or "__root__"
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        grouped.setdefault(field, []).append(message)
    return grouped
