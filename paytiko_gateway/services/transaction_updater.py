from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from paytiko_gateway.core.exceptions import NotFoundError
from paytiko_gateway.core.logging import ContextLogger
from paytiko_gateway.models.transaction import Transaction
from paytiko_gateway.repositories import TransactionRepository
from paytiko_gateway.schemas.payment import PaymentStatus
from paytiko_gateway.schemas.resync import ResyncAction
from paytiko_gateway.services.payment_method_classifier import (
    classify_payload,
    should_update_payment_method,
)

AUDIT_LOG_KEY = "webhook_resync"

GATEWAY_STATUS_MAP = {
    "success": PaymentStatus.SUCCEEDED,
    "approved": PaymentStatus.SUCCEEDED,
    "completed": PaymentStatus.SUCCEEDED,
    "rejected": PaymentStatus.FAILED,
    "declined": PaymentStatus.FAILED,
    "failed": PaymentStatus.FAILED,
    "pending": PaymentStatus.PROCESSING,
    "processing": PaymentStatus.PROCESSING,
    "canceled": PaymentStatus.CANCELED,
    "cancelled": PaymentStatus.CANCELED,
    "requires_action": PaymentStatus.REQUIRES_ACTION,
    "action_required": PaymentStatus.REQUIRES_ACTION,
    "requires_capture": PaymentStatus.REQUIRES_CAPTURE,
    "requires_confirmation": PaymentStatus.REQUIRES_CONFIRMATION,
}

# payload key -> metadata key
METADATA_FIELDS = (
    ("TransactionId", "paytiko_transaction_id"),
    ("ExternalTransactionId", "external_transaction_id"),
    ("PaymentProcessor", "payment_processor"),
    ("CardType", "card_type"),
    ("LastCcDigits", "last_cc_digits"),
    ("MaskedPan", "masked_pan"),
    ("Currency", "currency"),
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def map_gateway_status(status: Optional[str]) -> PaymentStatus:
    """Map a Paytiko status string onto a local status; unknown values are pending."""
    if not status:
        return PaymentStatus.PENDING
    return GATEWAY_STATUS_MAP.get(str(status).strip().lower(), PaymentStatus.PENDING)


def append_processor_response(
    processor_response: Optional[Mapping[str, Any]],
    action: ResyncAction,
    response: Any,
    timestamp: datetime,
) -> Dict[str, Any]:
    """Return a copy of ``processor_response`` with one more audit entry appended."""
    updated = dict(processor_response or {})
    entries = list(updated.get(AUDIT_LOG_KEY) or [])
    entries.append({
        "action": action.value,
        "timestamp": timestamp.isoformat(),
        "response": response,
    })
    updated[AUDIT_LOG_KEY] = entries
    return updated


class TransactionUpdater:
    """
    Applies Paytiko payloads to stored transactions.

    Shared by the resync path and the live webhook listener so both converge
    on the same record state. Each call is a single read-modify-write; callers
    own the commit.
    """

    def __init__(
        self,
        transaction_repo: TransactionRepository,
        logger: ContextLogger,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.transaction_repo = transaction_repo
        self.logger = logger
        self.clock = clock

    async def get(self, order_id: str) -> Transaction:
        transaction = await self.transaction_repo.get_by_order_id(order_id)
        if transaction is None:
            raise NotFoundError(order_id)
        return transaction

    async def find(self, order_id: str, purpose: str) -> Optional[Transaction]:
        """Like ``get``, but a missing transaction is logged and returned as None."""
        try:
            return await self.get(order_id)
        except NotFoundError as e:
            self.logger.warning(f"Transaction not found for {purpose}", order_id=e.order_id, error=e.message)
            return None

    async def apply_payload(
        self,
        order_id: str,
        payload: Mapping[str, Any],
        source: str = "resync",
    ) -> Optional[Transaction]:
        """
        Update status, timestamps, decline details, payment method and
        metadata from a gateway payload.

        Returns None, after logging a warning, when no transaction matches.
        """
        transaction = await self.find(order_id, "payload update")
        if transaction is None:
            return None

        old_status = transaction.status
        gateway_status = payload.get("TransactionStatus")
        status = map_gateway_status(gateway_status)
        now = self.clock()

        transaction.status = status.value
        if status is PaymentStatus.SUCCEEDED:
            transaction.processed_at = now
            transaction.failed_at = None
        elif status is PaymentStatus.FAILED:
            transaction.failed_at = now
            transaction.error_code = _text(payload.get("DeclineReasonCode"))
            transaction.error_message = _text(payload.get("DeclineReasonText"))

        self._apply_payment_method(transaction, payload)
        transaction.transaction_metadata = self._merged_metadata(transaction, payload, source, now)

        await self.transaction_repo.save(transaction)

        self.logger.info(
            "Transaction updated from Paytiko payload",
            order_id=order_id,
            transaction_id=str(transaction.id),
            old_status=old_status,
            new_status=status.value,
            paytiko_status=gateway_status,
            source=source,
        )
        return transaction

    async def update_payment_method(self, order_id: str, payload: Mapping[str, Any]) -> Optional[Transaction]:
        transaction = await self.find(order_id, "payment method update")
        if transaction is None:
            return None
        if self._apply_payment_method(transaction, payload):
            await self.transaction_repo.save(transaction)
        return transaction

    async def append_resync_log(self, order_id: str, action: ResyncAction, response: Any) -> Optional[Transaction]:
        transaction = await self.find(order_id, "resync audit log")
        if transaction is None:
            return None

        transaction.processor_response = append_processor_response(
            transaction.processor_response, action, response, self.clock()
        )
        await self.transaction_repo.save(transaction)

        self.logger.info(
            "Stored Paytiko resync response",
            order_id=order_id,
            transaction_id=str(transaction.id),
            action=action.value,
        )
        return transaction

    def _apply_payment_method(self, transaction: Transaction, payload: Mapping[str, Any]) -> bool:
        snapshot = classify_payload(payload)
        if snapshot is None or not should_update_payment_method(transaction, snapshot):
            return False

        for column, value in snapshot.to_columns().items():
            setattr(transaction, column, value)

        self.logger.info(
            "Transaction payment method updated",
            order_id=transaction.order_id,
            payment_method_type=snapshot.type.value,
            payment_method_brand=snapshot.brand,
            payment_method_last_four=snapshot.last_four,
        )
        return True

    @staticmethod
    def _merged_metadata(
        transaction: Transaction,
        payload: Mapping[str, Any],
        source: str,
        now: datetime,
    ) -> Dict[str, Any]:
        metadata = dict(transaction.transaction_metadata or {})
        for payload_key, metadata_key in METADATA_FIELDS:
            if payload.get(payload_key) is not None:
                metadata[metadata_key] = payload[payload_key]
        amount = payload.get("Amount", payload.get("InitialAmount"))
        if amount is not None:
            metadata["amount"] = amount
        metadata[f"{source}_updated_at"] = now.isoformat()
        return metadata


def _text(value: Any) -> Optional[str]:
    return None if value is None else str(value)
