from datetime import datetime
from sqlalchemy import Column, String, DECIMAL, Text, DateTime, JSON
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.orm import Mapped
from typing import Dict, Any, List, Optional
import uuid

from .base import BaseModel

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Transaction(BaseModel):
    """
    Payment transaction record shared with the host application.

    Paytiko transactions carry ``processor_name='paytiko'`` and the gateway
    order id either in ``processor_transaction_id`` or in ``metadata.order_id``.
    """

    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    processor_name: Mapped[Optional[str]] = Column(String(50), nullable=True, index=True)
    processor_transaction_id: Mapped[Optional[str]] = Column(String(255), nullable=True, index=True)
    amount: Mapped[float] = Column(DECIMAL(12, 2), nullable=False)
    currency: Mapped[str] = Column(String(3), default="USD", nullable=False)
    status: Mapped[str] = Column(String(32), default="pending", nullable=False, index=True)
    processed_at: Mapped[Optional[datetime]] = Column(DateTime(timezone=True), nullable=True)
    failed_at: Mapped[Optional[datetime]] = Column(DateTime(timezone=True), nullable=True)
    error_code: Mapped[Optional[str]] = Column(String(100), nullable=True)
    error_message: Mapped[Optional[str]] = Column(Text, nullable=True)

    payment_method_type: Mapped[Optional[str]] = Column(String(32), nullable=True)
    payment_method_brand: Mapped[Optional[str]] = Column(String(50), nullable=True)
    payment_method_last_four: Mapped[Optional[str]] = Column(String(4), nullable=True)
    payment_method_display_name: Mapped[Optional[str]] = Column(String(255), nullable=True)

    processor_response: Mapped[Optional[Dict[str, Any]]] = Column(JSONType, nullable=True)
    transaction_metadata: Mapped[Optional[Dict[str, Any]]] = Column("metadata", JSONType, default=dict, nullable=True)

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, order={self.processor_transaction_id}, status='{self.status}')>"

    @property
    def order_id(self) -> Optional[str]:
        return self.processor_transaction_id or self.get_metadata("order_id")

    @property
    def resync_log(self) -> List[Dict[str, Any]]:
        """Audit entries appended by webhook resync operations."""
        return list((self.processor_response or {}).get("webhook_resync", []))

    def get_metadata(self, key: str, default: Any = None) -> Any:
        """Get metadata value."""
        if self.transaction_metadata is None:
            return default
        return self.transaction_metadata.get(key, default)
