from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field, ValidationInfo, field_validator

RESYNC_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class ResyncAction(str, Enum):
    """Tags for entries in a transaction's resync audit log."""
    RESYNC = "resync"
    RESYNC_ERROR = "resync_error"
    EXTRACT_PAYLOAD = "extract_payload"
    EXTRACT_PAYLOAD_ERROR = "extract_payload_error"


class SingleResyncResult(BaseModel):
    success: bool
    order_id: str
    message: str
    error: Optional[str] = None
    error_data: Optional[Dict[str, Any]] = None


class ResyncResult(BaseModel):
    """
    Outcome of a batch or date-range resync.

    For date-range resyncs the count and order list come from the gateway.
    """

    success: bool
    resynced_count: int = 0
    message: str
    resynced_orders: List[str] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)
    error: Optional[str] = None
    error_data: Optional[Dict[str, Any]] = None


class ResyncStatusResult(BaseModel):
    success: bool
    status: str = "unknown"
    progress: float = 0
    total_webhooks: int = 0
    processed_webhooks: int = 0
    failed_webhooks: int = 0
    error: Optional[str] = None
    error_data: Optional[Dict[str, Any]] = None


class PayloadExtractionResult(BaseModel):
    success: bool
    order_id: str
    payload: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
    error: Optional[str] = None
    error_data: Optional[Dict[str, Any]] = None


def _check_datetime(value: Optional[str]) -> Optional[str]:
    if value is not None:
        try:
            datetime.strptime(value, RESYNC_DATETIME_FORMAT)
        except ValueError:
            raise ValueError("Invalid date format. Use YYYY-MM-DD HH:MM:SS")
    return value


class ResyncRequest(BaseModel):
    """Operator request to resync specific orders."""

    order_ids: List[str] = Field(..., min_length=1)
    start_date: Optional[str] = None
    end_date: Optional[str] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_dates(cls, v):
        return _check_datetime(v)


class ResyncByDateRequest(BaseModel):
    """Operator request to resync every webhook in a date range."""

    start_date: str
    end_date: str
    transaction_types: Optional[List[Literal["SALE", "REFUND", "CHARGEBACK", "VOID"]]] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def validate_dates(cls, v):
        return _check_datetime(v)

    @field_validator("end_date")
    @classmethod
    def validate_range(cls, v, info: ValidationInfo):
        start = info.data.get("start_date")
        if start is None:
            return v
        if datetime.strptime(v, RESYNC_DATETIME_FORMAT) <= datetime.strptime(start, RESYNC_DATETIME_FORMAT):
            raise ValueError("end_date must be after start_date")
        return v
