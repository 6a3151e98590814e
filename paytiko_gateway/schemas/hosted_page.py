from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


def _check_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be a valid http(s) URL")
    return value


class BillingDetails(BaseModel):
    """
    Payer details sent with a hosted-page request.

    Serialized with camelCase keys; unset optional fields are left out.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    first_name: str
    last_name: Optional[str] = None
    email: str
    street: Optional[str] = None
    region: Optional[str] = None
    city: Optional[str] = None
    country: str
    zip_code: Optional[str] = None
    phone: str
    date_of_birth: Optional[str] = None
    gender: Optional[str] = None
    currency: str
    locked_amount: Optional[int] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class HostedPageRequest(BaseModel):
    """
    Signed hosted-page creation payload.

    Frozen: the signature covers ``billing_details.email`` and ``timestamp``,
    so neither may change once the request is built.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    timestamp: int
    order_id: str
    signature: str
    billing_details: BillingDetails
    webhook_url: Optional[str] = None
    success_redirect_url: Optional[str] = None
    failed_redirect_url: Optional[str] = None
    disabled_psp_ids: Optional[List[Union[int, str]]] = None
    credit_card_only: Optional[bool] = None
    cashier_description: Optional[str] = None
    is_pay_out: Optional[bool] = None

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class HostedPageResponse(BaseModel):
    """Outcome of a hosted-page call: a redirect URL on success, error detail otherwise."""

    success: bool
    redirect_url: Optional[str] = None
    errors: Optional[Any] = None
    message: Optional[str] = None

    @model_validator(mode="after")
    def check_outcome(self):
        if self.success and not self.redirect_url:
            raise ValueError("successful response requires redirect_url")
        if self.success and self.errors:
            raise ValueError("successful response cannot carry errors")
        if not self.success and self.redirect_url:
            raise ValueError("failed response cannot carry redirect_url")
        return self

    @classmethod
    def succeeded(cls, redirect_url: str, message: Optional[str] = None) -> "HostedPageResponse":
        return cls(success=True, redirect_url=redirect_url, message=message)

    @classmethod
    def failed(cls, message: str, errors: Any = None) -> "HostedPageResponse":
        return cls(success=False, message=message, errors=errors)

    def is_successful(self) -> bool:
        return self.success

    def is_failed(self) -> bool:
        return not self.success


class BillingDetailsInput(BaseModel):
    """Billing block of incoming payment data, before defaults are applied."""

    first_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr = Field(..., max_length=255)
    country: str = Field(..., min_length=2, max_length=2)
    phone: str = Field(..., min_length=1, max_length=20)
    last_name: Optional[str] = Field(None, max_length=255)
    street: Optional[str] = Field(None, max_length=255)
    region: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=255)
    zip_code: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[str] = None
    gender: Optional[Literal["Male", "Female"]] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    locked_amount: Optional[int] = Field(None, ge=1)

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v):
        """Validate YYYY-MM-DD format."""
        if v is not None:
            try:
                datetime.strptime(v, "%Y-%m-%d")
            except ValueError:
                raise ValueError("Invalid date format. Use YYYY-MM-DD")
        return v


class PaymentData(BaseModel):
    """Validated input for building a hosted-page request."""

    amount: Decimal = Field(..., ge=Decimal("0.01"))
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    order_id: str = Field(..., min_length=1)
    description: Optional[str] = Field(None, max_length=1024)
    billing_details: BillingDetailsInput
    webhook_url: Optional[str] = None
    success_redirect_url: Optional[str] = None
    failed_redirect_url: Optional[str] = None
    disabled_psp_ids: Optional[List[Union[int, str]]] = None
    credit_card_only: Optional[bool] = None
    is_pay_out: Optional[bool] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("webhook_url", "success_redirect_url", "failed_redirect_url")
    @classmethod
    def validate_urls(cls, v):
        return _check_url(v)
