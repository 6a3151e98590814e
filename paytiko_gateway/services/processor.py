import secrets
import time
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from paytiko_gateway.core.config import Settings
from paytiko_gateway.core.exceptions import ProcessingError, ValidationError, field_errors
from paytiko_gateway.core.logging import get_logger
from paytiko_gateway.schemas.hosted_page import PaymentData
from paytiko_gateway.schemas.payment import PaymentResult, PaymentStatus
from paytiko_gateway.services.hosted_page_service import HostedPageService

PASSTHROUGH_PARAMS = ("disabled_psp_ids", "credit_card_only", "is_pay_out", "metadata")


class PaytikoProcessor:
    """
    Payment processor entry point for Paytiko hosted pages.

    Charges only create a hosted page: the result stays pending until the
    webhook reports the final status. Amounts are major currency units.
    """

    NAME = "paytiko"
    FEATURES = ["charge", "hosted_page"]

    def __init__(self, settings: Settings, hosted_page_service: Optional[HostedPageService] = None):
        self.settings = settings
        self.hosted_page_service = hosted_page_service or HostedPageService(settings)
        self.logger = get_logger(self.__class__.__name__, enabled=settings.PAYTIKO_LOGGING_ENABLED)

    def get_name(self) -> str:
        return self.NAME

    def get_supported_features(self) -> List[str]:
        return list(self.FEATURES)

    def supports(self, feature: str) -> bool:
        return feature in self.FEATURES

    def validate_payment_data(self, data: Mapping[str, Any]) -> PaymentData:
        try:
            return PaymentData.model_validate(dict(data))
        except PydanticValidationError as e:
            raise ValidationError(errors=field_errors(e.errors())) from e

    def build_payment_data(self, amount: Union[Decimal, float, str], params: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Fill in currency, order id, description and URLs for a simple charge."""
        params = dict(params or {})
        currency = params.get("currency") or self.settings.PAYTIKO_DEFAULT_CURRENCY

        data = {
            "amount": amount,
            "currency": currency,
            "order_id": params.get("order_id") or self.generate_order_id(),
            "description": params.get("description") or self.default_description(amount, currency),
            "billing_details": params.get("billing_details") or {},
            "webhook_url": self.settings.default_webhook_url,
            "success_redirect_url": self.settings.default_success_redirect_url,
            "failed_redirect_url": self.settings.default_failed_redirect_url,
        }
        for key in PASSTHROUGH_PARAMS:
            if params.get(key) is not None:
                data[key] = params[key]
        return data

    async def simple_charge(
        self,
        amount: Union[Decimal, float, str],
        params: Optional[Mapping[str, Any]] = None,
    ) -> PaymentResult:
        return await self.charge(self.build_payment_data(amount, params))

    async def charge(self, data: Mapping[str, Any]) -> PaymentResult:
        """
        Validate payment data and create a hosted page for it.

        Raises:
            ValidationError: payment data is invalid, nothing was sent
            ProcessingError: the gateway refused or the call failed
        """
        payment = self.validate_payment_data(data)
        request = self.hosted_page_service.build_request(payment)

        try:
            response = await self.hosted_page_service.create_hosted_page(request)
        except Exception as e:
            self.logger.error("Paytiko charge failed", order_id=payment.order_id, error=str(e), exc_info=True)
            raise ProcessingError("Paytiko hosted page request failed", transaction_id=payment.order_id) from e

        if response.is_failed():
            raise ProcessingError(
                response.message or "Paytiko hosted page creation failed",
                transaction_id=payment.order_id,
            )

        self.logger.info(
            "Paytiko charge initiated",
            order_id=payment.order_id,
            amount=str(payment.amount),
        )
        return PaymentResult(
            success=True,
            transaction_id=payment.order_id,
            amount=payment.amount,
            currency=payment.currency or self.settings.PAYTIKO_DEFAULT_CURRENCY,
            status=PaymentStatus.PENDING,
            message="Hosted page created successfully",
            metadata={
                **(payment.metadata or {}),
                "redirect_url": response.redirect_url,
                "payment_method": "hosted_page",
                "order_id": payment.order_id,
            },
        )

    async def create_hosted_page(self, data: Mapping[str, Any]) -> PaymentResult:
        return await self.charge(data)

    async def refund(self, transaction_id: str, amount: Optional[Decimal] = None) -> PaymentResult:
        raise NotImplementedError("Paytiko refunds are initiated in the Paytiko back office and reported by webhook")

    async def get_payment_status(self, transaction_id: str) -> PaymentStatus:
        raise NotImplementedError("Paytiko reports payment status by webhook; use webhook resync to refresh it")

    @staticmethod
    def generate_order_id() -> str:
        return f"deposit-{int(time.time())}-{secrets.token_hex(4)}"

    @staticmethod
    def default_description(amount: Union[Decimal, float, str], currency: str) -> str:
        return f"Payment of {currency} {amount} via Paytiko"
