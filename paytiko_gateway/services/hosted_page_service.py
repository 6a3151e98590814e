import time
from typing import Callable, Optional

from paytiko_gateway.core.config import Settings
from paytiko_gateway.core.exceptions import TransportError
from paytiko_gateway.core.gateway_client import PaytikoApiClient
from paytiko_gateway.core.logging import get_logger
from paytiko_gateway.core.signature import SignatureService
from paytiko_gateway.schemas.hosted_page import (
    BillingDetails,
    HostedPageRequest,
    HostedPageResponse,
    PaymentData,
)

HOSTED_PAGE_PATH = "/api/payment/hosted-page"


class HostedPageService:
    """Builds signed hosted-page requests and submits them to Paytiko."""

    def __init__(
        self,
        settings: Settings,
        api_client: Optional[PaytikoApiClient] = None,
        signature_service: Optional[SignatureService] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.settings = settings
        self.api_client = api_client or PaytikoApiClient(settings)
        self.signature_service = signature_service or SignatureService(settings.PAYTIKO_MERCHANT_SECRET_KEY)
        self.clock = clock
        self.logger = get_logger(self.__class__.__name__, enabled=settings.PAYTIKO_LOGGING_ENABLED)

    def build_request(self, data: PaymentData) -> HostedPageRequest:
        """
        Assemble a signed request for validated payment data.

        The signature is computed over the billing email and the current
        Unix timestamp. Missing URLs fall back to the configured defaults.
        """
        timestamp = int(self.clock())
        billing = data.billing_details

        locked_amount = billing.locked_amount if billing.locked_amount is not None else int(data.amount)
        currency = billing.currency or data.currency or self.settings.PAYTIKO_DEFAULT_CURRENCY

        billing_details = BillingDetails(
            first_name=billing.first_name,
            last_name=billing.last_name,
            email=billing.email,
            street=billing.street,
            region=billing.region,
            city=billing.city,
            country=billing.country,
            zip_code=billing.zip_code,
            phone=billing.phone,
            date_of_birth=billing.date_of_birth,
            gender=billing.gender,
            currency=currency,
            locked_amount=locked_amount,
        )

        return HostedPageRequest(
            timestamp=timestamp,
            order_id=data.order_id,
            signature=self.signature_service.sign_hosted_page(billing_details.email, timestamp),
            billing_details=billing_details,
            webhook_url=data.webhook_url or self.settings.default_webhook_url,
            success_redirect_url=data.success_redirect_url or self.settings.default_success_redirect_url,
            failed_redirect_url=data.failed_redirect_url or self.settings.default_failed_redirect_url,
            disabled_psp_ids=data.disabled_psp_ids,
            credit_card_only=data.credit_card_only,
            cashier_description=data.description,
            is_pay_out=data.is_pay_out,
        )

    async def create_hosted_page(self, request: HostedPageRequest) -> HostedPageResponse:
        """
        Submit a hosted-page request.

        Gateway and network failures come back as a failed response; only
        unexpected errors propagate.
        """
        try:
            data = await self.api_client.post(HOSTED_PAGE_PATH, request.to_wire())
        except TransportError as e:
            errors = e.error_data.get("errors") if isinstance(e.error_data, dict) else None
            message = e.message_from("title", "message")
            self.logger.error(
                "Paytiko hosted page request failed",
                order_id=request.order_id,
                status_code=e.status_code,
                error=message,
            )
            return HostedPageResponse.failed(message, errors)

        redirect_url = data.get("redirectUrl")
        if not redirect_url:
            self.logger.error("Paytiko hosted page response had no redirect URL", order_id=request.order_id)
            return HostedPageResponse.failed(
                data.get("title") or "Hosted page response did not include a redirect URL",
                data.get("errors"),
            )

        self.logger.info(
            "Paytiko hosted page created",
            order_id=request.order_id,
            redirect_url=redirect_url,
        )
        return HostedPageResponse.succeeded(redirect_url, data.get("message"))
