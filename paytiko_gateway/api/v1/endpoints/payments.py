from fastapi import APIRouter, Depends, status

from paytiko_gateway.api.deps import get_processor
from paytiko_gateway.schemas.payment import ChargeRequest, PaymentResult
from paytiko_gateway.services import PaytikoProcessor

router = APIRouter()


@router.post("/hosted-page", response_model=PaymentResult, status_code=status.HTTP_201_CREATED)
async def create_hosted_page(
    body: ChargeRequest,
    processor: PaytikoProcessor = Depends(get_processor),
):
    """
    Start a payment on a Paytiko hosted page.

    The result is always ``pending``; the final status arrives by webhook.
    Redirect the payer to ``metadata.redirect_url``.
    """
    params = body.model_dump(exclude={"amount"}, exclude_none=True)
    return await processor.simple_charge(body.amount, params)
