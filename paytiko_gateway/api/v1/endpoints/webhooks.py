import json
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from paytiko_gateway.api.deps import get_resync_service, get_signature_service, get_webhook_dispatcher
from paytiko_gateway.core.config import Settings, get_settings
from paytiko_gateway.core.exceptions import SignatureError
from paytiko_gateway.core.logging import get_logger, redact_webhook_payload
from paytiko_gateway.core.signature import SignatureService
from paytiko_gateway.schemas.resync import ResyncByDateRequest, ResyncRequest
from paytiko_gateway.services import ResyncService, WebhookDispatcher

router = APIRouter()
logger = get_logger(__name__)


async def read_json_payload(request: Request) -> Dict[str, Any]:
    """Decode the request body; anything but a JSON object becomes an empty payload."""
    body = await request.body()
    try:
        payload = json.loads(body) if body else {}
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Paytiko webhook body is not valid JSON", payload_size=len(body))
        return {}
    return payload if isinstance(payload, dict) else {}


@router.post("/paytiko")
async def receive_paytiko_webhook(
    request: Request,
    dispatcher: WebhookDispatcher = Depends(get_webhook_dispatcher),
):
    """
    Receive a payment notification from Paytiko.

    The ``Signature`` field must equal SHA-256 of ``"{secret}:{OrderId}"``
    unless verification is disabled.
    """
    payload = await read_json_payload(request)
    outcome = await dispatcher.handle(payload)

    if outcome.rejected:
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Invalid signature"})
    if outcome.failed:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Webhook processing failed"},
        )
    return {"status": "success"}


@router.post("/paytiko/resync")
async def resync_paytiko_webhooks(
    body: ResyncRequest,
    service: ResyncService = Depends(get_resync_service),
):
    """Resync the webhooks of specific orders, one after another."""
    result = await service.resync_webhooks(body.order_ids)

    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": result.message, "errors": result.errors},
        )
    return {
        "success": True,
        "message": result.message,
        "resynced_count": result.resynced_count,
        "resynced_orders": result.resynced_orders,
        "errors": result.errors,
    }


@router.post("/paytiko/resync-by-date")
async def resync_paytiko_webhooks_by_date(
    body: ResyncByDateRequest,
    service: ResyncService = Depends(get_resync_service),
):
    """Ask Paytiko to resync every webhook in a date range."""
    result = await service.resync_webhooks_by_date_range(
        body.start_date, body.end_date, body.transaction_types
    )

    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": result.error, "error_data": result.error_data},
        )
    return {
        "success": True,
        "message": result.message,
        "resynced_count": result.resynced_count,
        "resynced_orders": result.resynced_orders,
    }


@router.get("/paytiko/resync-status/{resync_id}")
async def get_paytiko_resync_status(
    resync_id: str,
    service: ResyncService = Depends(get_resync_service),
):
    result = await service.get_resync_status(resync_id)

    if not result.success:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": result.error, "error_data": result.error_data},
        )
    return result.model_dump(exclude={"error", "error_data"})


@router.post("/paytiko/process-resynced")
async def process_resynced_paytiko_webhook(
    request: Request,
    service: ResyncService = Depends(get_resync_service),
    signature_service: SignatureService = Depends(get_signature_service),
    settings: Settings = Depends(get_settings),
):
    """Replay a webhook payload obtained through resync as if Paytiko had delivered it."""
    payload = await read_json_payload(request)

    if settings.PAYTIKO_VERIFY_WEBHOOK_SIGNATURE:
        try:
            signature_service.verify_webhook(payload)
        except SignatureError as e:
            logger.warning("Resynced webhook rejected: invalid signature", payload=redact_webhook_payload(payload))
            return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": e.message})

    try:
        processed = await service.process_resynced_webhook(payload)
    except Exception as e:
        logger.error("Resynced webhook processing failed", error=str(e), exc_info=True)
        processed = False

    if not processed:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Webhook processing failed"},
        )
    return {"success": True, "message": "Resynced webhook processed successfully"}
