from typing import Any, Dict, List, Optional
from urllib.parse import quote

from sqlalchemy.ext.asyncio import AsyncSession

from paytiko_gateway.core.config import Settings
from paytiko_gateway.core.exceptions import TransportError, WebhookParseError
from paytiko_gateway.core.gateway_client import PaytikoApiClient
from paytiko_gateway.events.dispatcher import EventDispatcher
from paytiko_gateway.events.events import PaytikoWebhookReceived
from paytiko_gateway.schemas.resync import (
    PayloadExtractionResult,
    ResyncAction,
    ResyncResult,
    ResyncStatusResult,
    SingleResyncResult,
)
from paytiko_gateway.services.base_service import BaseService
from paytiko_gateway.services.transaction_updater import TransactionUpdater
from paytiko_gateway.services.webhook_parser import parse_webhook_payload

RESYNC_PATH = "/api/webhook-resync"
RESYNC_BY_DATE_PATH = "/api/webhook/resync-by-date"
RESYNC_STATUS_PATH = "/api/webhook/resync-status/{resync_id}"
EXTRACT_PAYLOAD_PATH = "/api/webhook-resync/extract-payload"


class ResyncService(BaseService):
    """
    Reconciles local transactions with Paytiko through the webhook resync API.

    Every gateway call is one-shot. Calls tied to an order append their raw
    response to the transaction's audit log whether they succeed or fail.
    """

    def __init__(
        self,
        session: AsyncSession,
        settings: Settings,
        api_client: Optional[PaytikoApiClient] = None,
        events: Optional[EventDispatcher] = None,
    ):
        super().__init__(session, settings)
        self.api_client = api_client or PaytikoApiClient(settings)
        self.events = events
        self.updater = TransactionUpdater(self.transaction_repo, self.logger)

    async def resync_webhook(self, order_id: str) -> SingleResyncResult:
        """
        Ask Paytiko to resync one order's webhook.

        On success the stored payload is extracted straight away and applied
        to the transaction, so local state converges without a redelivery.
        """
        log = self.logger.with_context(order_id=order_id)
        try:
            data = await self.api_client.post(RESYNC_PATH, params={"merchantOrderId": order_id})
        except TransportError as e:
            message = e.message_from("errorMessage", "title")
            await self._store_response(order_id, e.error_data or {"error": message}, ResyncAction.RESYNC_ERROR)
            log.error(
                "Paytiko webhook resync failed",
                error=message,
                error_data=e.error_data,
            )
            return SingleResyncResult(
                success=False,
                order_id=order_id,
                message=message,
                error=message,
                error_data=e.error_data,
            )

        await self._store_response(order_id, data, ResyncAction.RESYNC)

        if data.get("isSuccess") is True:
            log.info("Paytiko webhook resync requested")
            await self._apply_resynced_payload(order_id)
            return SingleResyncResult(success=True, order_id=order_id, message="Webhook resynced successfully")

        message = data.get("errorMessage") or "Unknown error"
        log.warning("Paytiko webhook resync refused", error=message)
        return SingleResyncResult(success=False, order_id=order_id, message=message, error=message)

    async def resync_webhooks(self, order_ids: List[str]) -> ResyncResult:
        """
        Resync orders one after another.

        A failing order is recorded in ``errors`` and does not stop the rest;
        the batch succeeds when at least one order did.
        """
        resynced: List[str] = []
        errors: List[str] = []

        for order_id in order_ids:
            try:
                result = await self.resync_webhook(order_id)
            except Exception as e:
                await self.rollback()
                self.logger.error("Paytiko webhook resync crashed", order_id=order_id, error=str(e))
                errors.append(f"{order_id}: {e}")
                continue

            if result.success:
                resynced.append(order_id)
            else:
                errors.append(f"{order_id}: {result.error or result.message}")

        count = len(resynced)
        self.logger.info(
            "Paytiko batch webhook resync completed",
            order_ids=order_ids,
            success_count=count,
            total_count=len(order_ids),
            errors=errors,
        )
        return ResyncResult(
            success=count > 0,
            resynced_count=count,
            message=(
                f"Successfully resynced {count} out of {len(order_ids)} webhooks"
                if count > 0 else "No webhooks were resynced"
            ),
            resynced_orders=resynced,
            errors=errors,
        )

    async def resync_webhooks_by_date_range(
        self,
        start_date: str,
        end_date: str,
        transaction_types: Optional[List[str]] = None,
    ) -> ResyncResult:
        """Delegate a date-range resync; counts and order ids come from the gateway."""
        payload: Dict[str, Any] = {"startDate": start_date, "endDate": end_date}
        if transaction_types:
            payload["transactionTypes"] = list(transaction_types)

        try:
            data = await self.api_client.post(RESYNC_BY_DATE_PATH, payload)
        except TransportError as e:
            message = e.message_from("errorMessage", "title", "message")
            self.logger.error(
                "Paytiko date range resync failed",
                start_date=start_date,
                end_date=end_date,
                error=message,
                error_data=e.error_data,
            )
            return ResyncResult(success=False, message=message, error=message, error_data=e.error_data)

        resynced_orders = [str(order_id) for order_id in data.get("resyncedOrders") or []]
        result = ResyncResult(
            success=True,
            resynced_count=data.get("resyncedCount") or 0,
            message=data.get("message") or "Webhooks resynced successfully",
            resynced_orders=resynced_orders,
        )
        self.logger.info(
            "Paytiko date range resync requested",
            start_date=start_date,
            end_date=end_date,
            resynced_count=result.resynced_count,
        )
        return result

    async def get_resync_status(self, resync_id: str) -> ResyncStatusResult:
        """Fetch the gateway's progress for a resync job once; callers poll."""
        path = RESYNC_STATUS_PATH.format(resync_id=quote(str(resync_id), safe=""))
        try:
            data = await self.api_client.get(path)
        except TransportError as e:
            message = e.message_from("errorMessage", "title", "message")
            self.logger.error("Paytiko resync status failed", resync_id=resync_id, error=message)
            return ResyncStatusResult(success=False, error=message, error_data=e.error_data)

        return ResyncStatusResult(
            success=True,
            status=data.get("status") or "unknown",
            progress=data.get("progress") or 0,
            total_webhooks=data.get("totalWebhooks") or 0,
            processed_webhooks=data.get("processedWebhooks") or 0,
            failed_webhooks=data.get("failedWebhooks") or 0,
        )

    async def extract_webhook_payload(self, order_id: str) -> PayloadExtractionResult:
        """Fetch the webhook payload Paytiko holds for an order."""
        try:
            data = await self.api_client.get(EXTRACT_PAYLOAD_PATH, params={"merchantOrderId": order_id})
        except TransportError as e:
            message = e.message_from("errorMessage", "title")
            await self._store_response(
                order_id, e.error_data or {"error": message}, ResyncAction.EXTRACT_PAYLOAD_ERROR
            )
            self.logger.error("Paytiko payload extraction failed", order_id=order_id, error=message)
            return PayloadExtractionResult(
                success=False,
                order_id=order_id,
                message=message,
                error=message,
                error_data=e.error_data,
            )

        await self._store_response(order_id, data, ResyncAction.EXTRACT_PAYLOAD)

        success = data.get("isSuccess") is True
        payload = data.get("resultObject")
        self.logger.info("Paytiko payload extracted", order_id=order_id, success=success)
        return PayloadExtractionResult(
            success=success,
            order_id=order_id,
            payload=payload if isinstance(payload, dict) else None,
            message="Payload extracted successfully" if success else (data.get("errorMessage") or "Unknown error"),
        )

    async def process_resynced_webhook(self, payload: Dict[str, Any]) -> bool:
        """
        Ingest a webhook payload replayed by an operator.

        Uses the live webhook field mapping, fills in the payment method and
        raises the same ``PaytikoWebhookReceived`` event a live delivery does.
        Returns False when the payload cannot be parsed.
        """
        try:
            event = parse_webhook_payload(payload)
        except WebhookParseError as e:
            self.logger.error("Failed to parse resynced webhook", error=e.message, errors=e.errors)
            return False

        await self.updater.update_payment_method(event.order_id, payload)
        await self.commit()

        if self.events is not None:
            await self.events.dispatch(
                PaytikoWebhookReceived(event, raw_payload=dict(payload), source="manual_resync")
            )

        self.logger.info(
            "Resynced webhook processed successfully",
            order_id=event.order_id,
            transaction_id=event.transaction_id,
            status=event.transaction_status,
        )
        return True

    async def _apply_resynced_payload(self, order_id: str) -> None:
        extraction = await self.extract_webhook_payload(order_id)
        if extraction.success and extraction.payload:
            await self.updater.apply_payload(order_id, extraction.payload, source="resync")
            await self.commit()

    async def _store_response(self, order_id: str, response: Any, action: ResyncAction) -> None:
        transaction = await self.updater.append_resync_log(order_id, action, response)
        if transaction is not None:
            await self.commit()
