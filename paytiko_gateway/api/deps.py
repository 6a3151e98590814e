from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from paytiko_gateway.core.config import Settings, get_settings
from paytiko_gateway.core.database import get_async_session
from paytiko_gateway.core.gateway_client import PaytikoApiClient
from paytiko_gateway.core.signature import SignatureService
from paytiko_gateway.events.dispatcher import EventDispatcher
from paytiko_gateway.services import (
    HostedPageService,
    PaytikoProcessor,
    ResyncService,
    WebhookDispatcher,
)


def get_event_dispatcher(request: Request) -> EventDispatcher:
    return request.app.state.event_dispatcher


def get_api_client(settings: Settings = Depends(get_settings)) -> PaytikoApiClient:
    return PaytikoApiClient(settings)


def get_signature_service(settings: Settings = Depends(get_settings)) -> SignatureService:
    return SignatureService(settings.PAYTIKO_MERCHANT_SECRET_KEY)


def get_webhook_dispatcher(
    settings: Settings = Depends(get_settings),
    events: EventDispatcher = Depends(get_event_dispatcher),
    signature_service: SignatureService = Depends(get_signature_service),
) -> WebhookDispatcher:
    return WebhookDispatcher(settings, events, signature_service)


def get_resync_service(
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
    api_client: PaytikoApiClient = Depends(get_api_client),
    events: EventDispatcher = Depends(get_event_dispatcher),
) -> ResyncService:
    return ResyncService(session, settings, api_client=api_client, events=events)


def get_processor(
    settings: Settings = Depends(get_settings),
    api_client: PaytikoApiClient = Depends(get_api_client),
    signature_service: SignatureService = Depends(get_signature_service),
) -> PaytikoProcessor:
    hosted_pages = HostedPageService(settings, api_client=api_client, signature_service=signature_service)
    return PaytikoProcessor(settings, hosted_page_service=hosted_pages)
