from sqlalchemy.ext.asyncio import async_sessionmaker

from paytiko_gateway.core.config import Settings
from paytiko_gateway.core.logging import get_logger
from paytiko_gateway.core.redis_client import RedisClient
from paytiko_gateway.events.dispatcher import EventDispatcher
from paytiko_gateway.events.events import ALL_EVENTS, PaytikoEvent, PaytikoWebhookReceived
from paytiko_gateway.repositories import TransactionRepository
from paytiko_gateway.services.transaction_updater import TransactionUpdater


class TransactionSyncListener:
    """
    Applies an accepted webhook to the stored transaction.

    Uses the same payload mapping as webhook resync, so a live delivery and a
    resync of the same order leave the record in the same state.
    """

    def __init__(self, session_factory: async_sessionmaker, settings: Settings):
        self.session_factory = session_factory
        self.logger = get_logger(self.__class__.__name__, enabled=settings.PAYTIKO_LOGGING_ENABLED)

    async def __call__(self, event: PaytikoWebhookReceived) -> None:
        async with self.session_factory() as session:
            updater = TransactionUpdater(TransactionRepository(session), self.logger)
            await updater.apply_payload(event.webhook.order_id, event.raw_payload, source=event.source)
            await session.commit()


class QueueForwardingListener:
    """Pushes events onto a redis list for consumers outside this process."""

    def __init__(self, redis_client: RedisClient, queue_name: str):
        self.redis = redis_client
        self.queue_name = queue_name

    async def __call__(self, event: PaytikoEvent) -> None:
        await self.redis.queue_message(self.queue_name, event.to_message())


def register_listeners(
    dispatcher: EventDispatcher,
    settings: Settings,
    session_factory: async_sessionmaker,
    redis_client: RedisClient = None,
) -> None:
    dispatcher.listen(PaytikoWebhookReceived, TransactionSyncListener(session_factory, settings))

    if settings.EVENTS_QUEUE and redis_client is not None:
        forwarder = QueueForwardingListener(redis_client, settings.EVENTS_QUEUE)
        for event_type in ALL_EVENTS:
            dispatcher.listen(event_type, forwarder)
