import inspect
from collections import defaultdict
from typing import Any, Awaitable, Callable, Dict, List, Type, Union

from paytiko_gateway.core.logging import get_logger
from paytiko_gateway.events.events import PaytikoEvent

Listener = Callable[[Any], Union[None, Awaitable[None]]]


class EventDispatcher:
    """
    In-process event dispatcher.

    Listeners run in registration order inside the caller's request. A
    listener error propagates to the caller so the webhook is reported as
    failed and Paytiko redelivers it.
    """

    def __init__(self):
        self._listeners: Dict[Type[PaytikoEvent], List[Listener]] = defaultdict(list)
        self.logger = get_logger(self.__class__.__name__)

    def listen(self, event_type: Type[PaytikoEvent], listener: Listener) -> None:
        self._listeners[event_type].append(listener)

    def listeners_for(self, event_type: Type[PaytikoEvent]) -> List[Listener]:
        return list(self._listeners.get(event_type, []))

    async def dispatch(self, event: PaytikoEvent) -> None:
        listeners = self.listeners_for(type(event))
        for listener in listeners:
            result = listener(event)
            if inspect.isawaitable(result):
                await result

        self.logger.debug(
            "Event dispatched",
            event_name=event.name,
            order_id=event.webhook.order_id,
            listeners=len(listeners),
        )
