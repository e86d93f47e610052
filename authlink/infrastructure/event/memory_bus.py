import asyncio
import logging
from collections import defaultdict
from typing import Awaitable, Callable

from authlink.domain.shared.event import Event
from authlink.domain.shared.port.event_bus import EventBus

logger = logging.getLogger(__name__)

EventHandlerFunc = Callable[[Event], Awaitable[None]]


class InMemoryEventBus(EventBus):
    def __init__(self) -> None:
        self._subscribers: dict[type[Event], list[EventHandlerFunc]] = defaultdict(list)

    def subscribe(self, event_type: type[Event], handler: EventHandlerFunc) -> None:
        self._subscribers[event_type].append(handler)

    async def publish(self, event: Event) -> None:
        event_type = type(event)
        handlers = self._subscribers.get(event_type, [])

        if not handlers:
            logger.debug("No handlers for event %s", event_type.__name__)
            return

        logger.info("Publishing event %s to %d handlers", event_type.__name__, len(handlers))

        # concurrent execution
        await asyncio.gather(*[h(event) for h in handlers])
