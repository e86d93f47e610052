from abc import abstractmethod
from typing import Protocol

from authlink.domain.shared.event import Event
from authlink.domain.shared.port import Port


class EventBus(Port, Protocol):
    """Delivers domain events to in-process subscribers."""

    @abstractmethod
    async def publish(self, event: Event) -> None:
        ...
