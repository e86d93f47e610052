"""Unit tests for InMemoryEventBus."""

from unittest.mock import AsyncMock

import pytest

from authlink.domain.linking.event import LinkFailed, LinkSucceeded
from authlink.domain.shared.error import ErrorKind
from authlink.infrastructure.event.memory_bus import InMemoryEventBus


class TestInMemoryEventBus:
    @pytest.mark.asyncio
    async def test_dispatches_to_subscribers_of_event_type(self):
        bus = InMemoryEventBus()
        on_success = AsyncMock()
        on_failure = AsyncMock()
        bus.subscribe(LinkSucceeded, on_success)
        bus.subscribe(LinkFailed, on_failure)
        event = LinkSucceeded(uid="u1", provider_id="apple.com")

        await bus.publish(event)

        on_success.assert_awaited_once_with(event)
        on_failure.assert_not_called()

    @pytest.mark.asyncio
    async def test_all_handlers_receive_event(self):
        bus = InMemoryEventBus()
        handlers = [AsyncMock(), AsyncMock()]
        for handler in handlers:
            bus.subscribe(LinkFailed, handler)
        event = LinkFailed(
            uid="u1", provider_id="password", kind=ErrorKind.BACKEND_ERROR, message="boom"
        )

        await bus.publish(event)

        for handler in handlers:
            handler.assert_awaited_once_with(event)

    @pytest.mark.asyncio
    async def test_publish_without_subscribers(self):
        await InMemoryEventBus().publish(LinkSucceeded(uid="u1", provider_id="apple.com"))

    def test_events_get_id_and_timestamp(self):
        first = LinkSucceeded(uid="u1", provider_id="apple.com")
        second = LinkSucceeded(uid="u1", provider_id="apple.com")

        assert first.id != second.id
        assert first.created_at.tzinfo is not None
