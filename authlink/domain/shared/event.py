"""Domain events."""

from datetime import UTC, datetime
from typing import NewType
from uuid import UUID, uuid4

from pydantic import Field

from authlink.domain.shared.model.entity import Entity

EventId = NewType("EventId", UUID)


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _new_event_id() -> EventId:
    return EventId(uuid4())


class Event(Entity):
    """Base class for domain events."""

    id: EventId = Field(default_factory=_new_event_id)
    created_at: datetime = Field(default_factory=_utc_now)
