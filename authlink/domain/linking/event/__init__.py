from authlink.domain.linking.event.events import (
    LinkFailed,
    LinkSucceeded,
    UnlinkFailed,
    UnlinkSucceeded,
)

__all__ = ["LinkFailed", "LinkSucceeded", "UnlinkFailed", "UnlinkSucceeded"]
