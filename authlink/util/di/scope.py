"""Custom Dishka scopes for authlink."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """authlink dependency injection scopes.

    Hierarchy: APP -> REQUEST

    - APP: Process lifetime (config, HTTP client, backend, event bus)
    - REQUEST: One signed-in user working through the linking screen
    """

    APP = new_scope("APP")
    REQUEST = new_scope("REQUEST")
