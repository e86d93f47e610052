from dishka import Provider as DishkaProvider

from authlink.util.di.scope import Scope


class Provider(DishkaProvider):
    """Base for authlink DI providers. Dependencies default to Scope.APP."""

    scope = Scope.APP
