from authlink.util.di.base import Provider
from authlink.util.di.scope import Scope

__all__ = ["Provider", "Scope"]
