from dataclasses import dataclass
from typing import dataclass_transform


@dataclass_transform(eq_default=False)
class _ServiceMeta(type):
    """Metaclass that makes every Service subclass a dataclass.

    Services hold collaborators and, for stateful services, in-flight state,
    so they compare and hash by identity (eq=False).
    """

    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            return dataclass(eq=False)(cls)
        return cls


class Service(metaclass=_ServiceMeta):
    """Base class for domain services.

    Dependencies are declared as underscore-prefixed fields and passed by
    keyword, e.g. `NonceGenerator(_batch_size=32)`.
    """
