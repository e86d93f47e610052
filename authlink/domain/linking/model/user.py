"""User entity as seen by the linking flow."""

from collections.abc import Iterable

from pydantic import Field

from authlink.domain.linking.model.value import ProviderInfo
from authlink.domain.shared.error import ValidationError
from authlink.domain.shared.model.entity import Entity


class User(Entity):
    """An authenticated user owned by the identity backend.

    Invariants:
    - Provider IDs in `provider_data` are unique (keys of the mapping)
    - `provider_data` only changes through `replace_provider_data`, which the
      linking service calls with the backend's confirmed provider list
    """

    uid: str
    id_token: str | None = Field(default=None, repr=False)  # Backend session token
    provider_data: dict[str, ProviderInfo] = Field(default_factory=dict)

    @classmethod
    def create(
        cls,
        uid: str,
        providers: Iterable[ProviderInfo | str] = (),
        id_token: str | None = None,
    ) -> "User":
        """Create a user from a list of linked providers (infos or bare IDs)."""
        user = cls(uid=uid, id_token=id_token)
        user.replace_provider_data(
            p if isinstance(p, ProviderInfo) else ProviderInfo(provider_id=p) for p in providers
        )
        return user

    @property
    def provider_ids(self) -> set[str]:
        return set(self.provider_data)

    def has_provider(self, provider_id: str) -> bool:
        return provider_id in self.provider_data

    def replace_provider_data(self, providers: Iterable[ProviderInfo]) -> None:
        """Replace the linked providers with the given list.

        Raises:
            ValidationError: If the list contains the same provider ID twice
        """
        data: dict[str, ProviderInfo] = {}
        for info in providers:
            if info.provider_id in data:
                raise ValidationError(
                    f"Duplicate provider in provider data: {info.provider_id}",
                    field="provider_data",
                )
            data[info.provider_id] = info
        self.provider_data = data
