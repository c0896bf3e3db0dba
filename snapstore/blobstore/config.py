from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Union

from snapstore.core.models import LocationMode
from snapstore.settings import DEFAULT_CONTAINER, RepositorySettings, get_repository_settings
from snapstore.utils.env import split_csv


@dataclass(frozen=True)
class BlobStoreConfig:
    """
    Validated configuration for a sharded blob store.

    Attributes:
        container (str): Target container, created in every account of the pool.
            Blank or missing names fall back to the default container.
        accounts (Tuple[str, ...]): Ordered account pool. Empty means the
            storage service's default account.
        location_mode (LocationMode): Read-routing preference for every call.
    """

    container: str = DEFAULT_CONTAINER
    accounts: Union[Tuple[str, ...], Sequence[str], str, None] = field(default=())
    location_mode: Union[LocationMode, str, None] = LocationMode.PRIMARY_ONLY

    def __post_init__(self) -> None:
        container = (self.container or "").strip() or DEFAULT_CONTAINER
        object.__setattr__(self, "container", container)
        object.__setattr__(self, "accounts", tuple(split_csv(self.accounts)))
        object.__setattr__(self, "location_mode", LocationMode.parse(self.location_mode))

    @classmethod
    def from_settings(cls, settings: Optional[RepositorySettings] = None) -> "BlobStoreConfig":
        settings = settings or get_repository_settings()
        return cls(
            container=settings.container,
            accounts=settings.account_pool,
            location_mode=settings.location_mode,
        )


__all__ = ["BlobStoreConfig"]
