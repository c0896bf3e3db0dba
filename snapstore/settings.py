"""Centralized settings powered by Pydantic.

Environment matrix:

| Section    | Environment Variable               | Default            | Purpose                                         |
|------------|------------------------------------|--------------------|-------------------------------------------------|
| Storage    | `AZURE_STORAGE_CONNECTION_STRING`  | `None`             | Connection string for the default account       |
| Storage    | `AZURE_STORAGE_ACCOUNT`            | `None`             | Default storage account name                    |
| Storage    | `AZURE_STORAGE_ACCOUNT_KEY`        | `None`             | Shared key for the default account              |
| Storage    | `AZURE_STORAGE_ACCOUNT_KEYS`       | `None`             | Extra shared keys as `name=key,name2=key2`      |
| Storage    | `AZURE_STORAGE_ENDPOINT_SUFFIX`    | `core.windows.net` | Blob endpoint DNS suffix                        |
| Repository | `SNAPSTORE_CONTAINER`              | `snapshots`        | Target container (falls back to `AZURE_STORAGE_CONTAINER_NAME`) |
| Repository | `SNAPSTORE_ACCOUNTS`               | `""`               | Comma-separated account pool for sharding       |
| Repository | `SNAPSTORE_LOCATION_MODE`          | `primary_only`     | Primary/secondary read-routing preference       |
| Sentry     | `SENTRY_DSN`                       | `None`             | Sentry ingest DSN                               |
| Sentry     | `SENTRY_ENVIRONMENT`               | `None`             | Deployment environment label                    |

The settings objects source environment variables when instantiated and are
intended to be treated as read-only. Accounts listed in `SNAPSTORE_ACCOUNTS`
without a shared key authenticate through `DefaultAzureCredential`.
"""

from __future__ import annotations

from typing import Dict, Tuple

from pydantic import BaseModel, Field, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from snapstore.utils.env import get_str_chain, split_csv, split_pairs

DEFAULT_CONTAINER = "snapshots"


class _SettingsBase(BaseSettings):
    """Common configuration for BaseSettings subclasses."""

    model_config = SettingsConfigDict(
        env_prefix="",
        populate_by_name=True,
        extra="ignore",
        case_sensitive=True,
        frozen=True,
    )


class StorageSettings(_SettingsBase):
    """Credentials and endpoints for the Azure storage accounts."""

    connection_string: str | None = Field(
        default=None, alias="AZURE_STORAGE_CONNECTION_STRING"
    )
    account: str | None = Field(default=None, alias="AZURE_STORAGE_ACCOUNT")
    account_key: str | None = Field(default=None, alias="AZURE_STORAGE_ACCOUNT_KEY")
    account_keys: str | None = Field(default=None, alias="AZURE_STORAGE_ACCOUNT_KEYS")
    endpoint_suffix: str = Field(
        default="core.windows.net", alias="AZURE_STORAGE_ENDPOINT_SUFFIX"
    )

    @computed_field
    @property
    def parsed_account_keys(self) -> Tuple[Tuple[str, str], ...]:
        return split_pairs(self.account_keys)

    def key_map(self) -> Dict[str, str]:
        """Shared keys by account name, the default account's key included."""
        keys = dict(self.parsed_account_keys)
        if self.account and self.account_key:
            keys.setdefault(self.account, self.account_key)
        return keys


class RepositorySettings(_SettingsBase):
    """Container, account pool and location mode for the snapshot repository."""

    container: str = Field(
        default_factory=lambda: get_str_chain(
            ("AZURE_STORAGE_CONTAINER_NAME",), DEFAULT_CONTAINER
        ),
        alias="SNAPSTORE_CONTAINER",
    )
    accounts: str = Field(default="", alias="SNAPSTORE_ACCOUNTS")
    location_mode: str = Field(default="primary_only", alias="SNAPSTORE_LOCATION_MODE")

    @field_validator("container", mode="before")
    @classmethod
    def _strip_container(cls, value: str | None) -> str:
        value = (value or "").strip()
        return value or DEFAULT_CONTAINER

    @computed_field
    @property
    def account_pool(self) -> Tuple[str, ...]:
        return tuple(split_csv(self.accounts))


class SentrySettings(_SettingsBase):
    """Sentry SDK configuration."""

    dsn: str | None = Field(default=None, alias="SENTRY_DSN")
    environment: str | None = Field(default=None, alias="SENTRY_ENVIRONMENT")

    @computed_field
    @property
    def enabled(self) -> bool:
        return bool(self.dsn)


class Settings(BaseModel):
    """Aggregate accessor for domain-specific settings."""

    storage: StorageSettings = Field(default_factory=StorageSettings)
    repository: RepositorySettings = Field(default_factory=RepositorySettings)
    sentry: SentrySettings = Field(default_factory=SentrySettings)

    model_config = {
        "frozen": True,
        "arbitrary_types_allowed": True,
    }


def get_settings() -> Settings:
    """Instantiate settings from the current environment."""
    return Settings()


def reload_settings() -> Settings:
    """Alias for get_settings to maintain a consistent API."""
    return get_settings()


def get_storage_settings() -> StorageSettings:
    return get_settings().storage


def get_repository_settings() -> RepositorySettings:
    return get_settings().repository


def get_sentry_settings() -> SentrySettings:
    return get_settings().sentry


__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
    "get_storage_settings",
    "get_repository_settings",
    "get_sentry_settings",
    "StorageSettings",
    "RepositorySettings",
    "SentrySettings",
    "DEFAULT_CONTAINER",
]
