from __future__ import annotations

from snapstore import settings as settings_module


def test_repository_settings_defaults():
    repo = settings_module.reload_settings().repository
    assert repo.container == "snapshots"
    assert repo.account_pool == ()
    assert repo.location_mode == "primary_only"


def test_repository_settings_from_env(monkeypatch):
    monkeypatch.setenv("SNAPSTORE_CONTAINER", "es-backups")
    monkeypatch.setenv("SNAPSTORE_ACCOUNTS", "shard0, shard1 ,,shard2")
    monkeypatch.setenv("SNAPSTORE_LOCATION_MODE", "secondary_only")

    repo = settings_module.get_repository_settings()
    assert repo.container == "es-backups"
    assert repo.account_pool == ("shard0", "shard1", "shard2")
    assert repo.location_mode == "secondary_only"


def test_container_falls_back_to_azure_container_name(monkeypatch):
    monkeypatch.setenv("AZURE_STORAGE_CONTAINER_NAME", "legacy-container")
    assert settings_module.get_repository_settings().container == "legacy-container"

    monkeypatch.setenv("SNAPSTORE_CONTAINER", "explicit")
    assert settings_module.get_repository_settings().container == "explicit"


def test_blank_container_uses_default(monkeypatch):
    monkeypatch.setenv("SNAPSTORE_CONTAINER", "   ")
    assert settings_module.get_repository_settings().container == "snapshots"


def test_storage_settings_parse_account_keys(monkeypatch):
    monkeypatch.setenv("AZURE_STORAGE_ACCOUNT", "main")
    monkeypatch.setenv("AZURE_STORAGE_ACCOUNT_KEY", "bWFpbg==")
    monkeypatch.setenv("AZURE_STORAGE_ACCOUNT_KEYS", "shard0=c2hhcmQw==, broken, shard1=s1")

    storage = settings_module.get_storage_settings()
    assert storage.parsed_account_keys == (("shard0", "c2hhcmQw=="), ("shard1", "s1"))
    assert storage.key_map() == {
        "shard0": "c2hhcmQw==",
        "shard1": "s1",
        "main": "bWFpbg==",
    }
    assert storage.endpoint_suffix == "core.windows.net"


def test_explicit_account_key_entry_wins_over_default_key(monkeypatch):
    monkeypatch.setenv("AZURE_STORAGE_ACCOUNT", "main")
    monkeypatch.setenv("AZURE_STORAGE_ACCOUNT_KEY", "default-key")
    monkeypatch.setenv("AZURE_STORAGE_ACCOUNT_KEYS", "main=listed-key")
    assert settings_module.get_storage_settings().key_map()["main"] == "listed-key"


def test_sentry_settings_flags(monkeypatch):
    monkeypatch.delenv("SENTRY_DSN", raising=False)
    assert settings_module.get_sentry_settings().enabled is False
    monkeypatch.setenv("SENTRY_DSN", "https://key@sentry.example/1")
    assert settings_module.get_sentry_settings().enabled is True
