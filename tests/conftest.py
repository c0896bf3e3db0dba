from __future__ import annotations

import os

import pytest
from loguru import logger

from snapstore.logging_utils import setup_test_logging
from tests.support.memory_storage import InMemoryStorageService

os.environ.setdefault("ENV", "test")

_STORAGE_ENV = (
    "AZURE_STORAGE_CONNECTION_STRING",
    "AZURE_STORAGE_ACCOUNT",
    "AZURE_STORAGE_ACCOUNT_KEY",
    "AZURE_STORAGE_ACCOUNT_KEYS",
    "AZURE_STORAGE_ENDPOINT_SUFFIX",
    "AZURE_STORAGE_CONTAINER_NAME",
    "SNAPSTORE_CONTAINER",
    "SNAPSTORE_ACCOUNTS",
    "SNAPSTORE_LOCATION_MODE",
)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    setup_test_logging("snapstore-logs/", level="DEBUG")
    yield


@pytest.fixture(autouse=True)
def clean_storage_env(monkeypatch):
    """Keep a developer's .env from leaking into settings-driven tests."""
    for key in _STORAGE_ENV:
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def memory_service() -> InMemoryStorageService:
    return InMemoryStorageService()


@pytest.fixture
def log_records():
    """Collect loguru records emitted during the test."""
    records = []
    sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(sink_id)
