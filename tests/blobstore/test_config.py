from __future__ import annotations

import pytest

from snapstore.blobstore import BlobStoreConfig
from snapstore.core.exceptions import ConfigError
from snapstore.core.models import LocationMode
from snapstore.settings import DEFAULT_CONTAINER


def test_defaults():
    cfg = BlobStoreConfig()
    assert cfg.container == DEFAULT_CONTAINER
    assert cfg.accounts == ()
    assert cfg.location_mode is LocationMode.PRIMARY_ONLY


@pytest.mark.parametrize(
    "accounts, expected",
    [
        ("a,b,c", ("a", "b", "c")),
        (" a , ,b,", ("a", "b")),
        ("", ()),
        (None, ()),
        (["x", "y"], ("x", "y")),
        (("x",), ("x",)),
    ],
)
def test_accounts_normalized(accounts, expected):
    assert BlobStoreConfig(container="c", accounts=accounts).accounts == expected


def test_location_mode_string_parsed():
    cfg = BlobStoreConfig(location_mode="primary-then-secondary")
    assert cfg.location_mode is LocationMode.PRIMARY_THEN_SECONDARY


def test_invalid_location_mode_rejected():
    with pytest.raises(ConfigError, match="not a recognized mode"):
        BlobStoreConfig(location_mode="nearest")


@pytest.mark.parametrize("container", ["", "  ", None])
def test_blank_container_falls_back_to_default(container):
    assert BlobStoreConfig(container=container).container == DEFAULT_CONTAINER


def test_container_name_is_stripped():
    assert BlobStoreConfig(container=" backups ").container == "backups"


def test_config_is_frozen():
    cfg = BlobStoreConfig(container="c")
    with pytest.raises(Exception):
        cfg.container = "d"  # type: ignore[misc]
