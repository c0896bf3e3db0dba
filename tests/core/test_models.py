from __future__ import annotations

import pytest

from snapstore.core.exceptions import ConfigError
from snapstore.core.models import BlobPath, LocationMode


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("primary_only", LocationMode.PRIMARY_ONLY),
        ("PRIMARY_ONLY", LocationMode.PRIMARY_ONLY),
        ("secondary-only", LocationMode.SECONDARY_ONLY),
        ("Primary Then Secondary", LocationMode.PRIMARY_THEN_SECONDARY),
        (None, LocationMode.PRIMARY_ONLY),
        ("", LocationMode.PRIMARY_ONLY),
        (LocationMode.SECONDARY_ONLY, LocationMode.SECONDARY_ONLY),
    ],
)
def test_location_mode_parse(raw, expected):
    assert LocationMode.parse(raw) is expected


@pytest.mark.parametrize("raw", ["tertiary", "secondary_then_primary"])
def test_location_mode_parse_rejects_unknown(raw):
    with pytest.raises(ConfigError) as excinfo:
        LocationMode.parse(raw)
    assert f"[{raw}]" in str(excinfo.value)
    assert "primary_only" in str(excinfo.value)


def test_location_mode_flags():
    assert LocationMode.PRIMARY_ONLY.reads_primary_first
    assert not LocationMode.SECONDARY_ONLY.reads_primary_first
    assert LocationMode.PRIMARY_THEN_SECONDARY.has_fallback
    assert not LocationMode.PRIMARY_ONLY.has_fallback


def test_blob_path_key_prefix():
    assert BlobPath.of("a", "b").key_prefix() == "a/b/"
    assert BlobPath().key_prefix() == ""
    assert BlobPath.of("a").add("b").build_as_string("/") == "a/b"


def test_blob_path_parse_and_extend():
    path = BlobPath.parse("/indices//idx-1/")
    assert path.segments == ("indices", "idx-1")
    assert path.extend(["0", "__1"]).key_prefix() == "indices/idx-1/0/__1/"
    assert BlobPath.parse("") == BlobPath()


def test_blob_path_is_immutable():
    base = BlobPath.of("a")
    child = base.add("b")
    assert base.segments == ("a",)
    assert child.segments == ("a", "b")
    assert str(child) == "[a][b]"
