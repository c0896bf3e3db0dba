from __future__ import annotations

import io

import pytest

from snapstore.blobstore import BlobStoreConfig, ShardedBlobStore
from snapstore.core.exceptions import BlobNotFoundError, ConfigError, StorageServiceError
from snapstore.core.models import BlobPath


@pytest.fixture
def store(memory_service):
    s = ShardedBlobStore(BlobStoreConfig(container="snaps", accounts="A,B,C"), memory_service)
    s.create_container()
    return s


@pytest.fixture
def container(store):
    return store.blob_container(BlobPath.of("indices", "idx-1"))


def test_handle_prefixes_blob_names(container):
    assert container.key_prefix == "indices/idx-1/"
    assert container.build_key("__0") == "indices/idx-1/__0"


def test_root_handle_has_empty_prefix(store):
    assert store.blob_container(BlobPath()).key_prefix == ""


def test_write_then_read_blob(container, store, memory_service):
    container.write_blob("__0", b"segment-bytes-0123456789")

    assert container.blob_exists("__0")
    with container.read_blob("__0") as stream:
        assert stream.read() == b"segment-bytes-0123456789"

    account = store.resolve_account("indices/idx-1/__0")
    assert "indices/idx-1/__0" in memory_service.accounts[account]["snaps"]


def test_write_blob_from_stream_with_length(container):
    container.write_blob("meta", io.BytesIO(b"abcdefghij-extra"), length=10)
    with container.read_blob("meta") as stream:
        assert stream.read() == b"abcdefghij"


def test_write_blob_short_stream_aborts(container):
    with pytest.raises(StorageServiceError, match="expected 100 bytes"):
        container.write_blob("short", io.BytesIO(b"tiny"), length=100)
    assert container.blob_exists("short") is False


def test_read_missing_blob_raises(container):
    with pytest.raises(BlobNotFoundError):
        container.read_blob("nope")


def test_delete_blob(container):
    container.write_blob("gone", b"x")
    container.delete_blob("gone")
    assert container.blob_exists("gone") is False
    with pytest.raises(BlobNotFoundError):
        container.delete_blob("gone")


def test_blob_exists_treats_errors_as_absent(container, memory_service, store):
    account = store.resolve_account("indices/idx-1/flaky")
    memory_service.fail_on[("blob_exists", account)] = StorageServiceError("timeout")
    assert container.blob_exists("flaky") is False


def test_blob_exists_propagates_configuration_errors(container, memory_service, store):
    account = store.resolve_account("indices/idx-1/misconfigured")
    memory_service.fail_on[("blob_exists", account)] = ConfigError("no credentials")
    with pytest.raises(ConfigError):
        container.blob_exists("misconfigured")


def test_list_blobs_merges_accounts(container, store):
    names = ["snap-1.dat", "snap-2.dat", "meta-1.dat", "index-latest"]
    for n in names:
        container.write_blob(n, n.encode())
    # blobs are spread over more than one account
    assert len({store.resolve_account(container.build_key(n)) for n in names}) > 1

    listed = container.list_blobs()
    assert sorted(listed) == sorted(names)
    assert listed["index-latest"].length == len(b"index-latest")

    assert sorted(container.list_blobs_by_prefix("snap-")) == ["snap-1.dat", "snap-2.dat"]


def test_delete_blobs_by_prefix(container):
    for n in ("snap-1.dat", "snap-2.dat", "meta-1.dat"):
        container.write_blob(n, b"x")
    container.delete_blobs_by_prefix("snap-")
    assert sorted(container.list_blobs()) == ["meta-1.dat"]


def test_store_delete_removes_handle_contents(store, container):
    other = store.blob_container(BlobPath.of("indices", "idx-2"))
    container.write_blob("a", b"1")
    other.write_blob("b", b"2")

    store.delete(container.path)

    assert container.list_blobs() == {}
    assert sorted(other.list_blobs()) == ["b"]
