from snapstore.blobstore.config import BlobStoreConfig
from snapstore.blobstore.container import ShardedBlobContainer
from snapstore.blobstore.store import ShardedBlobStore, build_blob_store, key_hash

__all__ = [
    "BlobStoreConfig",
    "ShardedBlobContainer",
    "ShardedBlobStore",
    "build_blob_store",
    "key_hash",
]
