"""Storage package: per-bucket object store abstraction."""

from bucket_gateway.storage.contracts import (
    ObjectBody,
    ObjectInfo,
    ObjectListing,
    ObjectStore,
    StorageError,
)
from bucket_gateway.storage.minio_impl import MinioStorage
from bucket_gateway.storage.registry import BucketRegistry

__all__ = [
    "BucketRegistry",
    "MinioStorage",
    "ObjectBody",
    "ObjectInfo",
    "ObjectListing",
    "ObjectStore",
    "StorageError",
]
