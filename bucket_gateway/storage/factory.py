"""Factory for building bucket stores from environment configuration."""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from minio import Minio

from bucket_gateway.core.config import Settings
from bucket_gateway.services.validation import valid_bucket_name
from bucket_gateway.storage.minio_impl import MinioStorage
from bucket_gateway.storage.registry import BucketRegistry

logger = logging.getLogger(__name__)


def _normalize_endpoint(endpoint: str) -> tuple[str, bool]:
    """Extract host:port from endpoint URL and determine if secure (https).

    Returns:
        Tuple of (host:port, secure_flag)
    """
    parsed = urlparse(endpoint)
    secure = parsed.scheme == "https"
    host = parsed.netloc or parsed.path.rstrip("/")
    return host, secure


def build_registry(settings: Settings) -> BucketRegistry:
    """Build one MinioStorage per configured bucket binding.

    Settings used:
        S3_ENDPOINT: Full URL to MinIO/S3 endpoint (e.g., http://localhost:9000)
        S3_ACCESS_KEY / S3_SECRET_KEY: Credentials
        S3_REGION: Optional region passed to the client
        S3_BUCKETS: Comma-separated ``name`` or ``name=backend-bucket`` entries
        S3_AUTO_CREATE_BUCKETS: Create missing backend buckets

    Raises:
        ValueError: If a public bucket name is not a valid bucket name.
    """
    bindings = settings.bucket_bindings()
    for name in bindings:
        if not valid_bucket_name(name):
            raise ValueError(f"Invalid bucket binding name: {name!r}")

    host, secure = _normalize_endpoint(settings.S3_ENDPOINT)
    client = Minio(
        endpoint=host,
        access_key=settings.S3_ACCESS_KEY,
        secret_key=settings.S3_SECRET_KEY,
        secure=secure,
        region=settings.S3_REGION,
    )

    stores = {}
    for name, backend in bindings.items():
        store = MinioStorage(client, name, backend)
        if settings.S3_AUTO_CREATE_BUCKETS:
            store.ensure_bucket()
        stores[name] = store
        logger.info("Bound bucket %s -> %s", name, backend)

    if not stores:
        logger.warning("No bucket bindings configured (S3_BUCKETS is empty)")
    return BucketRegistry(stores)


__all__ = ["build_registry"]
