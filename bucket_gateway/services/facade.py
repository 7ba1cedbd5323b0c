"""Storage facade: bucket-scoped list, get, put and delete.

Every operation validates its input before touching the backend and turns
backend failures into :class:`BackendFailure`. The facade itself keeps no
mutable state; consistency is whatever the object store guarantees.
"""

from __future__ import annotations

import logging

import httpx
from fastapi.concurrency import run_in_threadpool

from bucket_gateway.core.errors import BackendFailure, InvalidInput, NotFound
from bucket_gateway.schemas.domain import AdmissionPolicy
from bucket_gateway.services.ingestion import HostResolver, Ingestion, IngestTarget, UploadResult
from bucket_gateway.services.validation import valid_bucket_name, valid_path
from bucket_gateway.storage.contracts import (
    ObjectBody,
    ObjectInfo,
    ObjectListing,
    ObjectStore,
    StorageError,
)
from bucket_gateway.storage.registry import BucketRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_KEYS = 100
MAX_KEYS_LIMIT = 1000
SUPPORTED_DELIMITERS = ("", "/")


def _missing_object(path: str) -> NotFound:
    return NotFound(f'File "{path}" not found')


class StorageFacade:
    """CRUD over the configured buckets under a fixed admission policy."""

    def __init__(
        self,
        registry: BucketRegistry,
        policy: AdmissionPolicy,
        *,
        http_client: httpx.AsyncClient | None = None,
        fetch_timeout: float | None = None,
        host_resolver: HostResolver | None = None,
    ):
        self.registry = registry
        self.policy = policy
        self._http_client = http_client
        self._fetch_timeout = fetch_timeout
        self._host_resolver = host_resolver

    def resolve(self, bucket: str) -> ObjectStore:
        """Validate the bucket name and look up its store."""
        if not valid_bucket_name(bucket):
            raise InvalidInput("Invalid bucket name")
        store = self.registry.resolve(bucket)
        if store is None:
            logger.warning("No binding for bucket %s", bucket)
            raise NotFound(f'Bucket "{bucket}" not found')
        return store

    @staticmethod
    def _require_path(path: str) -> None:
        if not valid_path(path):
            raise InvalidInput("Invalid file path")

    async def list_objects(
        self,
        bucket: str,
        *,
        prefix: str = "",
        delimiter: str = "/",
        max_keys: int = DEFAULT_MAX_KEYS,
    ) -> ObjectListing:
        store = self.resolve(bucket)
        if prefix and not valid_path(prefix):
            raise InvalidInput("Invalid prefix")
        if delimiter not in SUPPORTED_DELIMITERS:
            raise InvalidInput("Unsupported delimiter, use '/' or an empty string")
        if isinstance(max_keys, bool) or not isinstance(max_keys, int) or not 1 <= max_keys <= MAX_KEYS_LIMIT:
            raise InvalidInput(f"maxKeys must be between 1 and {MAX_KEYS_LIMIT}")

        try:
            return await run_in_threadpool(
                store.list, prefix=prefix, delimiter=delimiter, max_keys=max_keys
            )
        except StorageError as exc:
            logger.error("List failed: %s", exc)
            raise BackendFailure("Failed to list files") from exc

    async def head_object(self, bucket: str, path: str) -> ObjectInfo:
        """Metadata for one object; ``NotFound`` when absent."""
        store = self.resolve(bucket)
        self._require_path(path)
        try:
            info = await run_in_threadpool(store.head, path)
        except StorageError as exc:
            logger.error("Head failed: %s", exc)
            raise BackendFailure("Failed to get file") from exc
        if info is None:
            raise _missing_object(path)
        return info

    async def open_object(self, bucket: str, path: str) -> ObjectBody:
        """Open an object for streaming; ``NotFound`` when absent."""
        store = self.resolve(bucket)
        self._require_path(path)
        try:
            body = await run_in_threadpool(store.get, path)
        except StorageError as exc:
            logger.error("Get failed: %s", exc)
            raise BackendFailure("Failed to get file") from exc
        if body is None:
            raise _missing_object(path)
        return body

    async def put(self, bucket: str, upload: Ingestion) -> UploadResult:
        """Store an upload using whichever ingestion mode it carries."""
        store = self.resolve(bucket)
        target = IngestTarget(
            bucket=bucket,
            store=store,
            policy=self.policy,
            http_client=self._http_client,
            fetch_timeout=self._fetch_timeout,
            resolve_host=self._host_resolver,
        )
        result = await upload.ingest(target)
        logger.info(
            "Uploaded %s/%s via %s (%d bytes)",
            bucket,
            result.path,
            upload.mode.value,
            result.size,
        )
        return result

    async def delete_object(self, bucket: str, path: str) -> None:
        """Delete an existing object; ``NotFound`` when it is already gone."""
        store = self.resolve(bucket)
        self._require_path(path)
        try:
            info = await run_in_threadpool(store.head, path)
            if info is None:
                raise _missing_object(path)
            await run_in_threadpool(store.delete, path)
        except StorageError as exc:
            logger.error("Delete failed: %s", exc)
            raise BackendFailure("Failed to delete file") from exc


__all__ = ["StorageFacade", "DEFAULT_MAX_KEYS", "MAX_KEYS_LIMIT"]
