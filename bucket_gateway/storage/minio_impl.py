"""MinIO-backed implementation of the storage interfaces."""

from __future__ import annotations

import logging
from datetime import datetime
from email.utils import parsedate_to_datetime
from itertools import islice
from typing import BinaryIO, Iterator

from minio import Minio
from minio.error import S3Error

from bucket_gateway.storage.contracts import (
    ObjectBody,
    ObjectInfo,
    ObjectListing,
    ObjectStore,
    StorageError,
)

logger = logging.getLogger(__name__)

_MISSING_CODES = frozenset({"NoSuchKey", "NoSuchObject", "NotFound"})
_CHUNK_SIZE = 1024 * 1024
# Multipart part size used for large uploads (MinIO minimum is 5 MiB).
_PART_SIZE = 10 * 1024 * 1024


def _wrap_error(op: str, bucket: str | None, key: str | None, exc: Exception) -> StorageError:
    return StorageError(op=op, bucket=bucket, key=key, message=str(exc))


def _is_missing(exc: S3Error) -> bool:
    return exc.code in _MISSING_CODES


def _strip_etag(etag: str | None) -> str:
    return (etag or "").strip('"')


def _parse_http_date(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None


def _iter_body(response, chunk_size: int) -> Iterator[bytes]:
    try:
        yield from response.stream(chunk_size)
    finally:
        response.close()
        response.release_conn()


class MinioStorage(ObjectStore):
    """Object store for one MinIO bucket.

    ``name`` is the public bucket name; ``bucket`` is the backend bucket it is
    bound to (usually the same).
    """

    def __init__(self, client: Minio, name: str, bucket: str | None = None):
        self._client = client
        self.name = name
        self.bucket = bucket or name

    def __repr__(self) -> str:
        return f"MinioStorage(name={self.name!r}, bucket={self.bucket!r})"

    # --------------------
    # ObjectStore methods
    # --------------------
    def head(self, key: str) -> ObjectInfo | None:
        try:
            stat = self._client.stat_object(bucket_name=self.bucket, object_name=key)
        except S3Error as exc:
            if _is_missing(exc):
                return None
            raise _wrap_error("head", self.bucket, key, exc) from exc
        except Exception as exc:  # pragma: no cover - covered via wrapping
            raise _wrap_error("head", self.bucket, key, exc) from exc
        return ObjectInfo(
            key=key,
            size=stat.size or 0,
            etag=_strip_etag(stat.etag),
            uploaded=stat.last_modified,
            content_type=stat.content_type,
        )

    def get(self, key: str) -> ObjectBody | None:
        try:
            response = self._client.get_object(bucket_name=self.bucket, object_name=key)
        except S3Error as exc:
            if _is_missing(exc):
                return None
            raise _wrap_error("get", self.bucket, key, exc) from exc
        except Exception as exc:  # pragma: no cover - covered via wrapping
            raise _wrap_error("get", self.bucket, key, exc) from exc

        headers = response.headers or {}
        info = ObjectInfo(
            key=key,
            size=int(headers.get("content-length") or 0),
            etag=_strip_etag(headers.get("etag")),
            uploaded=_parse_http_date(headers.get("last-modified")),
            content_type=headers.get("content-type"),
        )
        return ObjectBody(info=info, chunks=_iter_body(response, _CHUNK_SIZE))

    def put(self, key: str, data: BinaryIO, length: int, *, content_type: str) -> str:
        try:
            result = self._client.put_object(
                bucket_name=self.bucket,
                object_name=key,
                data=data,
                length=length,
                content_type=content_type,
                part_size=_PART_SIZE,
            )
        except Exception as exc:
            raise _wrap_error("put", self.bucket, key, exc) from exc
        logger.info("Stored %s/%s (%d bytes)", self.bucket, key, length)
        return _strip_etag(result.etag)

    def delete(self, key: str) -> None:
        try:
            self._client.remove_object(bucket_name=self.bucket, object_name=key)
        except Exception as exc:
            raise _wrap_error("delete", self.bucket, key, exc) from exc
        logger.info("Deleted %s/%s", self.bucket, key)

    def list(self, *, prefix: str = "", delimiter: str = "/", max_keys: int = 100) -> ObjectListing:
        # MinIO only knows "/" (non-recursive) or no delimiter (recursive).
        try:
            entries = list(
                islice(
                    self._client.list_objects(
                        bucket_name=self.bucket,
                        prefix=prefix or None,
                        recursive=delimiter != "/",
                        include_user_meta=True,
                    ),
                    max_keys + 1,
                )
            )
        except Exception as exc:
            raise _wrap_error("list", self.bucket, prefix, exc) from exc

        truncated = len(entries) > max_keys
        objects: list[ObjectInfo] = []
        prefixes: list[str] = []
        for entry in entries[:max_keys]:
            if entry.is_dir:
                prefixes.append(entry.object_name)
                continue
            objects.append(
                ObjectInfo(
                    key=entry.object_name,
                    size=entry.size or 0,
                    etag=_strip_etag(entry.etag),
                    uploaded=entry.last_modified,
                    content_type=entry.content_type,
                )
            )
        return ObjectListing(objects=objects, prefixes=prefixes, truncated=truncated)

    def bucket_exists(self) -> bool:
        try:
            return bool(self._client.bucket_exists(bucket_name=self.bucket))
        except Exception as exc:
            raise _wrap_error("bucket_exists", self.bucket, None, exc) from exc

    def ensure_bucket(self) -> None:
        try:
            if not self._client.bucket_exists(bucket_name=self.bucket):
                self._client.make_bucket(bucket_name=self.bucket)
                logger.info("Created backend bucket %s", self.bucket)
        except Exception as exc:
            raise _wrap_error("ensure_bucket", self.bucket, None, exc) from exc


__all__ = ["MinioStorage"]
