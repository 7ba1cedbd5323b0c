"""Upload ingestion modes.

Uploads arrive in one of three shapes: a raw request body written to an
explicit path, a multipart form carrying a file, or a JSON body naming a
remote URL to fetch. Each shape is an :class:`Ingestion` variant with the
same ``ingest(target) -> UploadResult`` contract. Checks run in a fixed
order before anything is written: path, then size, then content type.
"""

from __future__ import annotations

import asyncio
import enum
import ipaddress
import logging
import socket
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import IO, Any, AsyncIterator, Awaitable, Callable
from urllib.parse import unquote, urlparse

import httpx
from fastapi.concurrency import run_in_threadpool

from bucket_gateway.core.errors import BackendFailure, InvalidInput, UpstreamFailure
from bucket_gateway.schemas.domain import AdmissionPolicy
from bucket_gateway.services.naming import generate_safe_name, normalize_folder, sanitize_filename
from bucket_gateway.services.validation import (
    allowed_content_type,
    normalize_content_type,
    public_address,
    valid_folder_path,
    valid_path,
    valid_size,
)
from bucket_gateway.storage.contracts import ObjectInfo, ObjectStore, StorageError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
REMOTE_SOURCE = "external_url"
FALLBACK_REMOTE_FILENAME = "downloaded_file"
# Bodies above this are spooled to disk instead of memory.
SPOOL_MEMORY_LIMIT = 8 * 1024 * 1024
MAX_REDIRECTS = 5

HostResolver = Callable[[str], Awaitable[list[str]]]


class IngestionMode(str, enum.Enum):
    RAW_STREAM = "raw_stream"
    MULTIPART_FORM = "multipart_form"
    REMOTE_FETCH = "remote_fetch"


def classify_upload(content_type: str | None) -> IngestionMode:
    """Pick the ingestion mode for a POST to a bucket's file collection."""
    media_type = normalize_content_type(content_type)
    if media_type == "multipart/form-data":
        return IngestionMode.MULTIPART_FORM
    if media_type == "application/json":
        return IngestionMode.REMOTE_FETCH
    raise InvalidInput("Unsupported content type, use multipart/form-data or application/json")


@dataclass(frozen=True, slots=True)
class IngestTarget:
    """Resolved destination and limits for one upload."""

    bucket: str
    store: ObjectStore
    policy: AdmissionPolicy
    http_client: httpx.AsyncClient | None = None
    fetch_timeout: float | None = None
    resolve_host: HostResolver | None = None


@dataclass(frozen=True, slots=True)
class UploadResult:
    bucket: str
    filename: str
    path: str
    content_type: str
    size: int
    etag: str
    source: str | None = None


# --------------------
# Shared checks
# --------------------
def _size_error(policy: AdmissionPolicy) -> InvalidInput:
    return InvalidInput(f"File size must be between 1 byte and {policy.max_size_mb:g}MB")


def _require_path(path: str, message: str = "Invalid file path") -> None:
    if not valid_path(path):
        logger.info("Rejected object path %r", path)
        raise InvalidInput(message)


def _require_declared_size(declared: Any, policy: AdmissionPolicy) -> None:
    """Check a declared length (header or form part) when one is present."""
    if declared is None or declared == "":
        return
    try:
        size = int(declared)
    except (TypeError, ValueError):
        raise InvalidInput("Invalid Content-Length") from None
    if not valid_size(size, policy.max_size):
        raise _size_error(policy)


def _require_content_type(content_type: str, policy: AdmissionPolicy) -> None:
    if not allowed_content_type(content_type, policy.allowed_content_types):
        logger.info("Rejected content type %r", content_type)
        raise InvalidInput(f"Unsupported file type {content_type}")


async def spool(chunks: AsyncIterator[bytes], policy: AdmissionPolicy) -> tuple[IO[bytes], int]:
    """Buffer a byte stream, enforcing the size ceiling as bytes arrive.

    Returns the rewound buffer and its length. The caller owns the buffer.
    """
    buffer = tempfile.SpooledTemporaryFile(max_size=SPOOL_MEMORY_LIMIT)
    size = 0
    try:
        async for chunk in chunks:
            size += len(chunk)
            if size > policy.max_size:
                raise _size_error(policy)
            buffer.write(chunk)
        if not valid_size(size, policy.max_size):
            raise _size_error(policy)
    except BaseException:
        buffer.close()
        raise
    buffer.seek(0)
    return buffer, size


async def write_object(
    target: IngestTarget,
    key: str,
    data: IO[bytes],
    length: int,
    content_type: str,
) -> ObjectInfo:
    """Write ``data`` under ``key`` and confirm it with a metadata probe."""
    try:
        await run_in_threadpool(target.store.put, key, data, length, content_type=content_type)
        info = await run_in_threadpool(target.store.head, key)
    except StorageError as exc:
        logger.error("Write failed: %s", exc)
        raise BackendFailure("Failed to store file") from exc
    if info is None:
        logger.error("Object %s/%s missing after write", target.bucket, key)
        raise BackendFailure("Stored file could not be verified")
    return info


# --------------------
# Variants
# --------------------
class Ingestion(ABC):
    """One way of obtaining upload bytes."""

    mode: IngestionMode

    @abstractmethod
    async def ingest(self, target: IngestTarget) -> UploadResult:
        """Validate, store and describe the upload.

        Raises:
            InvalidInput: Path, size or content type rejected.
            UpstreamFailure: Remote source could not be fetched.
            BackendFailure: The object store failed.
        """


@dataclass
class RawStreamUpload(Ingestion):
    """Request body written verbatim to an explicit path."""

    path: str
    chunks: AsyncIterator[bytes]
    content_type: str | None = None
    content_length: str | int | None = None

    mode = IngestionMode.RAW_STREAM

    async def ingest(self, target: IngestTarget) -> UploadResult:
        _require_path(self.path)
        _require_declared_size(self.content_length, target.policy)
        content_type = (self.content_type or "").strip() or DEFAULT_CONTENT_TYPE
        _require_content_type(content_type, target.policy)

        buffer, size = await spool(self.chunks, target.policy)
        with buffer:
            info = await write_object(target, self.path, buffer, size, content_type)
        return UploadResult(
            bucket=target.bucket,
            filename=self.path,
            path=self.path,
            content_type=content_type,
            size=info.size,
            etag=info.etag,
        )


@dataclass
class MultipartUpload(Ingestion):
    """A form upload: ``file`` plus optional ``folder`` and ``filename`` fields.

    ``file`` is a Starlette ``UploadFile`` (or ``None`` when the form has no
    file part).
    """

    file: Any
    folder: str | None = None
    filename: str | None = None

    mode = IngestionMode.MULTIPART_FORM

    async def ingest(self, target: IngestTarget) -> UploadResult:
        if self.file is None:
            raise InvalidInput("No file found in form data")

        prefix = normalize_folder(self.folder)
        if not valid_folder_path(prefix.rstrip("/")):
            raise InvalidInput("Invalid folder path")

        content_type = (self.file.content_type or "").strip() or DEFAULT_CONTENT_TYPE
        if self.filename and self.filename.strip():
            name = sanitize_filename(self.filename)
        else:
            name = generate_safe_name(self.file.filename, content_type)
        full_path = f"{prefix}{name}"
        _require_path(full_path, "Invalid file name")

        size = self.file.size
        if size is None:
            size = await run_in_threadpool(_measure, self.file.file)
        if not valid_size(size, target.policy.max_size):
            raise _size_error(target.policy)
        _require_content_type(content_type, target.policy)

        await self.file.seek(0)
        info = await write_object(target, full_path, self.file.file, size, content_type)
        return UploadResult(
            bucket=target.bucket,
            filename=name,
            path=full_path,
            content_type=content_type,
            size=info.size,
            etag=info.etag,
        )


def _measure(fileobj: IO[bytes]) -> int:
    fileobj.seek(0, 2)
    size = fileobj.tell()
    fileobj.seek(0)
    return size


async def resolve_host(host: str) -> list[str]:
    """Addresses ``host`` resolves to, via the event loop's resolver."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, None, type=socket.SOCK_STREAM)
    return [info[4][0] for info in infos]


async def _require_public_host(url: httpx.URL, target: IngestTarget) -> None:
    """Refuse hosts that are, or resolve to, non-public addresses."""
    host = url.host
    if not host:
        raise InvalidInput("Invalid file URL")
    if public_address(host):
        return
    try:
        addresses = [str(ipaddress.ip_address(host))]
    except ValueError:
        resolver = target.resolve_host or resolve_host
        try:
            addresses = await resolver(host)
        except OSError as exc:
            logger.warning("Could not resolve %s: %s", host, exc)
            raise UpstreamFailure(f"Failed to fetch file: cannot resolve {host}") from exc
    if not addresses or not all(public_address(address) for address in addresses):
        logger.warning("Refused remote fetch from %s (%s)", host, ", ".join(addresses))
        raise InvalidInput("File URL points to a disallowed address")


@dataclass
class RemoteFetchUpload(Ingestion):
    """Fetch ``file_url`` and store it under ``filename`` or the URL's last segment.

    Only public http(s) hosts are fetched. Redirects are followed by hand so
    every hop goes through the same host check.
    """

    file_url: str | None
    filename: str | None = None

    mode = IngestionMode.REMOTE_FETCH

    def target_name(self) -> str:
        name = (self.filename or "").strip()
        if not name:
            tail = urlparse(self.file_url or "").path.rsplit("/", 1)[-1]
            name = unquote(tail) or FALLBACK_REMOTE_FILENAME
        return sanitize_filename(name)

    def _require_url(self) -> None:
        if not self.file_url:
            raise InvalidInput("Missing file URL")
        try:
            parsed = urlparse(self.file_url)
            hostname = parsed.hostname
        except ValueError:
            raise InvalidInput("Invalid file URL") from None
        if parsed.scheme not in ("http", "https"):
            raise InvalidInput("File URL must use http or https")
        if not hostname:
            raise InvalidInput("Invalid file URL")

    async def ingest(self, target: IngestTarget) -> UploadResult:
        self._require_url()
        if target.http_client is None:
            raise UpstreamFailure("Remote fetch is not available")

        name = self.target_name()
        _require_path(name, "Invalid file name")

        try:
            buffer, size, content_type = await asyncio.wait_for(
                self._fetch(target), timeout=target.fetch_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Timed out fetching %s", self.file_url)
            raise UpstreamFailure("Timed out fetching file") from None
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.warning("Fetching %s failed: %s", self.file_url, exc)
            raise UpstreamFailure(f"Failed to fetch file: {exc}") from exc

        with buffer:
            info = await write_object(target, name, buffer, size, content_type)
        return UploadResult(
            bucket=target.bucket,
            filename=name,
            path=name,
            content_type=content_type,
            size=info.size,
            etag=info.etag,
            source=REMOTE_SOURCE,
        )

    async def _fetch(self, target: IngestTarget) -> tuple[IO[bytes], int, str]:
        url = httpx.URL(self.file_url)
        for _ in range(MAX_REDIRECTS + 1):
            await _require_public_host(url, target)
            buffer = None
            try:
                async with target.http_client.stream("GET", url, follow_redirects=False) as response:
                    if response.is_redirect:
                        url = response.url.join(response.headers["location"])
                        continue
                    if not response.is_success:
                        logger.warning("Upstream %s returned %d", url, response.status_code)
                        raise UpstreamFailure(
                            f"Failed to fetch file: {response.status_code} {response.reason_phrase}".rstrip()
                        )
                    content_type = response.headers.get("content-type", "").strip() or DEFAULT_CONTENT_TYPE
                    _require_declared_size(response.headers.get("content-length"), target.policy)
                    _require_content_type(content_type, target.policy)
                    buffer, size = await spool(response.aiter_bytes(), target.policy)
            except BaseException:
                # Cancellation can land while the response is closing.
                if buffer is not None:
                    buffer.close()
                raise
            return buffer, size, content_type
        raise UpstreamFailure("Failed to fetch file: too many redirects")


__all__ = [
    "HostResolver",
    "IngestTarget",
    "Ingestion",
    "IngestionMode",
    "MultipartUpload",
    "RawStreamUpload",
    "RemoteFetchUpload",
    "UploadResult",
    "classify_upload",
    "resolve_host",
    "spool",
    "write_object",
]
