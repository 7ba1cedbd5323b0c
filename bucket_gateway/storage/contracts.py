"""Storage interfaces and error types."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import BinaryIO, Iterator, Protocol, runtime_checkable


class StorageError(Exception):
    """Wraps underlying storage exceptions with operation context."""

    def __init__(self, op: str, bucket: str | None, key: str | None, message: str):
        self.op = op
        self.bucket = bucket
        self.key = key
        self.message = message
        super().__init__(self.__str__())

    def __str__(self) -> str:  # pragma: no cover - trivial string formatting
        bucket_repr = self.bucket or "<unknown>"
        key_repr = self.key or "<unknown>"
        return f"{self.op} failed for bucket={bucket_repr} key={key_repr}: {self.message}"


@dataclass(frozen=True, slots=True)
class ObjectInfo:
    """Backend metadata for a stored object."""

    key: str
    size: int
    etag: str
    uploaded: datetime | None = None
    content_type: str | None = None


@dataclass(slots=True)
class ObjectBody:
    """An object's metadata plus a lazily read body.

    The chunk iterator releases the underlying connection once exhausted
    or closed.
    """

    info: ObjectInfo
    chunks: Iterator[bytes]


@dataclass(frozen=True, slots=True)
class ObjectListing:
    """One page of a prefix/delimiter listing."""

    objects: list[ObjectInfo] = field(default_factory=list)
    prefixes: list[str] = field(default_factory=list)
    truncated: bool = False


@runtime_checkable
class ObjectStore(Protocol):
    """Contract for a single bucket's object store.

    ``head`` and ``get`` return ``None`` for missing objects; every other
    backend failure raises :class:`StorageError`.
    """

    name: str

    def head(self, key: str) -> ObjectInfo | None:
        ...

    def get(self, key: str) -> ObjectBody | None:
        ...

    def put(self, key: str, data: BinaryIO, length: int, *, content_type: str) -> str:
        ...

    def delete(self, key: str) -> None:
        ...

    def list(self, *, prefix: str = "", delimiter: str = "/", max_keys: int = 100) -> ObjectListing:
        ...

    def bucket_exists(self) -> bool:
        ...


__all__ = ["StorageError", "ObjectInfo", "ObjectBody", "ObjectListing", "ObjectStore"]
