"""Bucket resolution against the bindings configured at startup."""

from __future__ import annotations

from typing import Iterator, Mapping

from bucket_gateway.storage.contracts import ObjectStore


class BucketRegistry(Mapping[str, ObjectStore]):
    """Immutable mapping of public bucket name to store handle."""

    def __init__(self, stores: Mapping[str, ObjectStore] | None = None):
        self._stores = dict(stores or {})

    def resolve(self, name: str) -> ObjectStore | None:
        """Return the store bound to ``name`` (exact match) or ``None``."""
        return self._stores.get(name)

    def __getitem__(self, name: str) -> ObjectStore:
        return self._stores[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._stores)

    def __len__(self) -> int:
        return len(self._stores)

    def __repr__(self) -> str:
        return f"BucketRegistry({sorted(self._stores)!r})"


__all__ = ["BucketRegistry"]
