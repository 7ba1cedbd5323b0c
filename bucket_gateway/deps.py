"""Shared dependencies for FastAPI routes."""

from __future__ import annotations

from fastapi import Request

from bucket_gateway.core.errors import BackendFailure
from bucket_gateway.services.facade import StorageFacade


def get_facade(request: Request) -> StorageFacade:
    """Return the facade built during application startup."""
    facade = getattr(request.app.state, "facade", None)
    if facade is None:
        raise BackendFailure("Storage is not configured")
    return facade


__all__ = ["get_facade"]
