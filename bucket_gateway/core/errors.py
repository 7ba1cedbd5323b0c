"""Error kinds surfaced to API callers.

Each error carries the HTTP status it maps to; the application-wide handler
renders it as ``{"error": message}``.
"""

from __future__ import annotations


class FacadeError(Exception):
    """Base class for errors returned to the caller."""

    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInput(FacadeError):
    """Malformed bucket name, path, folder, size or content type."""

    status_code = 400


class Unauthorized(FacadeError):
    """Missing or incorrect bearer token."""

    status_code = 401


class NotFound(FacadeError):
    """Unknown bucket or missing object."""

    status_code = 404


class UpstreamFailure(FacadeError):
    """Remote-URL fetch failed or returned a non-success status."""

    status_code = 400


class BackendFailure(FacadeError):
    """Unexpected error from the object store."""

    status_code = 500


__all__ = [
    "FacadeError",
    "InvalidInput",
    "Unauthorized",
    "NotFound",
    "UpstreamFailure",
    "BackendFailure",
]
