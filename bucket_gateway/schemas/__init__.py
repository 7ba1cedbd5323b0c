"""Request, response and domain schemas."""

from bucket_gateway.schemas.api import (
    DeleteResponse,
    ErrorResponse,
    ListResponse,
    MetadataResponse,
    ObjectSummary,
    RemoteFetchRequest,
    UploadResponse,
)
from bucket_gateway.schemas.domain import AdmissionPolicy

__all__ = [
    "AdmissionPolicy",
    "DeleteResponse",
    "ErrorResponse",
    "ListResponse",
    "MetadataResponse",
    "ObjectSummary",
    "RemoteFetchRequest",
    "UploadResponse",
]
