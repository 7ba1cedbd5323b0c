"""API request and response models.

Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(CamelModel):
    """Error envelope."""

    error: str


class ObjectSummary(CamelModel):
    """One entry of a listing."""

    key: str
    size: int
    etag: str
    uploaded: Optional[datetime] = None
    content_type: Optional[str] = None


class ListResponse(CamelModel):
    success: bool = True
    bucket: str
    objects: list[ObjectSummary]
    prefixes: list[str]
    truncated: bool


class MetadataResponse(CamelModel):
    success: bool = True
    bucket: str
    filename: str
    size: int
    etag: str
    uploaded: Optional[datetime] = None
    content_type: str


class UploadResponse(CamelModel):
    success: bool = True
    bucket: str
    filename: str
    path: str
    content_type: str
    size: int
    etag: str
    source: Optional[str] = None
    message: Optional[str] = None


class DeleteResponse(CamelModel):
    success: bool = True
    bucket: str
    filename: str
    message: str


class RemoteFetchRequest(CamelModel):
    """JSON body for uploads fetched from a remote URL."""

    file_url: Optional[str] = None
    filename: Optional[str] = None
