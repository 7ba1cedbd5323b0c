"""Business logic services."""

from bucket_gateway.services.facade import StorageFacade
from bucket_gateway.services.ingestion import (
    IngestionMode,
    MultipartUpload,
    RawStreamUpload,
    RemoteFetchUpload,
    UploadResult,
    classify_upload,
)
from bucket_gateway.services.naming import generate_safe_name
from bucket_gateway.services.validation import (
    allowed_content_type,
    valid_bucket_name,
    valid_folder_path,
    valid_path,
    valid_size,
)

__all__ = [
    "IngestionMode",
    "MultipartUpload",
    "RawStreamUpload",
    "RemoteFetchUpload",
    "StorageFacade",
    "UploadResult",
    "allowed_content_type",
    "classify_upload",
    "generate_safe_name",
    "valid_bucket_name",
    "valid_folder_path",
    "valid_path",
    "valid_size",
]
