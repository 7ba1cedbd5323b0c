"""Bucket file endpoints: list, download, upload and delete."""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from bucket_gateway.core.errors import InvalidInput
from bucket_gateway.core.security import require_api_key
from bucket_gateway.deps import get_facade
from bucket_gateway.routes.responses import download_response
from bucket_gateway.schemas.api import (
    DeleteResponse,
    ListResponse,
    MetadataResponse,
    ObjectSummary,
    RemoteFetchRequest,
    UploadResponse,
)
from bucket_gateway.services.facade import DEFAULT_MAX_KEYS, StorageFacade
from bucket_gateway.services.ingestion import (
    DEFAULT_CONTENT_TYPE,
    IngestionMode,
    MultipartUpload,
    RawStreamUpload,
    RemoteFetchUpload,
    UploadResult,
    classify_upload,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/buckets/{bucket}/files",
    tags=["files"],
    dependencies=[Depends(require_api_key)],
)

FacadeDep = Annotated[StorageFacade, Depends(get_facade)]


def _upload_response(result: UploadResult, message: str | None = None) -> UploadResponse:
    return UploadResponse(
        bucket=result.bucket,
        filename=result.filename,
        path=result.path,
        content_type=result.content_type,
        size=result.size,
        etag=result.etag,
        source=result.source,
        message=message,
    )


def _form_text(value) -> str | None:
    return value if isinstance(value, str) else None


@router.get("", response_model=ListResponse)
async def list_files(
    bucket: str,
    facade: FacadeDep,
    prefix: str = "",
    delimiter: str = "/",
    max_keys: int = Query(DEFAULT_MAX_KEYS, alias="maxKeys"),
):
    """List objects and common prefixes under ``prefix``."""
    listing = await facade.list_objects(
        bucket, prefix=prefix, delimiter=delimiter, max_keys=max_keys
    )
    return ListResponse(
        bucket=bucket,
        objects=[
            ObjectSummary(
                key=obj.key,
                size=obj.size,
                etag=obj.etag,
                uploaded=obj.uploaded,
                content_type=obj.content_type,
            )
            for obj in listing.objects
        ],
        prefixes=listing.prefixes,
        truncated=listing.truncated,
    )


@router.get("/{path:path}", response_model=MetadataResponse)
async def get_file(bucket: str, path: str, facade: FacadeDep, metadata: bool = False):
    """Download a file, or return its metadata with ``?metadata=true``."""
    if metadata:
        info = await facade.head_object(bucket, path)
        return MetadataResponse(
            bucket=bucket,
            filename=path,
            size=info.size,
            etag=info.etag,
            uploaded=info.uploaded,
            content_type=info.content_type or DEFAULT_CONTENT_TYPE,
        )
    body = await facade.open_object(bucket, path)
    return download_response(body, path)


@router.post(
    "",
    response_model=UploadResponse,
    response_model_exclude_none=True,
    status_code=201,
)
async def upload_file(bucket: str, request: Request, facade: FacadeDep):
    """Upload via multipart form (``file``, ``folder``, ``filename``) or JSON ``{fileUrl, filename}``."""
    # Resolve before parsing the body so unknown buckets fail fast.
    facade.resolve(bucket)
    mode = classify_upload(request.headers.get("content-type"))

    if mode is IngestionMode.MULTIPART_FORM:
        async with request.form() as form:
            file = form.get("file")
            upload = MultipartUpload(
                file=file if isinstance(file, UploadFile) else None,
                folder=_form_text(form.get("folder")),
                filename=_form_text(form.get("filename")),
            )
            result = await facade.put(bucket, upload)
        return _upload_response(result)

    try:
        payload = RemoteFetchRequest.model_validate(await request.json())
    except (json.JSONDecodeError, UnicodeDecodeError, ValidationError):
        raise InvalidInput("Invalid JSON body") from None
    upload = RemoteFetchUpload(file_url=payload.file_url, filename=payload.filename)
    result = await facade.put(bucket, upload)
    return _upload_response(result)


@router.put("/{path:path}", response_model=UploadResponse, response_model_exclude_none=True)
@router.post("/{path:path}", response_model=UploadResponse, response_model_exclude_none=True)
async def put_file(bucket: str, path: str, request: Request, facade: FacadeDep):
    """Write the raw request body to ``path``, replacing any existing object."""
    upload = RawStreamUpload(
        path=path,
        chunks=request.stream(),
        content_type=request.headers.get("content-type"),
        content_length=request.headers.get("content-length"),
    )
    result = await facade.put(bucket, upload)
    return _upload_response(result, message="File updated successfully")


@router.delete("/{path:path}", response_model=DeleteResponse)
async def delete_file(bucket: str, path: str, facade: FacadeDep):
    """Delete an existing file."""
    await facade.delete_object(bucket, path)
    return DeleteResponse(bucket=bucket, filename=path, message="File deleted successfully")
