"""Response builders for JSON envelopes and file downloads."""

from urllib.parse import quote

from fastapi.responses import JSONResponse, StreamingResponse

from bucket_gateway.schemas.api import ErrorResponse
from bucket_gateway.storage.contracts import ObjectBody

DEFAULT_MEDIA_TYPE = "application/octet-stream"
DOWNLOAD_CACHE_CONTROL = "public, max-age=31536000"


def error_response(message: str, status_code: int = 400) -> JSONResponse:
    """``{"error": message}`` with the given status."""
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=message).model_dump(by_alias=True),
    )


def content_disposition(path: str) -> str:
    return f'attachment; filename="{quote(path, safe="")}"'


def download_response(body: ObjectBody, path: str) -> StreamingResponse:
    """Stream an object body with length, etag, caching and disposition headers."""
    info = body.info
    headers = {
        "Content-Length": str(info.size),
        "Cache-Control": DOWNLOAD_CACHE_CONTROL,
        "Content-Disposition": content_disposition(path),
    }
    if info.etag:
        headers["ETag"] = f'"{info.etag}"'
    return StreamingResponse(
        body.chunks,
        media_type=info.content_type or DEFAULT_MEDIA_TYPE,
        headers=headers,
    )
