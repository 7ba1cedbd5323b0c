"""Object key generation and filename sanitizing."""

from __future__ import annotations

import re
import secrets
import string
import time

from bucket_gateway.services.validation import normalize_content_type

DEFAULT_EXTENSION = "bin"
MAX_BASE_NAME_LENGTH = 50
RANDOM_SUFFIX_LENGTH = 6

_BASE36 = string.digits + string.ascii_lowercase

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
    "application/pdf": "pdf",
    "text/plain": "txt",
    "application/msword": "doc",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "docx",
    "application/vnd.ms-excel": "xls",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
}

_UNSAFE_BASE_CHARS = re.compile("[^A-Za-z0-9\u4e00-\u9fa5_-]")
_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def extension_for(content_type: str | None) -> str:
    """File extension for a MIME type, ``bin`` when unknown."""
    return EXTENSIONS.get(normalize_content_type(content_type), DEFAULT_EXTENSION)


def _random_suffix(length: int = RANDOM_SUFFIX_LENGTH) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def _base_name(original_name: str | None) -> str:
    if not original_name:
        return ""
    name = re.split(r"[/\\]", original_name)[-1]
    stem = name.split(".", 1)[0]
    return _UNSAFE_BASE_CHARS.sub("_", stem)[:MAX_BASE_NAME_LENGTH]


def generate_safe_name(original_name: str | None, content_type: str | None) -> str:
    """Build a unique, path-safe object name.

    Format is ``{unix_ms}_{random6}_{base}.{ext}``, or ``{unix_ms}_{random6}.{ext}``
    when there is no usable original name. Uniqueness relies on the
    millisecond timestamp plus six random base36 characters.
    """
    prefix = f"{time.time_ns() // 1_000_000}_{_random_suffix()}"
    base = _base_name(original_name)
    ext = extension_for(content_type)
    if base:
        return f"{prefix}_{base}.{ext}"
    return f"{prefix}.{ext}"


def sanitize_filename(filename: str) -> str:
    """Replace anything outside ``[A-Za-z0-9._-]`` with ``_``."""
    return _UNSAFE_FILENAME_CHARS.sub("_", filename.strip())


def normalize_folder(folder: str | None) -> str:
    """``" /a/b/ "`` -> ``"a/b/"``; empty input gives an empty prefix."""
    cleaned = (folder or "").strip().strip("/")
    return f"{cleaned}/" if cleaned else ""


__all__ = [
    "DEFAULT_EXTENSION",
    "EXTENSIONS",
    "extension_for",
    "generate_safe_name",
    "normalize_folder",
    "sanitize_filename",
]
