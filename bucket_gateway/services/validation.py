"""Input validation for bucket names, object paths and upload admission.

All checks are total: malformed or non-string input returns ``False``
instead of raising.
"""

from __future__ import annotations

import ipaddress
import re
from typing import Any, Iterable

MAX_BUCKET_NAME_LENGTH = 63
MAX_PATH_LENGTH = 255

# Letters, digits and the CJK Unified Ideographs block.
_LETTERS = "a-zA-Z0-9\u4e00-\u9fa5"

_BUCKET_NAME_RE = re.compile(r"[a-z0-9-]+")
_PATH_RE = re.compile(rf"[{_LETTERS}/_.\-]+")
_FOLDER_RE = re.compile(rf"[{_LETTERS}/_\-]+")


def _has_traversal(value: str) -> bool:
    return ".." in value or "\\" in value


def valid_bucket_name(name: Any) -> bool:
    """Lowercase letters, digits and hyphens, at most 63 characters."""
    if not isinstance(name, str) or len(name) > MAX_BUCKET_NAME_LENGTH:
        return False
    return _BUCKET_NAME_RE.fullmatch(name) is not None


def valid_path(path: Any) -> bool:
    """Object key safety check: no traversal, no backslash, allowed charset."""
    if not isinstance(path, str) or not path or len(path) > MAX_PATH_LENGTH:
        return False
    if _has_traversal(path):
        return False
    return _PATH_RE.fullmatch(path) is not None


def valid_folder_path(path: Any) -> bool:
    """Folder prefix check; empty is valid and dots are not allowed."""
    if path is None or path == "":
        return True
    if not isinstance(path, str) or len(path) > MAX_PATH_LENGTH:
        return False
    if _has_traversal(path):
        return False
    return _FOLDER_RE.fullmatch(path) is not None


def valid_size(size: Any, max_size: int) -> bool:
    """True for a positive integer no larger than ``max_size``."""
    if isinstance(size, bool) or not isinstance(size, int):
        return False
    return 0 < size <= max_size


def normalize_content_type(content_type: Any) -> str:
    """Drop parameters and case-fold: ``"Text/Plain; charset=utf-8"`` -> ``"text/plain"``."""
    if not isinstance(content_type, str):
        return ""
    return content_type.split(";", 1)[0].strip().lower()


def allowed_content_type(content_type: Any, allow_list: Iterable[str]) -> bool:
    """Exact match of the bare MIME type against the allow-list, ignoring case."""
    media_type = normalize_content_type(content_type)
    if not media_type:
        return False
    try:
        return any(
            isinstance(allowed, str) and allowed.strip().lower() == media_type
            for allowed in allow_list
        )
    except TypeError:
        return False


def public_address(address: Any) -> bool:
    """True for a globally routable IP address.

    Loopback, private, link-local, reserved, multicast and unspecified
    addresses are rejected, including IPv4 addresses mapped into IPv6.
    """
    if not isinstance(address, str):
        return False
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return False
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    return not (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_multicast
        or ip.is_unspecified
        or not ip.is_global
    )


__all__ = [
    "MAX_BUCKET_NAME_LENGTH",
    "MAX_PATH_LENGTH",
    "allowed_content_type",
    "normalize_content_type",
    "public_address",
    "valid_bucket_name",
    "valid_folder_path",
    "valid_path",
    "valid_size",
]
