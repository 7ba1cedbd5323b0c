"""Bearer-token check against the shared API key."""

import hmac

from fastapi import Request

from bucket_gateway.core.errors import Unauthorized

BEARER_PREFIX = "Bearer "


def is_valid_api_key(authorization: str | None, api_key: str) -> bool:
    """True when ``authorization`` is ``Bearer <api_key>`` and a key is configured."""
    if not api_key or not authorization or not authorization.startswith(BEARER_PREFIX):
        return False
    provided = authorization[len(BEARER_PREFIX):]
    return hmac.compare_digest(provided.encode("utf-8"), api_key.encode("utf-8"))


def require_api_key(request: Request) -> None:
    """Router dependency; pre-flight (OPTIONS) requests pass through.

    The key is the one fixed on ``app.state`` at startup.
    """
    if request.method == "OPTIONS":
        return
    authorization = request.headers.get("Authorization")
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise Unauthorized("API key missing")
    if not is_valid_api_key(authorization, getattr(request.app.state, "api_key", "")):
        raise Unauthorized("API key invalid")
