"""Health check endpoints."""

import logging

from fastapi import APIRouter, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
def health_check():
    """Liveness probe."""
    return {"status": "ok"}


@router.get("/health/ready")
async def readiness_check(request: Request):
    """Readiness probe - checks every bound backend bucket."""
    checks = {}
    all_ok = True

    facade = getattr(request.app.state, "facade", None)
    if facade is None or not facade.registry:
        return JSONResponse(
            status_code=503,
            content={"status": "degraded", "checks": {"storage": "not configured"}},
        )

    for name, store in facade.registry.items():
        try:
            exists = await run_in_threadpool(store.bucket_exists)
            checks[name] = "ok" if exists else "missing"
            all_ok = all_ok and exists
        except Exception as e:
            logger.warning("Readiness check failed for bucket %s: %s", name, e)
            checks[name] = f"error: {e}"
            all_ok = False

    return JSONResponse(
        status_code=200 if all_ok else 503,
        content={"status": "ok" if all_ok else "degraded", "checks": checks},
    )
