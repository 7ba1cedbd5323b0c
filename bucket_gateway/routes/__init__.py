"""API routes package."""

from bucket_gateway.routes.files import router as files_router
from bucket_gateway.routes.health import router as health_router

__all__ = ["files_router", "health_router"]
