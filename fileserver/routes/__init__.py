"""API routes package."""

from fileserver.routes.share_routes import router as share_router
from fileserver.routes.share_routes import directory_router
from fileserver.routes.file_routes import router as file_router
from fileserver.routes.file_routes import properties_router, ranges_router

__all__ = ["share_router", "directory_router", "file_router", "properties_router", "ranges_router"]
