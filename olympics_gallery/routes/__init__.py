"""HTTP routes."""
from .admin import router as admin_router
from .files import router as files_router
from .gallery import router as gallery_router
from .media import router as media_router
from .storage_events import router as storage_events_router

__all__ = [
    "admin_router",
    "files_router",
    "gallery_router",
    "media_router",
    "storage_events_router",
]
