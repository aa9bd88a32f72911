"""Application services - business logic layer."""

from .access_service import AccessService, parse_year
from .gallery_config_service import GalleryConfigService
from .upload_service import UploadService
from .reconcile_service import ReconcileService
from .media_service import MediaService

__all__ = [
    "AccessService",
    "parse_year",
    "GalleryConfigService",
    "UploadService",
    "ReconcileService",
    "MediaService",
]
