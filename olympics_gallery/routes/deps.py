"""Shared dependencies for gallery routes.

This module contains factory functions for creating services
used across all route modules.
"""
import logging

from ..application.services import (
    AccessService, GalleryConfigService, UploadService, ReconcileService, MediaService
)
from ..database import create_connection
from ..infrastructure.repositories import OlympicsRepository, MediaRepository
from ..infrastructure.storage import get_storage

logger = logging.getLogger(__name__)


def get_access_service(db) -> AccessService:
    """Create AccessService with repositories."""
    return AccessService(olympics_repository=OlympicsRepository(db))


def get_gallery_config_service(db) -> GalleryConfigService:
    """Create GalleryConfigService with repositories."""
    return GalleryConfigService(olympics_repository=OlympicsRepository(db))


def get_upload_service(db) -> UploadService:
    """Create UploadService with repositories and storage."""
    return UploadService(media_repository=MediaRepository(db), storage=get_storage())


def get_reconcile_service(db) -> ReconcileService:
    """Create ReconcileService with repositories and storage."""
    return ReconcileService(media_repository=MediaRepository(db), storage=get_storage())


def get_media_service(db) -> MediaService:
    """Create MediaService with repositories and storage."""
    return MediaService(media_repository=MediaRepository(db), storage=get_storage())


async def reconcile_objects(keys: list[str]) -> int:
    """Reconcile stored originals outside a request (background task)."""
    db = create_connection()
    try:
        return await get_reconcile_service(db).handle_object_created(keys)
    finally:
        db.close()
