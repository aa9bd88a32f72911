"""Storage abstraction layer for object operations.

Supports multiple backends: local filesystem, S3, MinIO.
"""
from .base import (
    StorageInterface,
    StorageError,
    ObjectNotFoundError,
    UploadError,
    DownloadError,
    DeleteError,
    StorageConfig,
    ObjectAttributes,
)
from .local_storage import LocalStorage
from .s3_storage import S3Storage
from .factory import get_storage, get_storage_from_config, reset_storage

__all__ = [
    "StorageInterface",
    "StorageError",
    "ObjectNotFoundError",
    "UploadError",
    "DownloadError",
    "DeleteError",
    "StorageConfig",
    "ObjectAttributes",
    "LocalStorage",
    "S3Storage",
    "get_storage",
    "get_storage_from_config",
    "reset_storage",
]
