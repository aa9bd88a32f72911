"""Storage backend selection.

``STORAGE_BACKEND`` picks where media objects live:

- ``local``: files under STORAGE_BASE_PATH, served through signed /files URLs
- ``s3`` / ``minio``: a bucket, with presigned URLs issued by boto3

Settings are read from :mod:`olympics_gallery.config` when the backend is
first requested, so tests can patch them beforehand.
"""
from pathlib import Path
from typing import Callable, Optional

from ... import config as app_config

from .base import StorageConfig, StorageInterface
from .local_storage import LocalStorage


_storage_instance: Optional[StorageInterface] = None


def _local_config(backend: str) -> StorageConfig:
    return StorageConfig(
        backend=backend,
        base_path=Path(app_config.STORAGE_BASE_PATH),
        signing_secret=app_config.STORAGE_SIGNING_SECRET,
        public_base_url=app_config.MEDIA_PUBLIC_BASE_URL
    )


def _bucket_config(backend: str) -> StorageConfig:
    if not app_config.S3_BUCKET:
        raise ValueError(f"S3_BUCKET is required for the {backend} storage backend")
    return StorageConfig(
        backend=backend,
        bucket_name=app_config.S3_BUCKET,
        endpoint_url=app_config.S3_ENDPOINT,
        access_key=app_config.S3_ACCESS_KEY,
        secret_key=app_config.S3_SECRET_KEY,
        region=app_config.S3_REGION,
        use_ssl=app_config.S3_USE_SSL
    )


BACKENDS: dict[str, Callable[[str], StorageConfig]] = {
    "local": _local_config,
    "s3": _bucket_config,
    "minio": _bucket_config,
}


def get_storage_config() -> StorageConfig:
    """Build the configuration for the selected backend.

    Raises:
        ValueError: Unknown backend, or a bucket backend without S3_BUCKET
    """
    backend = app_config.STORAGE_BACKEND
    build = BACKENDS.get(backend)
    if build is None:
        raise ValueError(f"Unknown storage backend: {backend}")
    return build(backend)


def get_storage_from_config(config: StorageConfig) -> StorageInterface:
    """Instantiate the backend described by ``config``."""
    if config.backend == "local":
        return LocalStorage(config)
    if config.backend in ("s3", "minio"):
        # boto3 is only imported when a bucket backend is in use
        from .s3_storage import S3Storage
        return S3Storage(config)
    raise ValueError(f"Unknown storage backend: {config.backend}")


def get_storage() -> StorageInterface:
    """Shared storage backend, created on first use."""
    global _storage_instance

    if _storage_instance is None:
        _storage_instance = get_storage_from_config(get_storage_config())

    return _storage_instance


def reset_storage():
    """Drop the shared backend so the next call re-reads configuration."""
    global _storage_instance
    _storage_instance = None
