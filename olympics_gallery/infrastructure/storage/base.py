"""Abstract object storage interface."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ObjectNotFoundError(StorageError):
    """Object not found in storage."""
    pass


class UploadError(StorageError):
    """Failed to upload object."""
    pass


class DownloadError(StorageError):
    """Failed to download object."""
    pass


class DeleteError(StorageError):
    """Failed to delete object."""
    pass


@dataclass
class StorageConfig:
    """Storage configuration."""
    backend: str  # 'local', 's3', 'minio'

    # Local storage settings
    base_path: Optional[Path] = None
    signing_secret: Optional[str] = None
    public_base_url: str = ""

    # S3/MinIO settings
    endpoint_url: Optional[str] = None
    bucket_name: Optional[str] = None
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    region: str = "us-east-1"
    use_ssl: bool = True

    def __post_init__(self):
        if self.backend == "local" and self.base_path is None:
            from ...config import STORAGE_BASE_PATH
            self.base_path = Path(STORAGE_BASE_PATH)


@dataclass
class ObjectAttributes:
    """Attributes of a stored object.

    ``metadata`` holds the free-form user metadata attached at upload
    time, with lower-cased keys and no ``x-amz-meta-`` prefix.
    """
    key: str
    content_type: Optional[str]
    size: int
    metadata: dict[str, str] = field(default_factory=dict)
    last_modified: Optional[datetime] = None


class StorageInterface(ABC):
    """Abstract interface for object storage operations.

    Objects are addressed by full keys such as
    ``2025/originals/media-<uuid>.jpg``.

    Implementations:
    - LocalStorage: Filesystem storage with self-signed URLs
    - S3Storage: AWS S3 / MinIO / any S3-compatible API
    """

    @abstractmethod
    def generate_upload_url(
        self,
        key: str,
        content_type: str,
        expires: int,
        metadata: Optional[dict[str, str]] = None
    ) -> str:
        """Issue a time-limited URL allowing a single PUT of ``key``.

        Args:
            key: Object key
            content_type: Content type the client must send
            expires: URL lifetime in seconds
            metadata: User metadata the client must attach

        Returns:
            Upload URL
        """
        pass

    @abstractmethod
    def generate_download_url(self, key: str, expires: int) -> str:
        """Issue a time-limited URL allowing GET of ``key``.

        Args:
            key: Object key
            expires: URL lifetime in seconds

        Returns:
            Download URL
        """
        pass

    @abstractmethod
    async def get_attributes(self, key: str) -> ObjectAttributes:
        """Fetch content type, size and user metadata of an object.

        Raises:
            ObjectNotFoundError: If the object doesn't exist
            StorageError: For any other failure
        """
        pass

    @abstractmethod
    async def download(self, key: str) -> bytes:
        """Download object content.

        Raises:
            ObjectNotFoundError: If the object doesn't exist
            DownloadError: If download fails
        """
        pass

    @abstractmethod
    async def upload(
        self,
        key: str,
        content: bytes,
        content_type: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None
    ) -> str:
        """Store object content.

        Returns:
            Storage key of the uploaded object

        Raises:
            UploadError: If upload fails
        """
        pass

    @abstractmethod
    async def delete_many(self, keys: list[str]) -> None:
        """Delete several objects. Missing objects are ignored.

        Raises:
            DeleteError: If any deletion fails
        """
        pass
