"""Local filesystem storage implementation.

Stands in for an object store during development and tests. Upload and
download URLs point at the application's own ``/files`` routes and carry
an HMAC signature over method, key and expiry, so they behave like
presigned URLs: anyone holding one may perform exactly that operation
until it expires.
"""
import hashlib
import hmac
import json
import mimetypes
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional
from urllib.parse import quote, urlencode

import aiofiles

from .base import (
    StorageInterface,
    StorageConfig,
    ObjectAttributes,
    StorageError,
    ObjectNotFoundError,
    UploadError,
    DownloadError,
    DeleteError
)

META_DIR = ".meta"


class LocalStorage(StorageInterface):
    """Local filesystem storage backend.

    Stores objects in directory structure mirroring their keys:
        base_path/
            2025/originals/<mediaId>.jpg
            2025/thumbnails/<mediaId>.webp
            .meta/2025/originals/<mediaId>.jpg.json   (content type + metadata)
    """

    def __init__(self, config: StorageConfig):
        """Initialize local storage.

        Args:
            config: Storage configuration with base_path and signing_secret
        """
        if config.backend != "local":
            raise ValueError(f"LocalStorage requires backend='local', got '{config.backend}'")
        if not config.signing_secret:
            raise ValueError("LocalStorage requires a signing_secret")

        self.config = config
        self.base_path = Path(config.base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._secret = config.signing_secret.encode("utf-8")

    # Signed URLs

    def sign(self, method: str, key: str, expires_at: int) -> str:
        """Signature for ``method`` on ``key`` valid until ``expires_at``."""
        payload = f"{method.upper()}\n{key}\n{expires_at}".encode("utf-8")
        return hmac.new(self._secret, payload, hashlib.sha256).hexdigest()

    def verify_signature(
        self,
        method: str,
        key: str,
        expires_at: str,
        signature: str,
        now: Optional[float] = None
    ) -> bool:
        """Check a signed URL's query parameters. Never raises."""
        try:
            expiry = int(expires_at)
        except (TypeError, ValueError):
            return False
        if expiry < (now if now is not None else time.time()):
            return False
        expected = self.sign(method, key, expiry)
        return hmac.compare_digest(expected.encode("utf-8"), str(signature).encode("utf-8"))

    def _signed_url(self, method: str, key: str, expires: int) -> str:
        expires_at = int(time.time()) + expires
        query = urlencode({"expires": expires_at, "signature": self.sign(method, key, expires_at)})
        return f"{self.config.public_base_url}/files/{quote(key)}?{query}"

    def generate_upload_url(
        self,
        key: str,
        content_type: str,
        expires: int,
        metadata: Optional[dict[str, str]] = None
    ) -> str:
        """Get signed PUT URL for the /files route."""
        self._get_path(key)
        return self._signed_url("PUT", key, expires)

    def generate_download_url(self, key: str, expires: int) -> str:
        """Get signed GET URL for the /files route."""
        self._get_path(key)
        return self._signed_url("GET", key, expires)

    # Object operations

    def _get_path(self, key: str, base: Optional[Path] = None) -> Path:
        """Get full filesystem path for a key."""
        parts = key.split("/")
        # Reject directory traversal and absolute keys
        if not key or key.startswith("/") or "\\" in key or any(p in ("", ".", "..") for p in parts):
            raise StorageError(f"Invalid object key: {key!r}")
        if parts[0] == META_DIR:
            raise StorageError(f"Invalid object key: {key!r}")
        return (base or self.base_path).joinpath(*parts)

    def _meta_path(self, key: str) -> Path:
        path = self._get_path(key, self.base_path / META_DIR)
        return path.with_name(path.name + ".json")

    def get_path(self, key: str) -> Path:
        """Filesystem path of an existing object.

        Raises:
            ObjectNotFoundError: If the object doesn't exist
        """
        path = self._get_path(key)
        if not path.is_file():
            raise ObjectNotFoundError(f"Object not found: {key}")
        return path

    async def upload(
        self,
        key: str,
        content: bytes,
        content_type: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None
    ) -> str:
        """Write object content and its attributes sidecar."""
        file_path = self._get_path(key)
        meta_path = self._meta_path(key)

        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)
            meta_path.parent.mkdir(parents=True, exist_ok=True)

            async with aiofiles.open(file_path, "wb") as f:
                await f.write(content)

            sidecar = {
                "content_type": content_type,
                "metadata": {k.lower(): v for k, v in (metadata or {}).items()},
            }
            async with aiofiles.open(meta_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(sidecar))

            return key
        except (IOError, OSError) as e:
            raise UploadError(f"Failed to upload {key}: {e}")

    async def get_attributes(self, key: str) -> ObjectAttributes:
        """Read size and mtime from the file and the rest from its sidecar."""
        file_path = self.get_path(key)
        meta_path = self._meta_path(key)

        sidecar = {}
        try:
            if meta_path.exists():
                async with aiofiles.open(meta_path, "r", encoding="utf-8") as f:
                    sidecar = json.loads(await f.read())
            stat = file_path.stat()
        except (IOError, OSError, ValueError) as e:
            raise StorageError(f"Failed to read attributes of {key}: {e}")

        content_type = sidecar.get("content_type") or mimetypes.guess_type(file_path.name)[0]
        return ObjectAttributes(
            key=key,
            content_type=content_type,
            size=stat.st_size,
            metadata=dict(sidecar.get("metadata") or {}),
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )

    async def download(self, key: str) -> bytes:
        """Read object content."""
        file_path = self.get_path(key)

        try:
            async with aiofiles.open(file_path, "rb") as f:
                return await f.read()
        except (IOError, OSError) as e:
            raise DownloadError(f"Failed to download {key}: {e}")

    async def delete_many(self, keys: list[str]) -> None:
        """Delete objects and their sidecars; missing ones are skipped."""
        for key in keys:
            try:
                self._get_path(key).unlink(missing_ok=True)
                self._meta_path(key).unlink(missing_ok=True)
            except (IOError, OSError) as e:
                raise DeleteError(f"Failed to delete {key}: {e}")
