"""S3-compatible storage implementation (AWS S3, MinIO, DigitalOcean Spaces)."""
from typing import Optional

import boto3
from botocore.exceptions import ClientError

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


def _error_code(error: ClientError) -> str:
    return error.response.get('Error', {}).get('Code', 'Unknown')


class S3Storage(StorageInterface):
    """S3-compatible storage backend.

    Clients upload and download directly against the bucket using
    presigned URLs; the server only signs requests and reads attributes.
    """

    def __init__(self, config: StorageConfig, client=None):
        """Initialize S3 storage.

        Args:
            config: Storage configuration with S3 settings
            client: Pre-built boto3 S3 client (tests)
        """
        if config.backend not in ("s3", "minio"):
            raise ValueError(
                f"S3Storage requires backend='s3' or 'minio', got '{config.backend}'"
            )

        self.config = config
        self.bucket = config.bucket_name

        if client is None:
            # Build boto3 client kwargs
            client_kwargs = {
                "service_name": "s3",
                "aws_access_key_id": config.access_key,
                "aws_secret_access_key": config.secret_key,
                "region_name": config.region,
            }

            # Custom endpoint for MinIO/DigitalOcean
            if config.endpoint_url:
                client_kwargs["endpoint_url"] = config.endpoint_url
                client_kwargs["use_ssl"] = config.use_ssl

            client = boto3.client(**client_kwargs)

        self.client = client

    def generate_upload_url(
        self,
        key: str,
        content_type: str,
        expires: int,
        metadata: Optional[dict[str, str]] = None
    ) -> str:
        """Get presigned PUT URL; content type and metadata become signed headers."""
        params = {'Bucket': self.bucket, 'Key': key, 'ContentType': content_type}
        if metadata:
            params['Metadata'] = metadata

        try:
            return self.client.generate_presigned_url(
                'put_object',
                Params=params,
                ExpiresIn=expires
            )
        except ClientError as e:
            raise StorageError(f"Failed to generate upload URL for {key}: {e}")

    def generate_download_url(self, key: str, expires: int) -> str:
        """Get presigned GET URL."""
        try:
            return self.client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket, 'Key': key},
                ExpiresIn=expires
            )
        except ClientError as e:
            raise StorageError(f"Failed to generate URL for {key}: {e}")

    async def get_attributes(self, key: str) -> ObjectAttributes:
        """Read object attributes with HEAD."""
        try:
            response = self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if _error_code(e) in ('404', 'NoSuchKey', 'NotFound'):
                raise ObjectNotFoundError(f"Object not found: {key}")
            raise StorageError(f"Failed to read attributes of {key}: {e}")

        return ObjectAttributes(
            key=key,
            content_type=response.get('ContentType'),
            size=int(response.get('ContentLength', 0)),
            metadata={k.lower(): v for k, v in (response.get('Metadata') or {}).items()},
            last_modified=response.get('LastModified'),
        )

    async def download(self, key: str) -> bytes:
        """Download object from S3."""
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            return response['Body'].read()
        except ClientError as e:
            if _error_code(e) == 'NoSuchKey':
                raise ObjectNotFoundError(f"Object not found: {key}")
            raise DownloadError(f"Failed to download {key}: {e}")

    async def upload(
        self,
        key: str,
        content: bytes,
        content_type: Optional[str] = None,
        metadata: Optional[dict[str, str]] = None
    ) -> str:
        """Upload object to S3."""
        extra_args = {}
        if content_type:
            extra_args['ContentType'] = content_type
        if metadata:
            extra_args['Metadata'] = metadata

        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                **extra_args
            )
            return key
        except ClientError as e:
            raise UploadError(f"Failed to upload {key}: {e}")

    async def delete_many(self, keys: list[str]) -> None:
        """Delete objects in one batch request."""
        if not keys:
            return

        try:
            response = self.client.delete_objects(
                Bucket=self.bucket,
                Delete={
                    'Objects': [{'Key': key} for key in keys],
                    'Quiet': True,
                }
            )
        except ClientError as e:
            raise DeleteError(f"Failed to delete {keys}: {e}")

        errors = response.get('Errors') or []
        if errors:
            failed = ", ".join(err.get('Key', '?') for err in errors)
            raise DeleteError(f"Failed to delete: {failed}")
