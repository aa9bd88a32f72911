"""Upload service - issues direct-to-storage upload permissions.

No bytes pass through this service. It validates the request, allocates
a media id and storage keys, presigns one PUT per asset and writes a
provisional catalog record. The client then uploads thumbnail and
display first and the original last; the original landing in storage
triggers reconciliation.
"""
import logging
from typing import Any, Optional

from fastapi import HTTPException

from ...config import (
    MEDIA_TYPES, MAX_IMAGE_SIZE_BYTES, MAX_VIDEO_SIZE_BYTES,
    UPLOAD_URL_EXPIRY_SECONDS, DEFAULT_IMAGE_EXTENSION, DEFAULT_VIDEO_EXTENSION
)
from ...infrastructure.repositories import MediaRepository
from ...infrastructure.storage import StorageInterface
from ...services import media_keys
from ...services.object_metadata import build_object_metadata, metadata_headers
from ...services.timestamps import utc_now_iso

logger = logging.getLogger(__name__)


def _clean(value: Any) -> Optional[str]:
    """Trimmed string or None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _clean_list(values: Any) -> Optional[list[str]]:
    if not isinstance(values, list):
        return None
    cleaned = [str(v).strip() for v in values if v is not None and str(v).strip()]
    return cleaned or None


class UploadService:
    """Service for coordinating direct uploads.

    Responsibilities:
    - Request validation (required fields, type, size ceilings)
    - Media id and storage key allocation
    - Presigned PUT URLs for original, thumbnail and display
    - Provisional catalog record
    """

    def __init__(self, media_repository: MediaRepository, storage: StorageInterface):
        self.media_repo = media_repository
        self.storage = storage

    def request_upload(
        self,
        year: int,
        file_name: Optional[str],
        file_size: Optional[int],
        mime_type: Optional[str],
        media_type: Optional[str],
        tags: Optional[dict] = None,
        uploaded_by: Optional[str] = None,
        caption: Optional[str] = None,
        thumbnail_ext: Optional[str] = None,
        display_ext: Optional[str] = None
    ) -> dict:
        """Issue upload permissions for a new media item.

        Returns:
            Dict with uploadUrl, thumbnailUploadUrl, displayUploadUrl
            (images only), the headers each PUT must carry, mediaId and
            expiresIn

        Raises:
            HTTPException: 400 on invalid input
        """
        self._validate(file_name, file_size, mime_type, media_type)

        file_name = file_name.strip()
        mime_type = mime_type.strip()
        is_image = media_type == "image"

        media_id = media_keys.new_media_id()
        ext = media_keys.file_extension(file_name) or (
            DEFAULT_IMAGE_EXTENSION if is_image else DEFAULT_VIDEO_EXTENSION
        )
        thumb_ext = media_keys.derivative_extension(thumbnail_ext)
        disp_ext = media_keys.derivative_extension(display_ext) if is_image else None

        original_key = media_keys.original_key(year, media_id, ext)
        thumbnail_key = media_keys.thumbnail_key(year, media_id, thumb_ext)
        display_key = media_keys.display_key(year, media_id, disp_ext) if is_image else None

        tags = tags if isinstance(tags, dict) else {}
        event_id = _clean(tags.get("eventId"))
        team_ids = _clean_list(tags.get("teamIds"))
        team_id = team_ids[0] if team_ids else _clean(tags.get("teamId"))
        persons = _clean_list(tags.get("persons"))
        uploaded_by = _clean(uploaded_by)
        caption = _clean(caption)

        metadata = build_object_metadata(
            event_id=event_id,
            team_id=team_id,
            team_ids=team_ids,
            persons=persons,
            uploaded_by=uploaded_by,
            caption=caption,
            original_file_name=file_name,
            thumbnail_ext=thumb_ext,
            display_ext=disp_ext
        )

        thumb_mime = media_keys.derivative_content_type(thumb_ext)
        result = {
            "uploadUrl": self.storage.generate_upload_url(
                original_key, mime_type, UPLOAD_URL_EXPIRY_SECONDS, metadata
            ),
            "uploadHeaders": {"Content-Type": mime_type, **metadata_headers(metadata)},
            "thumbnailUploadUrl": self.storage.generate_upload_url(
                thumbnail_key, thumb_mime, UPLOAD_URL_EXPIRY_SECONDS
            ),
            "thumbnailUploadHeaders": {"Content-Type": thumb_mime},
            "mediaId": media_id,
            "expiresIn": UPLOAD_URL_EXPIRY_SECONDS,
        }

        if display_key:
            disp_mime = media_keys.derivative_content_type(disp_ext)
            result["displayUploadUrl"] = self.storage.generate_upload_url(
                display_key, disp_mime, UPLOAD_URL_EXPIRY_SECONDS
            )
            result["displayUploadHeaders"] = {"Content-Type": disp_mime}

        now = utc_now_iso()
        item = {
            "year": year,
            "mediaId": media_id,
            "type": media_type,
            "status": "pending",
            "originalKey": original_key,
            "thumbnailKey": thumbnail_key,
            "displayKey": display_key,
            "mimeType": mime_type,
            "fileSize": file_size,
            "uploadedBy": uploaded_by,
            "caption": caption,
            "originalFileName": file_name,
            "eventId": event_id,
            "teamId": team_id,
            "teamIds": team_ids,
            "createdAt": now,
            "updatedAt": now,
        }
        item_tags = {
            k: v for k, v in
            {"eventId": event_id, "teamId": team_id, "teamIds": team_ids, "persons": persons}.items()
            if v
        }
        if item_tags:
            item["tags"] = item_tags

        self.media_repo.put(item)
        logger.info("Issued upload URLs for %s/%s (%s, %s bytes)", year, media_id, media_type, file_size)

        return result

    def _validate(
        self,
        file_name: Optional[str],
        file_size: Optional[int],
        mime_type: Optional[str],
        media_type: Optional[str]
    ) -> None:
        """Validate upload request.

        Raises:
            HTTPException: If request is invalid
        """
        if (
            not isinstance(file_name, str) or not file_name.strip()
            or file_size is None
            or not isinstance(mime_type, str) or not mime_type.strip()
            or not media_type
        ):
            raise HTTPException(
                status_code=400,
                detail="fileName, fileSize, mimeType, and type are required"
            )

        if media_type not in MEDIA_TYPES:
            raise HTTPException(status_code=400, detail='type must be "image" or "video"')

        max_size = MAX_IMAGE_SIZE_BYTES if media_type == "image" else MAX_VIDEO_SIZE_BYTES
        if isinstance(file_size, bool) or not isinstance(file_size, int) or file_size < 0 or file_size > max_size:
            raise HTTPException(
                status_code=400,
                detail=f"fileSize must be between 0 and {max_size // (1024 * 1024)}MB for {media_type}"
            )
