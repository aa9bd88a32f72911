"""Asset reconciliation - finalizes catalog records from stored originals.

Runs when storage reports a new object under ``{year}/originals/``. The
stored object, not the provisional record, is the source of truth: its
attributes and the metadata the client attached are read back and the
catalog record is rebuilt from them. When that fails, a minimal record
is merged in so the item stays listable and deletable.

Nothing here retries. A reconciliation whose degraded write also fails
is only visible in the logs.
"""
import io
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Optional

from PIL import Image

from ...config import MAX_IMAGE_SIZE_BYTES
from ...infrastructure.repositories import MediaRepository
from ...infrastructure.storage import StorageInterface, ObjectAttributes, StorageError
from ...services import media_keys
from ...services.object_metadata import read_object_metadata
from ...services.timestamps import to_iso

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReconcileService:
    """Service for object-created notifications.

    Safe under duplicate or out-of-order delivery: every run rebuilds the
    record from storage and the last write wins.
    """

    def __init__(
        self,
        media_repository: MediaRepository,
        storage: StorageInterface,
        clock: Callable[[], datetime] = _utc_now
    ):
        self.media_repo = media_repository
        self.storage = storage
        self.clock = clock

    @staticmethod
    def keys_from_notification(event: Any) -> list[str]:
        """Extract decoded object keys from an S3-format event notification.

        Records that are not object-created events or lack a key are
        skipped; a malformed event yields an empty list.
        """
        if not isinstance(event, dict):
            return []
        records = event.get("Records")
        if not isinstance(records, list):
            return []

        keys = []
        for record in records:
            if not isinstance(record, dict):
                continue
            event_name = record.get("eventName")
            if event_name is not None and "ObjectCreated" not in str(event_name):
                continue
            s3 = record.get("s3")
            obj = s3.get("object") if isinstance(s3, dict) else None
            key = obj.get("key") if isinstance(obj, dict) else None
            if isinstance(key, str) and key:
                keys.append(media_keys.decode_event_key(key))
        return keys

    async def handle_object_created(self, keys: Iterable[str]) -> int:
        """Reconcile every notified key. Never raises.

        Returns:
            Number of keys that produced a catalog write
        """
        processed = 0
        for key in keys:
            if await self.reconcile(key) is not None:
                processed += 1
        return processed

    async def reconcile(self, key: str) -> Optional[dict]:
        """Rebuild the catalog record for one stored original.

        Returns:
            The record written (full or degraded), or None if the key was
            skipped or nothing could be written
        """
        parsed = media_keys.parse_original_key(key)
        if parsed is None:
            logger.warning("Skipping non-originals key: %s", key)
            return None

        year, media_id, ext = parsed
        media_type = media_keys.media_type_for_extension(ext)

        try:
            attributes = await self.storage.get_attributes(key)
            record = await self._build_record(year, media_id, media_type, key, attributes)
            self.media_repo.put(record)
            logger.info("Reconciled %s/%s from %s", year, media_id, key)
            return record
        except Exception:
            logger.exception("Reconciliation failed for %s; writing minimal record", key)

        try:
            return self.media_repo.merge(year, media_id, {
                "type": media_type,
                "originalKey": key,
                "updatedAt": to_iso(self.clock()),
            })
        except Exception:
            logger.error("Minimal record write failed for %s", key, exc_info=True)
            return None

    async def _build_record(
        self,
        year: int,
        media_id: str,
        media_type: str,
        key: str,
        attributes: ObjectAttributes
    ) -> dict:
        """Derive the canonical record from the stored object."""
        meta = read_object_metadata(attributes.metadata)
        now = self.clock()

        record: dict[str, Any] = {
            "year": year,
            "mediaId": media_id,
            "type": media_type,
            "originalKey": key,
            "thumbnailKey": media_keys.thumbnail_key(year, media_id, meta["thumbnailext"]),
            "mimeType": attributes.content_type,
            "fileSize": attributes.size,
            "createdAt": to_iso(attributes.last_modified or now),
            "updatedAt": to_iso(now),
        }
        if media_type == "image":
            record["displayKey"] = media_keys.display_key(year, media_id, meta["displayext"])

            dimensions = await self._image_dimensions(key, attributes)
            if dimensions:
                record["width"], record["height"] = dimensions

        team_ids = meta.get("teamids")
        team_id = team_ids[0] if team_ids else meta.get("teamid")
        event_id = meta.get("eventid")
        persons = meta.get("persons")

        optional = {
            "uploadedBy": meta.get("uploadedby"),
            "caption": meta.get("caption"),
            "originalFileName": meta.get("originalfilename"),
            "eventId": event_id,
            "teamId": team_id,
            "teamIds": team_ids,
        }
        record.update({k: v for k, v in optional.items() if v})

        tags = {
            k: v for k, v in
            {"eventId": event_id, "teamId": team_id, "teamIds": team_ids, "persons": persons}.items()
            if v
        }
        if tags:
            record["tags"] = tags

        return record

    async def _image_dimensions(self, key: str, attributes: ObjectAttributes) -> Optional[tuple[int, int]]:
        """Read pixel dimensions of an image original, if it decodes."""
        if attributes.size <= 0 or attributes.size > MAX_IMAGE_SIZE_BYTES:
            return None

        try:
            content = await self.storage.download(key)
        except StorageError as e:
            logger.warning("Could not download %s for inspection: %s", key, e)
            return None

        try:
            with Image.open(io.BytesIO(content)) as img:
                return img.size
        except (OSError, ValueError, Image.DecompressionBombError):
            logger.debug("Original %s is not a decodable image", key)
            return None
