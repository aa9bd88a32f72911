"""Media catalog service - listing, retrieval, edits and deletion.

Every item leaving this service carries short-lived download URLs
(``originalUrl``, ``thumbnailUrl``, ``displayUrl``) for the asset keys
it has.
"""
import logging
from typing import Any, Optional

from fastapi import HTTPException

from ...config import (
    DOWNLOAD_URL_EXPIRY_SECONDS, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, TEAM_FILTER_OVERFETCH
)
from ...infrastructure.repositories import MediaRepository, YEAR_INDEX
from ...infrastructure.storage import StorageInterface
from ...services.pagination import encode_cursor, decode_cursor, clamp_limit, overfetch_page
from ...services.timestamps import utc_now_iso

logger = logging.getLogger(__name__)

URL_FIELDS = (
    ("originalKey", "originalUrl"),
    ("thumbnailKey", "thumbnailUrl"),
    ("displayKey", "displayUrl"),
)


def _matches_any_team(item: dict, team_ids: set[str]) -> bool:
    """Match against the team list or the single legacy team field."""
    listed = item.get("teamIds")
    if isinstance(listed, list) and team_ids.intersection(t for t in listed if isinstance(t, str)):
        return True
    return item.get("teamId") in team_ids


def _is_previewable(item: dict) -> bool:
    return bool(item.get("thumbnailKey") or item.get("displayKey"))


def _matches_person(item: dict, needle: str) -> bool:
    persons = (item.get("tags") or {}).get("persons")
    if not isinstance(persons, list):
        return False
    return any(needle in str(p).lower() for p in persons)


class MediaService:
    """Service for reading and editing the media catalog."""

    def __init__(self, media_repository: MediaRepository, storage: StorageInterface):
        self.media_repo = media_repository
        self.storage = storage

    def with_urls(self, item: dict) -> dict:
        """Copy of ``item`` with download URLs for each populated key."""
        out = dict(item)
        for key_field, url_field in URL_FIELDS:
            key = item.get(key_field)
            if key:
                out[url_field] = self.storage.generate_download_url(key, DOWNLOAD_URL_EXPIRY_SECONDS)
        return out

    def get_media(self, year: int, media_id: str) -> dict:
        """Get one item.

        Raises:
            HTTPException: 404 if it doesn't exist
        """
        return self.with_urls(self._require(year, media_id))

    def list_media(
        self,
        year: int,
        event_id: Optional[str] = None,
        team_id: Optional[str] = None,
        person: Optional[str] = None,
        status: Optional[str] = None,
        limit: Optional[str | int] = None,
        next_token: Optional[str] = None
    ) -> dict:
        """List a page of items, newest first.

        Args:
            year: Gallery year
            event_id: Only items of this event
            team_id: Comma-separated team ids; items tagged with any of them
            person: Case-insensitive substring of a tagged person
            status: Only items whose status is exactly this, e.g. "pending"
            limit: Page size (default 24, at most 100)
            next_token: Cursor from the previous page

        Returns:
            Dict with media (list) and nextToken when more pages follow
        """
        page_size = clamp_limit(limit, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)
        start_key = decode_cursor(next_token)
        event_id = (event_id or "").strip()
        team_ids = {t.strip() for t in (team_id or "").split(",") if t.strip()}
        needle = (person or "").strip().lower()
        status = (status or "").strip()

        if event_id:
            items, last_key = self.media_repo.query_by_event(year, event_id, page_size, start_key)
        elif team_ids:
            items, last_key = overfetch_page(
                fetch=lambda n: self.media_repo.query_by_year(year, n, start_key),
                matches=lambda item: _matches_any_team(item, team_ids),
                limit=page_size,
                multiplier=TEAM_FILTER_OVERFETCH,
                key_for=lambda item: self.media_repo.key_for(item, YEAR_INDEX)
            )
        else:
            items, last_key = self.media_repo.query_by_year(year, page_size, start_key)

        items = [item for item in items if _is_previewable(item)]
        if needle:
            items = [item for item in items if _matches_person(item, needle)]
        if status:
            items = [item for item in items if item.get("status") == status]

        result: dict[str, Any] = {"media": [self.with_urls(item) for item in items]}
        cursor = encode_cursor(last_key)
        if cursor:
            result["nextToken"] = cursor
        return result

    def update_media(self, year: int, media_id: str, changes: dict[str, Any]) -> dict:
        """Apply user edits to an item.

        Args:
            changes: Any of caption, uploadedBy, eventId, teamId, teamIds,
                persons. Empty strings and empty lists remove the field.

        Raises:
            HTTPException: 404 if the item doesn't exist
        """
        item = dict(self._require(year, media_id))
        tags = dict(item.get("tags") or {})

        def text(name: str) -> Optional[str]:
            value = changes.get(name)
            return "" if value is None else str(value).strip()

        def entries(name: str) -> list[str]:
            value = changes.get(name)
            if not isinstance(value, list):
                return []
            return [str(v).strip() for v in value if v is not None and str(v).strip()]

        for field in ("caption", "uploadedBy"):
            if field in changes:
                item[field] = text(field) or None

        if "eventId" in changes:
            item["eventId"] = tags["eventId"] = text("eventId") or None

        if "teamIds" in changes:
            team_ids = entries("teamIds")
            item["teamIds"] = tags["teamIds"] = team_ids or None
            # First listed team is the canonical single-team reference
            item["teamId"] = tags["teamId"] = team_ids[0] if team_ids else None
        elif "teamId" in changes:
            item["teamId"] = tags["teamId"] = text("teamId") or None

        if "persons" in changes:
            tags["persons"] = entries("persons") or None

        tags = {k: v for k, v in tags.items() if v}
        item["tags"] = tags or None
        item["updatedAt"] = utc_now_iso()
        item = {k: v for k, v in item.items() if v is not None}

        self.media_repo.put(item)
        logger.info("Updated media %s/%s (%s)", year, media_id, ", ".join(sorted(changes)) or "no fields")
        return self.with_urls(item)

    async def delete_media(self, year: int, media_id: str) -> dict:
        """Delete an item and every stored asset it references.

        Raises:
            HTTPException: 404 if the item doesn't exist
        """
        item = self._require(year, media_id)

        keys = [item[field] for field, _ in URL_FIELDS if item.get(field)]
        if keys:
            await self.storage.delete_many(keys)

        self.media_repo.delete(year, media_id)
        logger.info("Deleted media %s/%s and %d object(s)", year, media_id, len(keys))
        return {"deleted": True}

    def _require(self, year: int, media_id: str) -> dict:
        item = self.media_repo.get(year, media_id)
        if not item:
            raise HTTPException(status_code=404, detail=f"Media {media_id} not found")
        return item
