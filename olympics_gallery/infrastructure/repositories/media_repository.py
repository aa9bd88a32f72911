"""Media catalog repository.

Items are stored as JSON documents keyed by (year, mediaId). Two ordered
views are exposed, both newest first:

- the year view: every item of a year ordered by createdAt
- the event view: a year's items tagged with one eventId ordered by createdAt

Range queries return at most ``limit`` items plus an opaque-to-callers
continuation key (a small dict) when more items follow.
"""
from typing import Any, Optional

from ...services.timestamps import utc_now_iso
from .base import Repository

YEAR_INDEX = "year"
EVENT_INDEX = "event"


class MediaRepository(Repository):
    """Repository for MediaItem documents."""

    def get(self, year: int, media_id: str) -> dict | None:
        """Get a single item by composite key."""
        cursor = self._execute(
            "SELECT document FROM media WHERE year = ? AND media_id = ?",
            (year, media_id)
        )
        row = cursor.fetchone()
        return self._load_document(row["document"]) if row else None

    def put(self, item: dict[str, Any]) -> None:
        """Insert or fully replace an item.

        Args:
            item: Document with at least ``year`` and ``mediaId``
        """
        created_at = item.get("createdAt") or item.get("updatedAt") or utc_now_iso()
        self._execute(
            """INSERT OR REPLACE INTO media
               (year, media_id, event_id, team_id, created_at, document)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                item["year"],
                item["mediaId"],
                item.get("eventId"),
                item.get("teamId"),
                created_at,
                self._dump_document(item),
            )
        )
        self._commit()

    def merge(self, year: int, media_id: str, fields: dict[str, Any]) -> dict:
        """Set ``fields`` on an item, creating it if it does not exist.

        Fields not mentioned keep their stored values.

        Returns:
            The merged document
        """
        existing = self.get(year, media_id) or {}
        merged = {**existing, **fields, "year": year, "mediaId": media_id}
        self.put(merged)
        return merged

    def delete(self, year: int, media_id: str) -> bool:
        """Delete item.

        Returns:
            True if a row was deleted
        """
        cursor = self._execute(
            "DELETE FROM media WHERE year = ? AND media_id = ?",
            (year, media_id)
        )
        self._commit()
        return cursor.rowcount > 0

    def query_by_year(
        self,
        year: int,
        limit: int,
        start_key: Optional[dict] = None
    ) -> tuple[list[dict], Optional[dict]]:
        """Page through a year's items, newest first.

        Args:
            year: Partition value
            limit: Maximum number of items to return
            start_key: Continuation key from a previous page

        Returns:
            (items, last_key) where last_key is None on the final page
        """
        return self._query("year = ?", (year,), YEAR_INDEX, limit, start_key)

    def query_by_event(
        self,
        year: int,
        event_id: str,
        limit: int,
        start_key: Optional[dict] = None
    ) -> tuple[list[dict], Optional[dict]]:
        """Page through one event's items within a year, newest first."""
        return self._query(
            "year = ? AND event_id = ?", (year, event_id), EVENT_INDEX, limit, start_key
        )

    @staticmethod
    def key_for(item: dict, index: str = YEAR_INDEX) -> dict:
        """Build the continuation key positioned right after ``item``.

        Args:
            item: A document returned by one of the query methods
            index: View the key is meant for
        """
        key = {
            "year": item["year"],
            "mediaId": item["mediaId"],
            "createdAt": item.get("createdAt") or item.get("updatedAt"),
        }
        if index == EVENT_INDEX:
            key["eventId"] = item.get("eventId")
        return key

    def _query(
        self,
        partition_sql: str,
        partition_params: tuple,
        index: str,
        limit: int,
        start_key: Optional[dict]
    ) -> tuple[list[dict], Optional[dict]]:
        sql = f"SELECT document FROM media WHERE {partition_sql}"
        params = list(partition_params)

        position = self._position(start_key)
        if position:
            # Keyset pagination on (created_at, media_id), descending
            sql += " AND (created_at < ? OR (created_at = ? AND media_id < ?))"
            params.extend([position[0], position[0], position[1]])

        sql += " ORDER BY created_at DESC, media_id DESC LIMIT ?"
        # One extra row tells whether another page exists
        params.append(limit + 1)

        cursor = self._execute(sql, tuple(params))
        items = [self._load_document(row["document"]) for row in cursor.fetchall()]

        if len(items) > limit:
            items = items[:limit]
            return items, self.key_for(items[-1], index)
        return items, None

    @staticmethod
    def _position(start_key: Optional[dict]) -> Optional[tuple[str, str]]:
        """Extract (createdAt, mediaId) from a continuation key, if usable."""
        if not isinstance(start_key, dict):
            return None
        created_at = start_key.get("createdAt")
        media_id = start_key.get("mediaId")
        if not isinstance(created_at, str) or not isinstance(media_id, str):
            return None
        return created_at, media_id
