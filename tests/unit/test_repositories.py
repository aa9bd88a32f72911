"""Tests for the SQLite repositories."""
import pytest

from olympics_gallery.infrastructure.repositories import (
    OlympicsRepository, MediaRepository, YEAR_INDEX, EVENT_INDEX
)


@pytest.fixture
def olympics_repo(db_connection):
    return OlympicsRepository(db_connection)


@pytest.fixture
def media_repo(db_connection):
    return MediaRepository(db_connection)


class TestOlympicsRepository:

    def test_create_and_get(self, olympics_repo):
        created = olympics_repo.create(2025, "Summer Games")

        assert created["year"] == 2025
        assert created["event_name"] == "Summer Games"
        assert created["gallery_password_hash"] is None
        assert created["gallery_token_secret"] is None
        assert olympics_repo.get(2025) == created

    def test_create_duplicate_returns_none(self, olympics_repo):
        olympics_repo.create(2025)
        assert olympics_repo.create(2025) is None

    def test_get_missing(self, olympics_repo):
        assert olympics_repo.get(1999) is None

    def test_set_and_clear_protection(self, olympics_repo):
        olympics_repo.create(2025)

        assert olympics_repo.set_gallery_protection(2025, "hash", "secret") is True
        row = olympics_repo.get(2025)
        assert (row["gallery_password_hash"], row["gallery_token_secret"]) == ("hash", "secret")

        assert olympics_repo.set_gallery_protection(2025, None, None) is True
        row = olympics_repo.get(2025)
        assert (row["gallery_password_hash"], row["gallery_token_secret"]) == (None, None)

    def test_half_protection_rejected(self, olympics_repo):
        olympics_repo.create(2025)
        with pytest.raises(ValueError):
            olympics_repo.set_gallery_protection(2025, "hash", None)
        with pytest.raises(ValueError):
            olympics_repo.set_gallery_protection(2025, None, "secret")

    def test_protection_on_missing_year(self, olympics_repo):
        assert olympics_repo.set_gallery_protection(1999, "hash", "secret") is False

    def test_set_token_secret_only_when_protected(self, olympics_repo):
        olympics_repo.create(2025)
        assert olympics_repo.set_token_secret(2025, "new") is False
        assert olympics_repo.get(2025)["gallery_token_secret"] is None

        olympics_repo.set_gallery_protection(2025, "hash", "old")
        assert olympics_repo.set_token_secret(2025, "new") is True
        assert olympics_repo.get(2025)["gallery_token_secret"] == "new"


def _item(media_id, created_at, **fields):
    return {"year": 2025, "mediaId": media_id, "createdAt": created_at, **fields}


class TestMediaRepository:

    def test_put_and_get(self, media_repo):
        media_repo.put(_item("media-1", "2025-06-01T10:00:00.000Z", caption="Hej", width=None))

        item = media_repo.get(2025, "media-1")

        assert item["caption"] == "Hej"
        assert "width" not in item

    def test_put_replaces(self, media_repo):
        media_repo.put(_item("media-1", "2025-06-01T10:00:00.000Z", caption="old"))
        media_repo.put(_item("media-1", "2025-06-01T10:00:00.000Z"))
        assert "caption" not in media_repo.get(2025, "media-1")

    def test_get_is_scoped_by_year(self, media_repo):
        media_repo.put(_item("media-1", "2025-06-01T10:00:00.000Z"))
        assert media_repo.get(2024, "media-1") is None

    def test_merge_keeps_other_fields(self, media_repo):
        media_repo.put(_item("media-1", "2025-06-01T10:00:00.000Z", caption="keep"))

        merged = media_repo.merge(2025, "media-1", {"type": "video"})

        assert merged["caption"] == "keep"
        assert media_repo.get(2025, "media-1")["type"] == "video"

    def test_merge_creates_missing(self, media_repo):
        media_repo.merge(2025, "media-new", {"updatedAt": "2025-06-01T10:00:00.000Z"})
        assert media_repo.get(2025, "media-new")["mediaId"] == "media-new"

    def test_delete(self, media_repo):
        media_repo.put(_item("media-1", "2025-06-01T10:00:00.000Z"))
        assert media_repo.delete(2025, "media-1") is True
        assert media_repo.delete(2025, "media-1") is False

    def test_ties_on_created_at_ordered_by_id(self, media_repo):
        for media_id in ("media-a", "media-c", "media-b"):
            media_repo.put(_item(media_id, "2025-06-01T10:00:00.000Z"))

        first, key = media_repo.query_by_year(2025, 2)
        rest, last = media_repo.query_by_year(2025, 2, key)

        assert [i["mediaId"] for i in first] == ["media-c", "media-b"]
        assert [i["mediaId"] for i in rest] == ["media-a"]
        assert last is None

    def test_event_query_key(self, media_repo):
        media_repo.put(_item("media-1", "2025-06-01T10:00:00.000Z", eventId="ev-1"))
        media_repo.put(_item("media-2", "2025-06-02T10:00:00.000Z", eventId="ev-1"))

        items, key = media_repo.query_by_event(2025, "ev-1", 1)

        assert [i["mediaId"] for i in items] == ["media-2"]
        assert key == {
            "year": 2025, "mediaId": "media-2",
            "createdAt": "2025-06-02T10:00:00.000Z", "eventId": "ev-1"
        }

    def test_event_query_stays_within_year(self, media_repo):
        media_repo.put(_item("media-1", "2025-06-01T10:00:00.000Z", eventId="ev-1"))
        media_repo.put({**_item("media-2", "2024-06-01T10:00:00.000Z", eventId="ev-1"), "year": 2024})

        items, key = media_repo.query_by_event(2025, "ev-1", 10)

        assert [i["mediaId"] for i in items] == ["media-1"]
        assert key is None

    def test_malformed_start_key_ignored(self, media_repo):
        media_repo.put(_item("media-1", "2025-06-01T10:00:00.000Z"))
        items, _ = media_repo.query_by_year(2025, 10, {"createdAt": 5})
        assert len(items) == 1

    def test_key_for_indexes(self):
        item = _item("media-1", "2025-06-01T10:00:00.000Z", eventId="ev-1")
        assert "eventId" not in MediaRepository.key_for(item, YEAR_INDEX)
        assert MediaRepository.key_for(item, EVENT_INDEX)["eventId"] == "ev-1"
