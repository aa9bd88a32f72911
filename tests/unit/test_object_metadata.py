"""Tests for upload metadata encoding and sanitizing."""
from olympics_gallery.services.object_metadata import (
    build_object_metadata, metadata_headers, read_object_metadata,
    MAX_CAPTION_LENGTH, MAX_ID_LENGTH, MAX_LIST_ENTRIES
)


class TestBuildObjectMetadata:

    def test_absent_values_omitted(self):
        metadata = build_object_metadata(event_id="ev-1", caption="", team_ids=[])
        assert metadata == {"eventid": "ev-1"}

    def test_values_are_ascii(self):
        metadata = build_object_metadata(
            caption="Målgång, 100 m",
            persons=["Åsa", "Björn"],
            original_file_name="finish line.jpg"
        )
        for value in metadata.values():
            assert value.isascii()
            assert " " not in value

    def test_headers_are_prefixed(self):
        headers = metadata_headers({"eventid": "ev-1"})
        assert headers == {"x-amz-meta-eventid": "ev-1"}


class TestReadObjectMetadata:

    def test_reads_back_what_was_built(self):
        built = build_object_metadata(
            event_id="ev-1",
            team_ids=["t1", "t2"],
            persons=["Åsa"],
            caption="Målgång",
            uploaded_by="Dad",
            thumbnail_ext="jpg"
        )
        meta = read_object_metadata(built)
        assert meta["eventid"] == "ev-1"
        assert meta["teamids"] == ["t1", "t2"]
        assert meta["persons"] == ["Åsa"]
        assert meta["caption"] == "Målgång"
        assert meta["uploadedby"] == "Dad"
        assert meta["thumbnailext"] == "jpg"
        assert meta["displayext"] == "webp"

    def test_plain_json_list(self):
        meta = read_object_metadata({"teamids": '["t1","t2"]', "persons": '["Alice","Bob"]'})
        assert meta["teamids"] == ["t1", "t2"]
        assert meta["persons"] == ["Alice", "Bob"]

    def test_comma_separated_list(self):
        meta = read_object_metadata({"persons": "Alice, Bob ,,"})
        assert meta["persons"] == ["Alice", "Bob"]

    def test_header_prefix_and_case_ignored(self):
        meta = read_object_metadata({"X-Amz-Meta-EventId": "ev-9"})
        assert meta["eventid"] == "ev-9"

    def test_non_string_entries_dropped(self):
        meta = read_object_metadata({"teamids": '[1, "t1", null, {"x": 1}]', "caption": 42})
        assert meta["teamids"] == ["t1"]
        assert "caption" not in meta

    def test_non_list_json_wrapped(self):
        meta = read_object_metadata({"persons": '"Alice"'})
        assert meta["persons"] == ["Alice"]

    def test_lengths_capped(self):
        meta = read_object_metadata({
            "caption": "x" * (MAX_CAPTION_LENGTH + 100),
            "eventid": "e" * 500,
            "persons": ",".join(f"p{i}" for i in range(MAX_LIST_ENTRIES + 20)),
        })
        assert len(meta["caption"]) == MAX_CAPTION_LENGTH
        assert len(meta["eventid"]) == MAX_ID_LENGTH
        assert len(meta["persons"]) == MAX_LIST_ENTRIES

    def test_invalid_derivative_hint_defaults(self):
        meta = read_object_metadata({"thumbnailext": "exe", "displayext": "png"})
        assert meta["thumbnailext"] == "webp"
        assert meta["displayext"] == "png"

    def test_garbage_input(self):
        assert read_object_metadata(None) == {"thumbnailext": "webp", "displayext": "webp"}
        assert read_object_metadata("nope") == {"thumbnailext": "webp", "displayext": "webp"}
        assert read_object_metadata({"caption": "   "}) == {"thumbnailext": "webp", "displayext": "webp"}
