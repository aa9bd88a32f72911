"""User metadata attached to uploaded originals.

The Upload Coordinator tells the client which ``x-amz-meta-*`` headers
to send with the original; the Asset Reconciler reads them back. Values
are percent-encoded UTF-8 (object metadata must be ASCII) and lists are
JSON arrays. Whatever comes back from storage was written by a client,
so :func:`read_object_metadata` trusts nothing about its shape.
"""
import json
from typing import Any, Optional
from urllib.parse import quote, unquote

from .media_keys import derivative_extension

META_HEADER_PREFIX = "x-amz-meta-"

MAX_ID_LENGTH = 128
MAX_NAME_LENGTH = 200
MAX_CAPTION_LENGTH = 2000
MAX_LIST_ENTRIES = 50

# Metadata key -> (kind, max length)
_TEXT_FIELDS = {
    "eventid": MAX_ID_LENGTH,
    "teamid": MAX_ID_LENGTH,
    "uploadedby": MAX_NAME_LENGTH,
    "caption": MAX_CAPTION_LENGTH,
    "originalfilename": MAX_NAME_LENGTH,
}
_LIST_FIELDS = {
    "teamids": MAX_ID_LENGTH,
    "persons": MAX_NAME_LENGTH,
}


def build_object_metadata(
    *,
    event_id: Optional[str] = None,
    team_id: Optional[str] = None,
    team_ids: Optional[list[str]] = None,
    persons: Optional[list[str]] = None,
    uploaded_by: Optional[str] = None,
    caption: Optional[str] = None,
    original_file_name: Optional[str] = None,
    thumbnail_ext: Optional[str] = None,
    display_ext: Optional[str] = None
) -> dict[str, str]:
    """Encode descriptive attributes as object metadata (absent ones omitted)."""
    values: dict[str, Any] = {
        "eventid": event_id,
        "teamid": team_id,
        "teamids": team_ids,
        "persons": persons,
        "uploadedby": uploaded_by,
        "caption": caption,
        "originalfilename": original_file_name,
        "thumbnailext": thumbnail_ext,
        "displayext": display_ext,
    }
    metadata = {}
    for key, value in values.items():
        if value is None or value == "" or value == []:
            continue
        if isinstance(value, list):
            value = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        metadata[key] = quote(str(value), safe="")
    return metadata


def metadata_headers(metadata: dict[str, str]) -> dict[str, str]:
    """HTTP headers carrying ``metadata`` on a PUT."""
    return {f"{META_HEADER_PREFIX}{key}": value for key, value in metadata.items()}


def _clean_text(value: Any, max_length: int) -> Optional[str]:
    if not isinstance(value, str):
        return None
    text = unquote(value).strip()
    if not text:
        return None
    return text[:max_length]


def _clean_list(value: Any, max_length: int) -> Optional[list[str]]:
    if isinstance(value, str):
        decoded = unquote(value).strip()
        if not decoded:
            return None
        try:
            parsed = json.loads(decoded)
        except ValueError:
            parsed = decoded.split(",")
        value = parsed if isinstance(parsed, list) else [parsed]
    if not isinstance(value, list):
        return None

    cleaned = []
    for entry in value:
        if not isinstance(entry, str):
            continue
        entry = entry.strip()
        if entry:
            cleaned.append(entry[:max_length])
        if len(cleaned) >= MAX_LIST_ENTRIES:
            break
    return cleaned or None


def read_object_metadata(raw: Optional[dict[str, Any]]) -> dict[str, Any]:
    """Sanitize metadata read back from storage.

    Returns:
        Dict with any of eventid, teamid, teamids, persons, uploadedby,
        caption, originalfilename (malformed values dropped) and always
        thumbnailext / displayext (defaulted when missing or invalid)
    """
    source = {}
    if isinstance(raw, dict):
        for key, value in raw.items():
            if isinstance(key, str):
                name = key.lower()
                if name.startswith(META_HEADER_PREFIX):
                    name = name[len(META_HEADER_PREFIX):]
                source[name] = value

    result: dict[str, Any] = {}
    for key, max_length in _TEXT_FIELDS.items():
        text = _clean_text(source.get(key), max_length)
        if text is not None:
            result[key] = text
    for key, max_length in _LIST_FIELDS.items():
        entries = _clean_list(source.get(key), max_length)
        if entries is not None:
            result[key] = entries

    for key in ("thumbnailext", "displayext"):
        hint = source.get(key)
        result[key] = derivative_extension(unquote(hint) if isinstance(hint, str) else None)
    return result
