"""Continuation cursors and filtered paging helpers."""
import base64
import binascii
import json
from typing import Any, Callable, Optional


def encode_cursor(key: Optional[dict[str, Any]]) -> Optional[str]:
    """Encode a store continuation key as URL-safe base64 without padding."""
    if not key:
        return None
    raw = json.dumps(key, separators=(",", ":"), sort_keys=True).encode("utf-8")
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_cursor(cursor: Optional[str]) -> Optional[dict[str, Any]]:
    """Decode a cursor produced by :func:`encode_cursor`.

    Absent, truncated or tampered cursors decode to None, meaning
    "start from the beginning".
    """
    if not cursor:
        return None
    padded = cursor.strip() + "=" * (-len(cursor.strip()) % 4)
    try:
        raw = base64.b64decode(padded, altchars=b"-_", validate=True)
        key = json.loads(raw.decode("utf-8"))
    except (binascii.Error, ValueError, UnicodeDecodeError):
        return None
    return key if isinstance(key, dict) and key else None


def clamp_limit(raw: Optional[str | int], default: int, maximum: int) -> int:
    """Parse a page size; unusable values fall back to ``default``."""
    if raw is None or raw == "":
        return default
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return default
    if limit < 1:
        return default
    return min(limit, maximum)


def overfetch_page(
    fetch: Callable[[int], tuple[list[dict], Optional[dict]]],
    matches: Callable[[dict], bool],
    limit: int,
    multiplier: int,
    key_for: Callable[[dict], dict]
) -> tuple[list[dict], Optional[dict]]:
    """Fill a page with items matching a filter the store cannot index.

    Fetches ``limit * multiplier`` rows in one query, keeps the matching
    ones and truncates to ``limit``. When the raw fetch went past
    ``limit`` rows the continuation key is rebuilt from the last kept
    item, so the next page resumes right after what the client saw;
    otherwise the store's own key is forwarded.

    Skewed data can still produce short pages.

    Args:
        fetch: Callable taking a row limit, returning (rows, store_key)
        matches: Filter predicate
        limit: Page size
        multiplier: Overfetch factor
        key_for: Builds a continuation key from an item

    Returns:
        (items, continuation_key)
    """
    rows, store_key = fetch(limit * multiplier)
    kept = [row for row in rows if matches(row)][:limit]

    if len(rows) > limit and kept:
        return kept, key_for(kept[-1])
    return kept, store_key
