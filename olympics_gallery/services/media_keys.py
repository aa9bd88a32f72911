"""Storage key layout for gallery media.

    {year}/originals/{mediaId}.{ext}
    {year}/thumbnails/{mediaId}.{ext}
    {year}/display/{mediaId}.{ext}      (images only)
"""
import re
import uuid
from typing import Optional
from urllib.parse import unquote_plus

from ..config import (
    ORIGINALS_FOLDER, THUMBNAILS_FOLDER, DISPLAY_FOLDER, MEDIA_ID_PREFIX,
    IMAGE_EXTENSIONS, DERIVATIVE_CONTENT_TYPES, DEFAULT_DERIVATIVE_EXTENSION
)

EXTENSION_PATTERN = re.compile(r"[a-z0-9]{1,10}")


def new_media_id() -> str:
    """Generate an opaque media identifier."""
    return f"{MEDIA_ID_PREFIX}{uuid.uuid4()}"


def file_extension(filename: str) -> str:
    """Lower-cased extension without the dot.

    Returns '' when there is none or it is not a short alphanumeric run,
    so nothing from the client can add a path segment to a key.
    """
    name = filename.strip()
    dot = name.rfind(".")
    if dot == -1:
        return ""
    ext = name[dot + 1:].lower()
    return ext if EXTENSION_PATTERN.fullmatch(ext) else ""


def media_type_for_extension(ext: str) -> str:
    """'image' for known image extensions, 'video' for anything else."""
    return "image" if ext.lower() in IMAGE_EXTENSIONS else "video"


def derivative_extension(hint: Optional[str]) -> str:
    """Validate a thumbnail/display extension hint."""
    ext = (hint or "").strip().lower().lstrip(".")
    return ext if ext in DERIVATIVE_CONTENT_TYPES else DEFAULT_DERIVATIVE_EXTENSION


def derivative_content_type(ext: str) -> str:
    return DERIVATIVE_CONTENT_TYPES.get(ext, DERIVATIVE_CONTENT_TYPES[DEFAULT_DERIVATIVE_EXTENSION])


def original_key(year: int, media_id: str, ext: str) -> str:
    return f"{year}/{ORIGINALS_FOLDER}/{media_id}.{ext}"


def thumbnail_key(year: int, media_id: str, ext: str) -> str:
    return f"{year}/{THUMBNAILS_FOLDER}/{media_id}.{ext}"


def display_key(year: int, media_id: str, ext: str) -> str:
    return f"{year}/{DISPLAY_FOLDER}/{media_id}.{ext}"


def decode_event_key(raw_key: str) -> str:
    """Decode an object key as delivered in storage event notifications."""
    return unquote_plus(raw_key)


def parse_original_key(key: str) -> Optional[tuple[int, str, str]]:
    """Split ``{year}/originals/{filename}`` into (year, mediaId, ext).

    Returns:
        None if the key is not a three-segment originals key with a
        numeric year
    """
    parts = key.split("/")
    if len(parts) != 3 or parts[1] != ORIGINALS_FOLDER or not parts[2]:
        return None
    year_str, _, filename = parts
    if not (year_str.isascii() and year_str.isdigit()):
        return None

    dot = filename.rfind(".")
    if dot <= 0:
        media_id, ext = filename, ""
    else:
        media_id, ext = filename[:dot], filename[dot + 1:].lower()
    return int(year_str), media_id, ext
