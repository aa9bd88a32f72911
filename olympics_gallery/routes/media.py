"""Media routes - upload coordination and catalog access.

All routes require gallery access for the path's year (X-Gallery-Token).
"""
import sqlite3
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..application.services import parse_year
from ..database import get_db
from ..dependencies import require_gallery_access
from ..responses import success_response
from .deps import get_upload_service, get_media_service

router = APIRouter(
    prefix="/api/olympics/{year}/media",
    tags=["media"],
    dependencies=[Depends(require_gallery_access)]
)


# Pydantic models for request validation
class MediaTags(BaseModel):
    eventId: Optional[str] = None
    teamId: Optional[str] = None
    teamIds: Optional[list[str]] = None
    persons: Optional[list[str]] = None


class UploadUrlRequest(BaseModel):
    fileName: Optional[str] = None
    fileSize: Optional[int] = None
    mimeType: Optional[str] = None
    type: Optional[str] = None
    tags: Optional[MediaTags] = None
    uploadedBy: Optional[str] = None
    caption: Optional[str] = None
    thumbnailExt: Optional[str] = None
    displayExt: Optional[str] = None


class MediaUpdate(BaseModel):
    caption: Optional[str] = None
    uploadedBy: Optional[str] = None
    eventId: Optional[str] = None
    teamId: Optional[str] = None
    teamIds: Optional[list[str]] = None
    persons: Optional[list[str]] = None


def _year(year: str) -> int:
    year_num = parse_year(year)
    if year_num is None:
        raise HTTPException(status_code=400, detail="Invalid year")
    return year_num


@router.post("/upload-url")
def request_upload_url(
    year: str,
    body: UploadUrlRequest,
    db: sqlite3.Connection = Depends(get_db)
):
    """Issue presigned upload URLs and write the provisional record."""
    data = get_upload_service(db).request_upload(
        _year(year),
        file_name=body.fileName,
        file_size=body.fileSize,
        mime_type=body.mimeType,
        media_type=body.type,
        tags=body.tags.model_dump(exclude_none=True) if body.tags else None,
        uploaded_by=body.uploadedBy,
        caption=body.caption,
        thumbnail_ext=body.thumbnailExt,
        display_ext=body.displayExt
    )
    return success_response(data, status_code=201)


@router.get("")
def list_media(
    year: str,
    eventId: Optional[str] = None,
    teamId: Optional[str] = None,
    person: Optional[str] = None,
    status: Optional[str] = None,
    limit: Optional[str] = None,
    nextToken: Optional[str] = None,
    db: sqlite3.Connection = Depends(get_db)
):
    """List a page of media, newest first."""
    data = get_media_service(db).list_media(
        _year(year),
        event_id=eventId,
        team_id=teamId,
        person=person,
        status=status,
        limit=limit,
        next_token=nextToken
    )
    return success_response(data)


@router.get("/{media_id}")
def get_media(year: str, media_id: str, db: sqlite3.Connection = Depends(get_db)):
    """Get one media item with download URLs."""
    return success_response(get_media_service(db).get_media(_year(year), media_id))


@router.patch("/{media_id}")
def update_media(
    year: str,
    media_id: str,
    body: Optional[MediaUpdate] = None,
    db: sqlite3.Connection = Depends(get_db)
):
    """Edit caption, uploader and tags."""
    changes = body.model_dump(exclude_unset=True) if body else {}
    return success_response(get_media_service(db).update_media(_year(year), media_id, changes))


@router.delete("/{media_id}")
async def delete_media(year: str, media_id: str, db: sqlite3.Connection = Depends(get_db)):
    """Delete a media item and its stored assets."""
    return success_response(await get_media_service(db).delete_media(_year(year), media_id))
