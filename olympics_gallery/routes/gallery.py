"""Gallery access routes - password check and token issue."""
import sqlite3
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..database import get_db
from ..responses import success_response
from .deps import get_access_service

router = APIRouter(prefix="/api/olympics/{year}/gallery", tags=["gallery"])


class GalleryValidate(BaseModel):
    password: Optional[str] = None


@router.post("/validate")
def validate_gallery_password(
    year: str,
    body: Optional[GalleryValidate] = None,
    db: sqlite3.Connection = Depends(get_db)
):
    """Exchange the gallery password for an access token.

    Open galleries answer with a token (possibly empty) without a password.
    """
    password = body.password if body else None
    return success_response(get_access_service(db).validate_password(year, password))
