"""Admin routes - olympics years and gallery protection.

Every route requires the X-Admin-Token header.
"""
import sqlite3
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ..database import get_db
from ..dependencies import verify_admin_token
from ..responses import success_response
from .deps import get_gallery_config_service

router = APIRouter(tags=["admin"], dependencies=[Depends(verify_admin_token)])


class OlympicsCreate(BaseModel):
    year: int
    eventName: Optional[str] = None


class GalleryPasswordUpdate(BaseModel):
    password: Optional[str] = None


@router.post("/api/olympics")
def create_olympics(body: OlympicsCreate, db: sqlite3.Connection = Depends(get_db)):
    """Create an olympics year with an open gallery."""
    data = get_gallery_config_service(db).create_year(body.year, body.eventName)
    return success_response(data, status_code=201)


@router.get("/api/olympics/{year}")
def get_olympics(year: int, db: sqlite3.Connection = Depends(get_db)):
    return success_response(get_gallery_config_service(db).get_year(year))


@router.put("/api/olympics/{year}/gallery-password")
def set_gallery_password(
    year: int,
    body: GalleryPasswordUpdate,
    db: sqlite3.Connection = Depends(get_db)
):
    """Protect the gallery with a password, or open it with an empty one.

    Changing the password rotates the token secret, so earlier tokens stop working.
    """
    return success_response(get_gallery_config_service(db).set_password(year, body.password))


@router.post("/api/olympics/{year}/gallery/rotate-secret")
def rotate_gallery_secret(year: int, db: sqlite3.Connection = Depends(get_db)):
    """Invalidate every outstanding gallery token for the year."""
    return success_response(get_gallery_config_service(db).rotate_secret(year))
