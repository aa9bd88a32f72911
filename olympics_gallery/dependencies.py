"""Shared FastAPI dependencies."""
import hmac
import logging
import sqlite3
from typing import Optional

from fastapi import Depends, Header, HTTPException

from . import config
from .application.services import AccessService
from .database import get_db
from .infrastructure.repositories import OlympicsRepository

logger = logging.getLogger(__name__)


def _secret_matches(supplied: Optional[str], expected: str) -> bool:
    if not supplied:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def require_gallery_access(
    year: str,
    x_gallery_token: Optional[str] = Header(None),
    db: sqlite3.Connection = Depends(get_db)
) -> str:
    """Require gallery access for the path's year, raise 401 otherwise.

    Returns the year as supplied.
    """
    if not AccessService(OlympicsRepository(db)).check_access(year, x_gallery_token):
        logger.debug("Gallery access denied for year %s", year)
        raise HTTPException(status_code=401, detail="Gallery access requires authentication")
    return year


def verify_admin_token(x_admin_token: Optional[str] = Header(None)) -> bool:
    """Verify admin token for configuration endpoints.

    Returns True if the token is valid, raises HTTPException otherwise.
    """
    if not config.ADMIN_TOKEN:
        raise HTTPException(
            status_code=500,
            detail="Admin token not configured. Set GALLERY_ADMIN_TOKEN environment variable."
        )

    if not _secret_matches(x_admin_token, config.ADMIN_TOKEN):
        raise HTTPException(status_code=401, detail="Admin token required")

    return True


def verify_webhook_token(x_storage_webhook_token: Optional[str] = Header(None)) -> bool:
    """Verify the shared secret on storage notifications, when one is configured."""
    if config.STORAGE_WEBHOOK_TOKEN and not _secret_matches(
        x_storage_webhook_token, config.STORAGE_WEBHOOK_TOKEN
    ):
        raise HTTPException(status_code=401, detail="Invalid webhook token")
    return True
