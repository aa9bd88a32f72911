"""Gallery protection administration.

The only writer of a year's password hash and token secret. Both are
always written together; changing either revokes every outstanding
access token for the year.
"""
import logging
import secrets
from typing import Optional

import bcrypt
from fastapi import HTTPException

from ...infrastructure.repositories import OlympicsRepository

logger = logging.getLogger(__name__)


class GalleryConfigService:
    """Service for year records and their gallery protection."""

    def __init__(self, olympics_repository: OlympicsRepository):
        self.olympics_repo = olympics_repository

    def create_year(self, year: int, event_name: Optional[str] = None) -> dict:
        """Create a year record with an open gallery.

        Raises:
            HTTPException: 409 if the year already exists
        """
        if year < 1:
            raise HTTPException(status_code=400, detail="Invalid year")

        olympics = self.olympics_repo.create(year, (event_name or "").strip() or None)
        if olympics is None:
            raise HTTPException(status_code=409, detail=f"Olympics year {year} already exists")

        logger.info("Created olympics year %s", year)
        return self._public_view(olympics)

    def get_year(self, year: int) -> dict:
        """Get public view of a year record (no secrets)."""
        return self._public_view(self._require(year))

    def set_password(self, year: int, password: Optional[str]) -> dict:
        """Protect the gallery with ``password``, or open it when empty."""
        self._require(year)

        if password:
            password_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
            self.olympics_repo.set_gallery_protection(year, password_hash, self.new_secret())
            logger.info("Gallery password set for %s", year)
        else:
            self.olympics_repo.set_gallery_protection(year, None, None)
            logger.info("Gallery protection cleared for %s", year)

        return self.get_year(year)

    def rotate_secret(self, year: int) -> dict:
        """Replace the token secret, revoking all outstanding tokens.

        Raises:
            HTTPException: 400 if the gallery is open
        """
        olympics = self._require(year)
        if not olympics.get("gallery_password_hash"):
            raise HTTPException(status_code=400, detail="Gallery is not password protected")

        self.olympics_repo.set_token_secret(year, self.new_secret())
        logger.info("Gallery token secret rotated for %s", year)
        return self.get_year(year)

    @staticmethod
    def new_secret() -> str:
        return secrets.token_hex(32)

    def _require(self, year: int) -> dict:
        olympics = self.olympics_repo.get(year)
        if not olympics:
            raise HTTPException(status_code=404, detail=f"Olympics year {year} not found")
        return olympics

    @staticmethod
    def _public_view(olympics: dict) -> dict:
        return {
            "year": olympics["year"],
            "eventName": olympics.get("event_name"),
            "galleryProtected": bool(olympics.get("gallery_password_hash")),
            "createdAt": olympics.get("created_at"),
            "updatedAt": olympics.get("updated_at"),
        }
