"""Gallery access guard.

Decides whether a request for a year's gallery may proceed and issues
access tokens in exchange for the gallery password.
"""
import logging
import time
from typing import Callable, Optional

import bcrypt
from fastapi import HTTPException

from ...infrastructure.repositories import OlympicsRepository
from ...services import token_codec

logger = logging.getLogger(__name__)


def parse_year(year: str | int) -> Optional[int]:
    """Parse a path year; None when it is not a plain integer."""
    text = str(year).strip()
    if not (text.isascii() and text.isdigit()):
        return None
    return int(text)


class AccessService:
    """Service for gallery access control.

    Responsibilities:
    - Token check for gallery-gated operations (fail closed)
    - Password check that mints a token
    """

    def __init__(
        self,
        olympics_repository: OlympicsRepository,
        clock: Callable[[], float] = time.time
    ):
        self.olympics_repo = olympics_repository
        self.clock = clock

    def check_access(self, year: str, token: Optional[str]) -> bool:
        """Check whether a caller holding ``token`` may use ``year``'s gallery.

        Args:
            year: Year exactly as supplied by the caller
            token: Value of the gallery token header, if any

        Returns:
            True if access is granted
        """
        year_num = parse_year(year)
        if year_num is None:
            return False

        olympics = self.olympics_repo.get(year_num)
        if not olympics:
            return False

        # No password set -> gallery is open
        if not olympics.get("gallery_password_hash"):
            return True

        secret = olympics.get("gallery_token_secret")
        if not token or not secret:
            return False

        return token_codec.verify(secret, token, str(year).strip(), self.clock())

    def validate_password(self, year: str, password: Optional[str]) -> dict:
        """Exchange the gallery password for an access token.

        Open galleries get a token without a password check.

        Returns:
            Dict with token and expiresAt (epoch milliseconds)

        Raises:
            HTTPException: 400 bad input, 404 unknown year,
                401 wrong password, 500 protection misconfigured
        """
        year_num = parse_year(year)
        if year_num is None:
            raise HTTPException(status_code=400, detail="Invalid year")

        olympics = self.olympics_repo.get(year_num)
        if not olympics:
            raise HTTPException(status_code=404, detail=f"Olympics year {year} not found")

        secret = olympics.get("gallery_token_secret")
        expires_at = token_codec.new_expiry(self.clock())

        if not olympics.get("gallery_password_hash"):
            # Guard ignores tokens on an open gallery; mint one only if a secret exists
            token = token_codec.mint(secret, year_num, expires_at) if secret else ""
            return {"token": token, "expiresAt": expires_at * 1000}

        if password is None or not isinstance(password, str):
            raise HTTPException(status_code=400, detail="Password is required")

        if not secret:
            logger.error("Gallery %s has a password but no token secret", year_num)
            raise HTTPException(status_code=500, detail="Gallery not configured")

        if not self._password_matches(password, olympics["gallery_password_hash"]):
            logger.debug("Rejected gallery password for %s", year_num)
            raise HTTPException(status_code=401, detail="Invalid password")

        return {
            "token": token_codec.mint(secret, year_num, expires_at),
            "expiresAt": expires_at * 1000,
        }

    @staticmethod
    def _password_matches(password: str, password_hash: str) -> bool:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
