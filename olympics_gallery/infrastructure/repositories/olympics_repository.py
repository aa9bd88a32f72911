"""Olympics year repository.

Only the parts of the year configuration the gallery needs: the record
itself and its gallery protection (password hash + token secret).
"""
import sqlite3

from ...services.timestamps import utc_now_iso
from .base import Repository


class OlympicsRepository(Repository):
    """Repository for year configuration records.

    The password hash and the token secret are always written together
    so a year is either fully protected or fully open.
    """

    def get(self, year: int) -> dict | None:
        """Get year record.

        Returns:
            Dict with year, event_name, gallery_password_hash,
            gallery_token_secret, created_at, updated_at or None
        """
        cursor = self._execute("SELECT * FROM olympics WHERE year = ?", (year,))
        return self._row_to_dict(cursor.fetchone())

    def create(self, year: int, event_name: str | None = None) -> dict | None:
        """Create year record with gallery protection cleared.

        Returns:
            The created record, or None if the year already exists
        """
        now = utc_now_iso()
        try:
            self._execute(
                """INSERT INTO olympics (year, event_name, created_at, updated_at)
                   VALUES (?, ?, ?, ?)""",
                (year, event_name, now, now)
            )
        except sqlite3.IntegrityError:
            return None
        self._commit()
        return self.get(year)

    def set_gallery_protection(
        self,
        year: int,
        password_hash: str | None,
        token_secret: str | None
    ) -> bool:
        """Set or clear gallery protection in a single write.

        Args:
            year: Olympics year
            password_hash: bcrypt hash, or None to open the gallery
            token_secret: token signing secret, or None to open the gallery

        Returns:
            True if the year exists and was updated
        """
        if (password_hash is None) != (token_secret is None):
            raise ValueError("password hash and token secret must be set or cleared together")

        cursor = self._execute(
            """UPDATE olympics
               SET gallery_password_hash = ?, gallery_token_secret = ?, updated_at = ?
               WHERE year = ?""",
            (password_hash, token_secret, utc_now_iso(), year)
        )
        self._commit()
        return cursor.rowcount > 0

    def set_token_secret(self, year: int, token_secret: str) -> bool:
        """Replace the token secret of a protected gallery.

        Returns:
            False if the year is unknown or the gallery is open
        """
        cursor = self._execute(
            """UPDATE olympics
               SET gallery_token_secret = ?, updated_at = ?
               WHERE year = ? AND gallery_password_hash IS NOT NULL""",
            (token_secret, utc_now_iso(), year)
        )
        self._commit()
        return cursor.rowcount > 0
