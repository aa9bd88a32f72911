"""Base repository protocol and utilities.

This module defines the interface that all repositories must implement.
"""
import json
from typing import Protocol, Any
import sqlite3


class ConnectionProtocol(Protocol):
    """Protocol for database connection."""

    def execute(self, sql: str, parameters: tuple = ...) -> sqlite3.Cursor: ...
    def commit(self) -> None: ...


class Repository:
    """Base repository class.

    All repositories should inherit from this class.

    Example:
        class OlympicsRepository(Repository):
            def get(self, year: int) -> dict | None:
                cursor = self._execute("SELECT * FROM olympics WHERE year = ?", (year,))
                return self._row_to_dict(cursor.fetchone())
    """

    def __init__(self, connection: ConnectionProtocol):
        """Initialize repository with database connection.

        Args:
            connection: Database connection (sqlite3.Connection or compatible)
        """
        self._conn = connection

    def _execute(self, sql: str, parameters: tuple = ()) -> sqlite3.Cursor:
        """Execute SQL query with parameters.

        Args:
            sql: SQL query string
            parameters: Query parameters (prevents SQL injection)

        Returns:
            sqlite3.Cursor with results
        """
        return self._conn.execute(sql, parameters)

    def _commit(self) -> None:
        """Commit current transaction."""
        self._conn.commit()

    def _row_to_dict(self, row: sqlite3.Row | None) -> dict | None:
        """Convert sqlite3.Row to dictionary.

        Args:
            row: Database row or None

        Returns:
            Dictionary representation or None
        """
        return dict(row) if row else None

    @staticmethod
    def _dump_document(document: dict[str, Any]) -> str:
        """Serialize a document, dropping None-valued top-level fields."""
        return json.dumps(
            {k: v for k, v in document.items() if v is not None},
            separators=(",", ":"),
            ensure_ascii=False
        )

    @staticmethod
    def _load_document(raw: str | None) -> dict | None:
        """Deserialize a stored document."""
        return json.loads(raw) if raw else None
