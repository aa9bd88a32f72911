"""SQLite connection management and schema.

SQLite is used as a small document store: each row keeps the full entity
as a JSON document next to the columns that the key lookups and the
secondary-index queries need.
"""
import sqlite3

from . import config


def create_connection() -> sqlite3.Connection:
    """Open a new connection to the gallery database.

    Callers own the connection and must close it.
    """
    conn = sqlite3.connect(config.DATABASE_PATH, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    return conn


def get_db():
    """FastAPI dependency yielding a request-scoped connection."""
    db = create_connection()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    """Initialize database schema."""
    db = create_connection()
    try:
        # Year configuration (gallery protection lives here)
        db.execute("""
            CREATE TABLE IF NOT EXISTS olympics (
                year INTEGER PRIMARY KEY,
                event_name TEXT,
                gallery_password_hash TEXT,
                gallery_token_secret TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)

        # Media catalog, keyed by (year, media_id)
        db.execute("""
            CREATE TABLE IF NOT EXISTS media (
                year INTEGER NOT NULL,
                media_id TEXT NOT NULL,
                event_id TEXT,
                team_id TEXT,
                created_at TEXT NOT NULL,
                document TEXT NOT NULL,
                PRIMARY KEY (year, media_id)
            )
        """)

        # Event-scoped view, newest first
        db.execute("""
            CREATE INDEX IF NOT EXISTS idx_media_year_event_created
            ON media (year, event_id, created_at DESC, media_id DESC)
        """)

        # Year-ordered-by-time view, newest first
        db.execute("""
            CREATE INDEX IF NOT EXISTS idx_media_year_created
            ON media (year, created_at DESC, media_id DESC)
        """)

        db.commit()
    finally:
        db.close()
