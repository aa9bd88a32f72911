"""Test configuration and fixtures for the Olympics gallery.

This module provides isolated test environments:
- Temporary database (SQLite)
- Temporary local object store with a known signing secret
- Known admin token
- Seeded olympics years (open and password protected)
"""
import asyncio
import io
import os
import tempfile
from pathlib import Path
from typing import Generator, Dict

import bcrypt
import pytest
from fastapi.testclient import TestClient

# Set test environment BEFORE importing app modules
os.environ.setdefault("GALLERY_DATA_DIR", tempfile.mkdtemp(prefix="olympics-gallery-test-"))

ADMIN_TOKEN = "test-admin-token"
SIGNING_SECRET = "test-signing-secret"
GALLERY_PASSWORD = "gold-medal"
OPEN_YEAR = 2025
PROTECTED_YEAR = 2024


@pytest.fixture(scope="function")
def isolated_environment(tmp_path: Path) -> Dict:
    """Create completely isolated environment for a single test.

    Returns:
        Dict with paths: db_path, objects_dir
    """
    env = {
        "db_path": tmp_path / "test.db",
        "objects_dir": tmp_path / "objects",
    }
    env["objects_dir"].mkdir(parents=True, exist_ok=True)
    return env


@pytest.fixture(scope="function")
def patched_config(isolated_environment: Dict, monkeypatch):
    """Point app configuration at the isolated directories."""
    import olympics_gallery.config as config
    from olympics_gallery.infrastructure.storage import reset_storage

    monkeypatch.setattr(config, "DATABASE_PATH", isolated_environment["db_path"])
    monkeypatch.setattr(config, "STORAGE_BACKEND", "local")
    monkeypatch.setattr(config, "STORAGE_BASE_PATH", isolated_environment["objects_dir"])
    monkeypatch.setattr(config, "STORAGE_SIGNING_SECRET", SIGNING_SECRET)
    monkeypatch.setattr(config, "MEDIA_PUBLIC_BASE_URL", "")
    monkeypatch.setattr(config, "ADMIN_TOKEN", ADMIN_TOKEN)
    monkeypatch.setattr(config, "STORAGE_WEBHOOK_TOKEN", None)

    # Storage singleton must pick up the patched paths
    reset_storage()
    yield isolated_environment
    reset_storage()


@pytest.fixture(scope="function")
def fresh_database(patched_config: Dict) -> Path:
    """Initialize fresh database with schema for each test."""
    from olympics_gallery.database import init_db

    init_db()
    return patched_config["db_path"]


@pytest.fixture(scope="function")
def db_connection(fresh_database: Path):
    """Connection to the fresh database, closed after the test."""
    from olympics_gallery.database import create_connection

    conn = create_connection()
    yield conn
    conn.close()


@pytest.fixture(scope="function")
def client(fresh_database: Path) -> Generator[TestClient, None, None]:
    """Create test client with fresh isolated environment.

    Usage:
        def test_something(client):
            response = client.get("/api/olympics/2025/media")
            assert response.status_code == 200
    """
    from olympics_gallery.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(scope="function")
def admin_headers() -> Dict:
    return {"X-Admin-Token": ADMIN_TOKEN}


@pytest.fixture(scope="function")
def open_year(db_connection) -> int:
    """Olympics year with an open gallery."""
    from olympics_gallery.infrastructure.repositories import OlympicsRepository

    OlympicsRepository(db_connection).create(OPEN_YEAR, "Summer Games")
    return OPEN_YEAR


@pytest.fixture(scope="function")
def protected_year(db_connection) -> int:
    """Olympics year whose gallery requires GALLERY_PASSWORD."""
    from olympics_gallery.infrastructure.repositories import OlympicsRepository

    repo = OlympicsRepository(db_connection)
    repo.create(PROTECTED_YEAR, "Winter Games")
    password_hash = bcrypt.hashpw(GALLERY_PASSWORD.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")
    repo.set_gallery_protection(PROTECTED_YEAR, password_hash, "year-secret-" + "0" * 20)
    return PROTECTED_YEAR


@pytest.fixture
def run_async():
    """Helper to run async functions in sync context."""
    def _run(coro):
        return asyncio.run(coro)
    return _run


@pytest.fixture(scope="function")
def test_image_bytes() -> bytes:
    """Create minimal valid JPEG image in memory (120x80).

    Returns:
        JPEG file as bytes
    """
    from PIL import Image

    img = Image.new("RGB", (120, 80), color="red")
    img_bytes = io.BytesIO()
    img.save(img_bytes, format="JPEG", quality=85)
    return img_bytes.getvalue()
