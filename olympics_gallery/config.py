"""Application configuration and constants."""
import os
import secrets
from pathlib import Path

# Directory paths
BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = Path(os.environ.get("GALLERY_DATA_DIR", str(BASE_DIR / "data")))
DATABASE_PATH = Path(os.environ.get("GALLERY_DATABASE_PATH", str(DATA_DIR / "gallery.db")))

# Create directories if they don't exist
DATA_DIR.mkdir(parents=True, exist_ok=True)

LOG_LEVEL = os.environ.get("GALLERY_LOG_LEVEL", "INFO").upper()

# Object storage
STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "local").lower()
STORAGE_BASE_PATH = Path(os.environ.get("STORAGE_BASE_PATH", str(DATA_DIR / "objects")))
# Signs local /files URLs; a per-process secret invalidates them on restart
STORAGE_SIGNING_SECRET = os.environ.get("STORAGE_SIGNING_SECRET") or secrets.token_hex(32)
MEDIA_PUBLIC_BASE_URL = os.environ.get("MEDIA_PUBLIC_BASE_URL", "").rstrip("/")

# S3 or MinIO bucket holding the media objects
S3_BUCKET = os.environ.get("S3_BUCKET")
S3_ENDPOINT = os.environ.get("S3_ENDPOINT")  # MinIO only
S3_ACCESS_KEY = os.environ.get("S3_ACCESS_KEY")
S3_SECRET_KEY = os.environ.get("S3_SECRET_KEY")
S3_REGION = os.environ.get("S3_REGION", "us-east-1")
S3_USE_SSL = os.environ.get("S3_USE_SSL", "true").lower() == "true"

# Shared secrets for non-gallery callers
ADMIN_TOKEN = os.environ.get("GALLERY_ADMIN_TOKEN", None)
ADMIN_HEADER_NAME = "X-Admin-Token"
STORAGE_WEBHOOK_TOKEN = os.environ.get("STORAGE_WEBHOOK_TOKEN", None)
STORAGE_WEBHOOK_HEADER_NAME = "X-Storage-Webhook-Token"

# Gallery access tokens
GALLERY_TOKEN_HEADER = "X-Gallery-Token"
TOKEN_EXPIRY_SECONDS = 24 * 60 * 60  # 24 hours

# Presigned URL lifetimes
UPLOAD_URL_EXPIRY_SECONDS = 15 * 60  # 15 minutes
DOWNLOAD_URL_EXPIRY_SECONDS = 60 * 60  # 1 hour

# Upload limits
MAX_IMAGE_SIZE_BYTES = 20 * 1024 * 1024  # 20MB
MAX_VIDEO_SIZE_BYTES = 100 * 1024 * 1024  # 100MB
MEDIA_TYPES = ("image", "video")

# Storage layout: {year}/{folder}/{mediaId}.{ext}
ORIGINALS_FOLDER = "originals"
THUMBNAILS_FOLDER = "thumbnails"
DISPLAY_FOLDER = "display"
MEDIA_ID_PREFIX = "media-"

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp", "heic", "heif", "avif", "bmp", "tif", "tiff"}
DEFAULT_IMAGE_EXTENSION = "jpg"
DEFAULT_VIDEO_EXTENSION = "mp4"

# Client-resized derivatives (thumbnail, display)
DERIVATIVE_CONTENT_TYPES = {
    "webp": "image/webp",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
}
DEFAULT_DERIVATIVE_EXTENSION = "webp"

# Listing
DEFAULT_PAGE_SIZE = 24
MAX_PAGE_SIZE = 100
TEAM_FILTER_OVERFETCH = 10

# Browser clients served from another origin
CORS_ORIGINS = [o.strip() for o in os.environ.get("GALLERY_CORS_ORIGINS", "*").split(",") if o.strip()]
