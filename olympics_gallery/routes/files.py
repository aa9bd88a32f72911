"""File routes for the local storage backend.

Signed URLs issued by LocalStorage point here. A PUT to an originals key
triggers reconciliation once the response has been sent, the same way a
bucket notification would with S3.
"""
import logging

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request, Response
from fastapi.responses import FileResponse

from ..config import MAX_VIDEO_SIZE_BYTES
from ..infrastructure.storage import get_storage, LocalStorage, ObjectNotFoundError
from ..services.media_keys import parse_original_key
from ..services.object_metadata import META_HEADER_PREFIX
from .deps import reconcile_objects

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"])


def _local_storage() -> LocalStorage:
    storage = get_storage()
    if not isinstance(storage, LocalStorage):
        raise HTTPException(status_code=404, detail="Not found")
    return storage


def _require_signature(storage: LocalStorage, method: str, key: str, expires: str, signature: str):
    if not storage.verify_signature(method, key, expires, signature):
        raise HTTPException(status_code=403, detail="Invalid or expired signature")


@router.put("/files/{key:path}")
async def put_file(
    key: str,
    request: Request,
    background_tasks: BackgroundTasks,
    expires: str = "",
    signature: str = ""
):
    """Store an object through a signed upload URL."""
    storage = _local_storage()
    _require_signature(storage, "PUT", key, expires, signature)

    content = await request.body()
    if len(content) > MAX_VIDEO_SIZE_BYTES:
        raise HTTPException(status_code=400, detail="Object exceeds the maximum upload size")

    metadata = {
        name[len(META_HEADER_PREFIX):]: value
        for name, value in request.headers.items()
        if name.lower().startswith(META_HEADER_PREFIX)
    }
    await storage.upload(key, content, request.headers.get("content-type"), metadata)

    if parse_original_key(key):
        background_tasks.add_task(reconcile_objects, [key])
    return Response(status_code=200)


@router.get("/files/{key:path}")
async def get_file(key: str, expires: str = "", signature: str = ""):
    """Serve an object through a signed download URL."""
    storage = _local_storage()
    _require_signature(storage, "GET", key, expires, signature)

    try:
        path = storage.get_path(key)
        attributes = await storage.get_attributes(key)
    except ObjectNotFoundError:
        raise HTTPException(status_code=404, detail="Object not found")
    return FileResponse(path, media_type=attributes.content_type)
