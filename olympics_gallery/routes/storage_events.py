"""Storage event routes - object-created notifications.

Accepts S3-format event notifications (``{"Records": [...]}``) posted by
the bucket's notification target. Delivery problems are never reported
back to the sender: the endpoint always answers 200 with a count.
"""
import json
import logging

from fastapi import APIRouter, Depends, Request

from ..application.services import ReconcileService
from ..dependencies import verify_webhook_token
from ..responses import success_response
from .deps import reconcile_objects

logger = logging.getLogger(__name__)

router = APIRouter(tags=["storage"])


@router.post("/api/storage/events")
async def storage_events(request: Request, _: bool = Depends(verify_webhook_token)):
    body = await request.body()
    try:
        event = json.loads(body) if body else None
    except ValueError:
        logger.warning("Ignoring storage event with unparseable body (%d bytes)", len(body))
        event = None

    keys = ReconcileService.keys_from_notification(event)
    processed = await reconcile_objects(keys) if keys else 0
    return success_response({"received": len(keys), "processed": processed})
