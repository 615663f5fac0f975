import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from server.schemas import (
    PushAllRequest, PushAllResponse, PushPayload, PushTestRequest, SubscribeRequest
)
from server.config import config
from server.dependencies import get_registry, get_push_sender
from reminder_worker.send import fan_out

router = APIRouter()
logger = logging.getLogger(__name__)

# =========================================================
# PUSH SUBSCRIPTION ENDPOINTS
# =========================================================
@router.get("/vapid-public-key")
def vapid_public_key():
    """Application server key the browser needs for pushManager.subscribe()."""
    if not config.VAPID_PUBLIC:
        raise HTTPException(status_code=503, detail="Push not configured")
    return {"publicKey": config.VAPID_PUBLIC}

@router.post("/subscribe", status_code=status.HTTP_201_CREATED)
def subscribe(
    data: Optional[SubscribeRequest] = None,
    registry = Depends(get_registry)
):
    """Store a browser push subscription (deduplicated by endpoint)."""
    if data is None or data.subscription is None or not data.subscription.endpoint:
        raise HTTPException(status_code=400, detail="Missing subscription")

    subscription = data.subscription.model_dump(by_alias=True, exclude_none=True)
    if registry.add(subscription):
        logger.info(f"New push subscription: {subscription['endpoint']}")
    return {"ok": True}

@router.post("/push-all", response_model=PushAllResponse, response_model_exclude_none=True)
def push_all(
    data: Optional[PushAllRequest] = None,
    registry = Depends(get_registry),
    sender = Depends(get_push_sender)
):
    """Send one payload to every stored subscription."""
    data = data or PushAllRequest()
    payload = PushPayload(title=data.title, body=data.body)
    results = fan_out(registry, payload, sender)
    logger.info(f"push-all: {sum(1 for r in results if r['ok'])}/{len(results)} delivered")
    return {"results": results}

@router.post("/push-test")
def push_test(
    data: Optional[PushTestRequest] = None,
    sender = Depends(get_push_sender)
):
    """Push straight to the subscription given in the body."""
    if data is None or data.subscription is None or not data.subscription.endpoint:
        raise HTTPException(status_code=400, detail="Missing subscription")

    payload = PushPayload(
        title=data.title or "Reminder",
        body=data.body or "This is a test reminder."
    )
    subscription = data.subscription.model_dump(by_alias=True, exclude_none=True)
    result, status_code = sender(subscription, payload)
    if 200 <= status_code < 300:
        return {"success": True}
    return JSONResponse({"error": result.get("message", "Push failed")}, status_code=500)
