import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from server.schemas import SyncRequest
from server.dependencies import get_registry

router = APIRouter()
logger = logging.getLogger(__name__)

@router.post("/sync")
def sync_tasks(
    data: Optional[SyncRequest] = None,
    registry = Depends(get_registry)
):
    """Keep a server copy of a browser's tasks for the batch reminder scan."""
    if data is None or not data.subscription or not data.subscription.get("endpoint"):
        raise HTTPException(status_code=400, detail="Missing subscription")

    tasks = [task.model_dump(by_alias=True) for task in data.tasks]
    key = registry.save_user_record(data.subscription, tasks)
    logger.info(f"Synced {len(tasks)} tasks for {key}")
    return {"ok": True}
