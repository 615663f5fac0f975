from typing import Optional
from fastapi import Depends, HTTPException
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from server.database import SessionLocal
from server.config import config
from reminder_worker.registry import SubscriptionRegistry
from reminder_worker.stores import TaskStore
from reminder_worker.send import send_web_push

security = HTTPBearer(auto_error=False)

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_task_store() -> TaskStore:
    return TaskStore(SessionLocal)

def get_registry() -> SubscriptionRegistry:
    return SubscriptionRegistry(SessionLocal)

def get_push_sender():
    """Callable (subscription, payload) -> (result, status_code)."""
    return send_web_push

def verify_cron_secret(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> None:
    """Only enforced when CRON_SECRET is configured."""
    if not config.CRON_SECRET:
        return
    if credentials is None or credentials.credentials != config.CRON_SECRET:
        raise HTTPException(status_code=401, detail="Unauthorized")
