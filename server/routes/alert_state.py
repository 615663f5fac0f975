from typing import Dict
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from server.models import AppState
from server.schemas import AlertStateEntry
from server.dependencies import get_db
from reminder_worker.scheduler_config import ALERT_STATE_KEY

router = APIRouter()

@router.get("/alert-state", response_model=Dict[str, AlertStateEntry])
def get_alert_state(db: Session = Depends(get_db)):
    """Read-only view of escalation progress; may lag the engine by a tick."""
    row = db.query(AppState).filter(AppState.key == ALERT_STATE_KEY).first()
    return row.value if row else {}
