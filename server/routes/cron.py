from fastapi import APIRouter, Depends
from server.schemas import CronResponse
from server.dependencies import get_registry, get_push_sender, verify_cron_secret
from reminder_worker.batch import run_batch_reminders
from reminder_worker.config import local_now

router = APIRouter()

@router.get("/cron", response_model=CronResponse, dependencies=[Depends(verify_cron_secret)])
def run_cron(
    registry = Depends(get_registry),
    sender = Depends(get_push_sender)
):
    """Entry point for an external cron: run the batch reminder scan now."""
    sent = run_batch_reminders(registry, local_now(), sender)
    return {"success": True, "notificationsSent": sent}
