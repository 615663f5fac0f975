"""
Server-side reminder scan

Coarse fallback for browsers that are closed: looks at every synced user
record and sends one summary push per user with anything due and not done.
No escalation levels here; that is the engine's job.
"""
import logging
from datetime import datetime
from typing import List, Mapping

from server.schemas import PushPayload
from .engine import is_due, parse_due_time
from .send import PushSender, is_gone, send_web_push

logger = logging.getLogger(__name__)

REMINDER_TITLE = "Task Reminder"
REMINDER_TAG = "daily-reminder"


def due_titles(tasks: List[Mapping], now: datetime) -> List[str]:
    titles = []
    for task in tasks:
        if not isinstance(task, Mapping) or task.get("completedToday"):
            continue
        due = parse_due_time(task.get("dueTime"))
        if due is None or not task.get("title"):
            continue
        if is_due(due, now):
            titles.append(task["title"])
    return titles


def build_reminder(titles: List[str]) -> PushPayload:
    return PushPayload(
        title=REMINDER_TITLE,
        body=f"You have due tasks: {', '.join(titles)}",
        tag=REMINDER_TAG,
    )


def run_batch_reminders(registry, now: datetime, sender: PushSender = send_web_push) -> int:
    """Returns the number of reminders delivered."""
    logger.info("🔍 Scanning synced users for due tasks...")
    sent = 0

    for key, record in registry.user_records():
        subscription = record.get("subscription")
        tasks = record.get("tasks") or []
        if not subscription or not tasks:
            continue

        titles = due_titles(tasks, now)
        if not titles:
            continue

        try:
            result, status_code = sender(subscription, build_reminder(titles))
        except Exception as e:
            logger.error(f"Push failed for {key}: {e}")
            continue

        if 200 <= status_code < 300:
            sent += 1
        elif is_gone(status_code):
            logger.info(f"Subscription expired, deleting user record {key}")
            registry.delete_user_record(key)
        else:
            logger.error(f"❌ Push failed for {key}: {result}")

    logger.info(f"✅ Batch scan complete: {sent} reminders sent")
    return sent
