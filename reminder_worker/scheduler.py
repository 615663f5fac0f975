"""
Reminder Scheduler

Hosts the escalation engine on a recurring timer and runs the server-side
batch scan on a cron schedule.
"""
import logging
from typing import Optional
import pytz
from apscheduler.schedulers.background import BackgroundScheduler

from server.database import SessionLocal
from .batch import run_batch_reminders
from .config import config, local_now
from .dispatcher import create_dispatcher
from .engine import EscalationEngine
from .registry import SubscriptionRegistry
from .scheduler_config import BATCH_SCAN_MINUTE, TICK_INTERVAL_SECONDS
from .stores import AlertStateStore, StoreUnavailable, TaskStore

logger = logging.getLogger(__name__)

registry = SubscriptionRegistry(SessionLocal)
_engine: Optional[EscalationEngine] = None


def get_engine() -> EscalationEngine:
    global _engine
    if _engine is None:
        _engine = EscalationEngine(
            task_store=TaskStore(SessionLocal),
            state_store=AlertStateStore(SessionLocal),
            dispatcher=create_dispatcher(registry),
            clock=local_now,
        )
    return _engine


def check_reminders():
    """Interval job: one engine tick."""
    get_engine().run_tick()


def scan_synced_users():
    """Cron job: server-side fallback reminders."""
    try:
        run_batch_reminders(registry, local_now())
    except StoreUnavailable as e:
        logger.warning(f"⚠️ Registry unavailable, batch scan skipped: {e}")


# Global scheduler instance
scheduler = BackgroundScheduler(timezone=pytz.timezone(config.TIMEZONE))


def start_scheduler():
    """Start both jobs; the engine ticks once right away."""
    # max_instances=1 keeps ticks from overlapping, coalesce folds missed runs into one
    scheduler.add_job(
        check_reminders,
        'interval',
        seconds=TICK_INTERVAL_SECONDS,
        id='escalation_tick_job',
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        next_run_time=local_now()
    )

    scheduler.add_job(
        scan_synced_users,
        'cron',
        minute=BATCH_SCAN_MINUTE,
        id='batch_reminder_job',
        replace_existing=True,
        max_instances=1,
        coalesce=True
    )

    scheduler.start()
    logger.info(f"🚀 Scheduler started: escalation tick (every {TICK_INTERVAL_SECONDS}s) + batch scan (minute={BATCH_SCAN_MINUTE})")


def stop_scheduler():
    """Stop the scheduler gracefully."""
    scheduler.shutdown(wait=False)
    if _engine is not None:
        _engine.dispatcher.shutdown(wait=False)
    logger.info("🛑 Scheduler stopped")
