import os
import logging
from datetime import datetime
from pathlib import Path
import pytz
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

current_file_path = Path(__file__).resolve()
root_dir = current_file_path.parent.parent
env_path = root_dir / ".env.dev"

if env_path.exists():
    load_dotenv(dotenv_path=env_path, override=True)
else:
    load_dotenv()

class ReminderWorkerConfig:
    def __init__(self) -> None:
        self.TIMEZONE = os.getenv("TIMEZONE", "UTC")
        self.VAPID_PUBLIC = os.getenv("VAPID_PUBLIC")
        self.VAPID_PRIVATE = os.getenv("VAPID_PRIVATE")
        self.VAPID_CONTACT = os.getenv("VAPID_CONTACT", "mailto:you@example.com")

    @property
    def push_configured(self) -> bool:
        return bool(self.VAPID_PUBLIC and self.VAPID_PRIVATE)

config = ReminderWorkerConfig()

if not config.push_configured:
    logger.warning("VAPID keys not set. Set VAPID_PUBLIC and VAPID_PRIVATE environment variables.")


def local_now() -> datetime:
    """Wall clock in the configured timezone."""
    return datetime.now(pytz.timezone(config.TIMEZONE))
