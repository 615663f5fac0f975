import logging
import signal
import threading

from server.database import init_database
from .scheduler import start_scheduler, stop_scheduler

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def start_worker():
    """
    Create tables, start the scheduler and block until SIGINT/SIGTERM.
    """
    init_database()
    stop_event = threading.Event()

    def _handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        stop_event.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    start_scheduler()
    try:
        stop_event.wait()
    finally:
        stop_scheduler()


if __name__ == "__main__":
    start_worker()
