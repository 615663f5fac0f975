"""
Alert Dispatcher

Delivers an Alert over every configured channel. Each channel runs on the
dispatch pool, independently of the others and of the engine's tick, so a
slow push service never holds up the remaining tasks.

Channels:
- push: the notification (title, body, tag = task id) sent to every stored
  Web Push subscription. The payload also carries the speech text and voice
  rate/pitch/volume, which the receiving client uses to read it aloud.
- log: the host's own log, always on.
"""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, List, Optional

from prometheus_client import Counter

from .alerts import Alert
from .scheduler_config import DISPATCH_WORKERS
from .send import PushSender, fan_out, send_web_push

logger = logging.getLogger(__name__)

ALERT_COUNT = Counter(
    "reminder_alerts_total",
    "Alert deliveries by channel and outcome",
    ["channel", "outcome"]
)

Channel = Callable[[Alert], None]


class PushDeliveryError(Exception):
    """No subscription accepted the alert."""


class PushChannel:
    def __init__(self, registry, sender: PushSender = send_web_push):
        self.registry = registry
        self.sender = sender

    def __call__(self, alert: Alert) -> None:
        results = fan_out(self.registry, alert.to_payload(), self.sender)
        if not results:
            logger.debug(f"No push subscriptions, alert for task {alert.task_id} not pushed")
            return
        delivered = sum(1 for r in results if r["ok"])
        if delivered == 0:
            raise PushDeliveryError(f"all {len(results)} push deliveries failed")
        logger.info(f"📲 Pushed level {alert.level} alert for task {alert.task_id} to {delivered}/{len(results)} subscriptions")


def log_channel(alert: Alert) -> None:
    logger.info(f"🔔 [{alert.tone.value}] {alert.title}: {alert.body}")


class AlertDispatcher:
    def __init__(
        self,
        channels: Dict[str, Channel],
        executor: Optional[ThreadPoolExecutor] = None
    ):
        self.channels = channels
        self._executor = executor or ThreadPoolExecutor(
            max_workers=DISPATCH_WORKERS, thread_name_prefix="alert-dispatch"
        )

    def dispatch(self, alert: Alert) -> List[Future]:
        """Queue delivery on every channel and return without waiting."""
        return [
            self._executor.submit(self._deliver, name, channel, alert)
            for name, channel in self.channels.items()
        ]

    def _deliver(self, name: str, channel: Channel, alert: Alert) -> bool:
        try:
            channel(alert)
        except Exception as e:
            logger.error(f"❌ {name} delivery failed for task {alert.task_id} (level {alert.level}): {e}")
            ALERT_COUNT.labels(channel=name, outcome="error").inc()
            return False
        ALERT_COUNT.labels(channel=name, outcome="ok").inc()
        return True

    def shutdown(self, wait: bool = False) -> None:
        self._executor.shutdown(wait=wait)


def create_dispatcher(registry, sender: PushSender = send_web_push) -> AlertDispatcher:
    return AlertDispatcher({
        "push": PushChannel(registry, sender),
        "log": log_channel,
    })
