"""
Escalation Engine

On every tick, compares each incomplete task's due time with the clock and
decides whether to alert again and how insistently. Each task climbs its own
ladder of alert levels (1..max_steps), one step per elapsed interval, and
stays on the top step, re-alerting, until it is marked done for the day.

evaluate() is the pure decision procedure; EscalationEngine wires it to the
stores and the dispatcher.
"""
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .alerts import Alert, build_alert
from .models import AlertState, TaskSnapshot
from .stores import StoreUnavailable

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    alerts: List[Alert] = field(default_factory=list)
    alert_state: Dict[str, AlertState] = field(default_factory=dict)
    changed: bool = False
    cleared: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def parse_due_time(value) -> Optional[time]:
    """'HH:MM' -> time, or None when the value is not a valid time of day."""
    try:
        hours, minutes = value.split(":")
        return time(int(hours), int(minutes))
    except (AttributeError, TypeError, ValueError):
        return None


def _policy(task: TaskSnapshot) -> Optional[Tuple[time, int, int]]:
    due = parse_due_time(task.due_time)
    interval = task.interval_minutes
    max_steps = task.max_steps
    if due is None or not interval or not max_steps or interval <= 0 or max_steps <= 0:
        return None
    return due, interval, max_steps


def is_due(due: time, now: datetime) -> bool:
    # Minute resolution, matching how due times are entered
    return (now.hour, now.minute) >= (due.hour, due.minute)


def carried_over(prev: AlertState, now: datetime) -> AlertState:
    """Escalation from an earlier day starts over from level 0."""
    if prev.last_alert_at is not None and prev.last_alert_at.date() != now.date():
        return AlertState()
    return prev


def should_escalate(prev: AlertState, now: datetime, interval_minutes: int) -> bool:
    if prev.level == 0 or prev.last_alert_at is None:
        return True
    elapsed_minutes = (now - prev.last_alert_at).total_seconds() / 60
    return elapsed_minutes >= interval_minutes


def evaluate(
    tasks: Iterable[TaskSnapshot],
    alert_state: Mapping[str, AlertState],
    now: datetime
) -> TickResult:
    """Decide this tick's alerts and the alert state that follows from them."""
    result = TickResult(alert_state=dict(alert_state))
    state = result.alert_state
    today = now.date().isoformat()
    tasks = list(tasks)

    for task in tasks:
        if task.completed_on(today):
            if task.id in state:
                del state[task.id]
                result.cleared.append(task.id)
                result.changed = True
            continue

        policy = _policy(task)
        if policy is None:
            result.skipped.append(task.id)
            continue
        due, interval_minutes, max_steps = policy

        if not is_due(due, now):
            continue

        prev = carried_over(state.get(task.id, AlertState()), now)
        if not should_escalate(prev, now, interval_minutes):
            continue

        next_level = min(prev.level + 1, max_steps)
        result.alerts.append(build_alert(task, next_level))
        state[task.id] = AlertState(level=next_level, last_alert_at=now)
        result.changed = True

    # Entries of deleted tasks
    known = {task.id for task in tasks}
    for task_id in [tid for tid in state if tid not in known]:
        del state[task_id]
        result.cleared.append(task_id)
        result.changed = True

    return result


class EscalationEngine:
    """
    Runs one tick at a time: read both stores, evaluate, hand alerts to the
    dispatcher and write the alert-state aggregate back in a single save.
    """

    def __init__(
        self,
        task_store,
        state_store,
        dispatcher,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.task_store = task_store
        self.state_store = state_store
        self.dispatcher = dispatcher
        self.clock = clock
        self._running = threading.Lock()

    def run_tick(self, now: Optional[datetime] = None) -> Optional[TickResult]:
        """Returns None when the tick was skipped (overlap or store down)."""
        if not self._running.acquire(blocking=False):
            logger.warning("Previous tick still running, skipping this one")
            return None
        try:
            return self._tick(now or self.clock())
        finally:
            self._running.release()

    def _tick(self, now: datetime) -> Optional[TickResult]:
        try:
            tasks = self.task_store.get_all()
            alert_state = self.state_store.load()
        except StoreUnavailable as e:
            logger.warning(f"⚠️ Store unavailable, skipping tick: {e}")
            return None

        result = evaluate(tasks, alert_state, now)

        for task_id in result.skipped:
            logger.warning(f"Skipping task {task_id}: missing or invalid due time / escalation policy")

        for alert in result.alerts:
            logger.info(f"Triggering alert level {alert.level} for {alert.task_title}")
            try:
                self.dispatcher.dispatch(alert)
            except Exception as e:
                logger.error(f"❌ Dispatch failed for task {alert.task_id}: {e}")

        if result.changed:
            try:
                self.state_store.save(result.alert_state)
            except StoreUnavailable as e:
                logger.warning(f"⚠️ Could not persist alert state, will retry next tick: {e}")

        logger.info(
            f"Tick {now.strftime('%H:%M')}: {len(tasks)} tasks, "
            f"{len(result.alerts)} alerts, {len(result.cleared)} cleared"
        )
        return result
