"""
Plain value types the escalation engine works on, detached from the ORM
rows in server.models.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaskSnapshot:
    id: str
    title: str
    due_time: Optional[str]  # "HH:MM"
    interval_minutes: Optional[int]
    max_steps: Optional[int]
    completed_instances: FrozenSet[str] = field(default_factory=frozenset)
    recurrence: str = "daily"
    priority: str = "normal"
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def completed_on(self, day: str) -> bool:
        return day in self.completed_instances

    @classmethod
    def from_record(cls, record) -> "TaskSnapshot":
        return cls(
            id=record.id,
            title=record.title,
            due_time=record.due_time,
            interval_minutes=record.interval_minutes,
            max_steps=record.max_steps,
            completed_instances=frozenset(record.completed_instances or ()),
            recurrence=getattr(record.recurrence, "value", record.recurrence),
            priority=getattr(record.priority, "value", record.priority),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


@dataclass(frozen=True)
class AlertState:
    """Escalation progress of one task. level 0 means not alerted yet."""
    level: int = 0
    last_alert_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "lastAlertAt": self.last_alert_at.isoformat() if self.last_alert_at else None,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "AlertState":
        last = raw.get("lastAlertAt")
        return cls(
            level=int(raw.get("level") or 0),
            last_alert_at=datetime.fromisoformat(last) if last else None,
        )


def decode_alert_state(blob: Optional[Mapping[str, Any]]) -> Dict[str, AlertState]:
    """Turn the stored aggregate into typed entries, dropping unreadable ones."""
    state = {}
    for task_id, raw in (blob or {}).items():
        try:
            state[task_id] = AlertState.from_dict(raw)
        except (AttributeError, TypeError, ValueError) as e:
            logger.warning(f"Dropping unreadable alert state for task {task_id}: {e}")
    return state


def encode_alert_state(state: Mapping[str, AlertState]) -> Dict[str, Dict[str, Any]]:
    return {task_id: entry.to_dict() for task_id, entry in state.items()}
