import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from server.enums import Recurrence, TaskPriority
from server.models import AppState, Task
from .models import AlertState, TaskSnapshot, decode_alert_state, encode_alert_state
from .scheduler_config import ALERT_STATE_KEY

logger = logging.getLogger(__name__)


class StoreUnavailable(Exception):
    """The backing database could not be read or written."""


@contextmanager
def session_scope(session_factory):
    db = session_factory()
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StoreUnavailable(str(e)) from e
    finally:
        db.close()


def toggle_instance(instances, day: str) -> List[str]:
    """Flip membership of `day` in a list of completion dates."""
    current = list(dict.fromkeys(instances or []))
    if day in current:
        return [d for d in current if d != day]
    return current + [day]


class TaskStore:
    def __init__(self, session_factory):
        self._session_factory = session_factory

    def get_all(self) -> List[TaskSnapshot]:
        with session_scope(self._session_factory) as db:
            rows = db.query(Task).order_by(Task.due_time).all()
            return [TaskSnapshot.from_record(row) for row in rows]

    def get(self, task_id: str) -> Optional[TaskSnapshot]:
        with session_scope(self._session_factory) as db:
            row = db.query(Task).filter(Task.id == task_id).first()
            return TaskSnapshot.from_record(row) if row else None

    def upsert(self, task: TaskSnapshot) -> TaskSnapshot:
        with session_scope(self._session_factory) as db:
            row = db.query(Task).filter(Task.id == task.id).first()
            if row is None:
                row = Task(id=task.id)
                db.add(row)
            row.title = task.title
            row.due_time = task.due_time
            row.interval_minutes = task.interval_minutes
            row.max_steps = task.max_steps
            row.recurrence = Recurrence(task.recurrence)
            row.priority = TaskPriority(task.priority)
            row.completed_instances = sorted(task.completed_instances)
            row.updated_at = datetime.utcnow()
            db.flush()
            return TaskSnapshot.from_record(row)

    def delete(self, task_id: str) -> bool:
        with session_scope(self._session_factory) as db:
            return db.query(Task).filter(Task.id == task_id).delete() > 0

    def toggle_completion(self, task_id: str, day: str) -> Optional[TaskSnapshot]:
        """
        Mark or unmark `day` as done. Alert state is left alone; the next
        engine tick clears entries of tasks it sees completed.
        """
        with session_scope(self._session_factory) as db:
            row = db.query(Task).filter(Task.id == task_id).first()
            if row is None:
                return None
            row.completed_instances = toggle_instance(row.completed_instances, day)
            row.updated_at = datetime.utcnow()
            db.flush()
            return TaskSnapshot.from_record(row)


class AlertStateStore:
    """Key/value document store; the whole alert-state aggregate is one value."""

    def __init__(self, session_factory, key: str = ALERT_STATE_KEY):
        self._session_factory = session_factory
        self.key = key

    def get(self, key: str) -> Optional[Any]:
        with session_scope(self._session_factory) as db:
            row = db.query(AppState).filter(AppState.key == key).first()
            return row.value if row else None

    def set(self, key: str, value: Any) -> None:
        with session_scope(self._session_factory) as db:
            row = db.query(AppState).filter(AppState.key == key).first()
            if row is None:
                db.add(AppState(key=key, value=value))
            else:
                row.value = value
                row.updated_at = datetime.utcnow()

    def load(self) -> Dict[str, AlertState]:
        return decode_alert_state(self.get(self.key))

    def save(self, state: Dict[str, AlertState]) -> None:
        self.set(self.key, encode_alert_state(state))
