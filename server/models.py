from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, JSON, Enum as SQLEnum
from server.database import Base
from server.enums import Recurrence, TaskPriority

# =========================================================
# DATABASE MODELS
# =========================================================
class Task(Base):
    __tablename__ = "tasks"
    id = Column(String(64), primary_key=True)
    title = Column(String(200), nullable=False)
    due_time = Column(String(5), index=True)  # "HH:MM", 24h local clock
    recurrence = Column(SQLEnum(Recurrence), nullable=False, default=Recurrence.daily)
    priority = Column(SQLEnum(TaskPriority), nullable=False, default=TaskPriority.normal)
    interval_minutes = Column(Integer)
    max_steps = Column(Integer)
    completed_instances = Column(JSON, default=list)  # ["YYYY-MM-DD", ...]
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

class AppState(Base):
    """Opaque key/value documents, e.g. the "alertState" aggregate."""
    __tablename__ = "app_state"
    key = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

class PushSubscriptionRecord(Base):
    __tablename__ = "push_subscriptions"
    id = Column(Integer, primary_key=True)
    endpoint = Column(String(1024), unique=True, nullable=False)
    subscription = Column(JSON, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

class UserRecord(Base):
    """Synced snapshot of one browser's tasks, keyed by its push endpoint."""
    __tablename__ = "user_records"
    key = Column(String(1500), primary_key=True)  # "user:<base64 endpoint>"
    endpoint = Column(String(1024), index=True, nullable=False)
    subscription = Column(JSON, nullable=False)
    tasks = Column(JSON, default=list)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
