import re
from typing import Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from server.enums import Recurrence, TaskPriority

DUE_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

# =========================================================
# PYDANTIC SCHEMAS
# =========================================================

# Task Schemas
class EscalationPolicy(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    interval_minutes: int = Field(5, gt=0, alias="intervalMinutes")
    max_steps: int = Field(3, gt=0, alias="maxSteps")

class TaskCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1, max_length=200)
    due_time: str = Field(..., alias="dueTime")
    recurrence: Recurrence = Recurrence.daily
    priority: TaskPriority = TaskPriority.normal
    escalation: EscalationPolicy = Field(default_factory=EscalationPolicy)

    @field_validator("due_time")
    @classmethod
    def check_due_time(cls, v):
        if not DUE_TIME_PATTERN.match(v):
            raise ValueError("dueTime must be HH:MM (24h)")
        return v

class TaskUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    due_time: Optional[str] = Field(None, alias="dueTime")
    recurrence: Optional[Recurrence] = None
    priority: Optional[TaskPriority] = None
    escalation: Optional[EscalationPolicy] = None

    @field_validator("due_time")
    @classmethod
    def check_due_time(cls, v):
        if v is not None and not DUE_TIME_PATTERN.match(v):
            raise ValueError("dueTime must be HH:MM (24h)")
        return v

class ToggleCompletion(BaseModel):
    date: Optional[str] = Field(None, pattern=DATE_PATTERN)

class TaskResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    due_time: Optional[str] = Field(None, alias="dueTime")
    recurrence: Recurrence
    priority: TaskPriority
    escalation: Optional[EscalationPolicy] = None
    completed_instances: List[str] = Field(default_factory=list, alias="completedInstances")
    completed_today: bool = Field(False, alias="completedToday")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

class AlertStateEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    level: int
    last_alert_at: Optional[str] = Field(None, alias="lastAlertAt")

# Push Schemas
class PushSubscriptionKeys(BaseModel):
    p256dh: str
    auth: str

class PushSubscription(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    endpoint: Optional[str] = None
    expiration_time: Optional[float] = Field(None, alias="expirationTime")
    keys: Optional[PushSubscriptionKeys] = None

class PushPayload(BaseModel):
    """The only shape a push message may take on the wire."""
    title: str
    body: str = ""
    tag: Optional[str] = None
    data: Optional[Dict] = None
    vibrate: Optional[List[int]] = None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)

class SubscribeRequest(BaseModel):
    subscription: Optional[PushSubscription] = None

class PushAllRequest(BaseModel):
    title: str = "Reminder"
    body: str = "You have a task due."

class PushResult(BaseModel):
    endpoint: str
    ok: bool
    error: Optional[str] = None

class PushAllResponse(BaseModel):
    results: List[PushResult]

class PushTestRequest(BaseModel):
    subscription: Optional[PushSubscription] = None
    title: Optional[str] = None
    body: Optional[str] = None

# Sync Schemas
class SyncedTask(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    title: str
    due_time: Optional[str] = Field(None, alias="dueTime")
    completed_today: bool = Field(False, alias="completedToday")

class SyncRequest(BaseModel):
    subscription: Optional[Dict] = None
    tasks: List[SyncedTask] = Field(default_factory=list)

class CronResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    notifications_sent: int = Field(..., alias="notificationsSent")
