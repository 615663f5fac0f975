import uuid
import logging
from dataclasses import replace
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from server.schemas import (
    TaskCreate, TaskResponse, TaskUpdate, ToggleCompletion, EscalationPolicy
)
from server.dependencies import get_task_store
from reminder_worker.config import local_now
from reminder_worker.models import TaskSnapshot
from reminder_worker.stores import TaskStore

router = APIRouter()
logger = logging.getLogger(__name__)

def _today() -> str:
    return local_now().date().isoformat()

def _get_task_or_404(store: TaskStore, task_id: str) -> TaskSnapshot:
    task = store.get(task_id)
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task

def to_response(task: TaskSnapshot, today: str) -> TaskResponse:
    escalation = None
    if task.interval_minutes and task.max_steps:
        escalation = EscalationPolicy(
            interval_minutes=task.interval_minutes,
            max_steps=task.max_steps
        )
    return TaskResponse(
        id=task.id,
        title=task.title,
        due_time=task.due_time,
        recurrence=task.recurrence,
        priority=task.priority,
        escalation=escalation,
        completed_instances=sorted(task.completed_instances),
        completed_today=task.completed_on(today),
        created_at=task.created_at,
        updated_at=task.updated_at,
    )

# =========================================================
# TASK ENDPOINTS
# =========================================================
@router.get("/", response_model=List[TaskResponse])
def get_tasks(store: TaskStore = Depends(get_task_store)):
    today = _today()
    return [to_response(task, today) for task in store.get_all()]

@router.post("/", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(task_data: TaskCreate, store: TaskStore = Depends(get_task_store)):
    task = store.upsert(TaskSnapshot(
        id=str(uuid.uuid4()),
        title=task_data.title,
        due_time=task_data.due_time,
        interval_minutes=task_data.escalation.interval_minutes,
        max_steps=task_data.escalation.max_steps,
        recurrence=task_data.recurrence.value,
        priority=task_data.priority.value,
    ))
    logger.info(f"Created task {task.id}: {task.title} at {task.due_time}")
    return to_response(task, _today())

@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task_id: str, store: TaskStore = Depends(get_task_store)):
    return to_response(_get_task_or_404(store, task_id), _today())

@router.put("/{task_id}", response_model=TaskResponse)
def update_task(task_id: str, task_data: TaskUpdate, store: TaskStore = Depends(get_task_store)):
    task = _get_task_or_404(store, task_id)
    update_data = {k: v for k, v in task_data.model_dump(exclude_unset=True).items() if v is not None}

    escalation = update_data.pop("escalation", None)
    if escalation:
        update_data["interval_minutes"] = escalation["interval_minutes"]
        update_data["max_steps"] = escalation["max_steps"]
    for key in ("recurrence", "priority"):
        if key in update_data:
            update_data[key] = update_data[key].value

    return to_response(store.upsert(replace(task, **update_data)), _today())

@router.delete("/{task_id}")
def delete_task(task_id: str, store: TaskStore = Depends(get_task_store)):
    if not store.delete(task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return {"message": "Task deleted"}

@router.post("/{task_id}/toggle", response_model=TaskResponse)
def toggle_task(
    task_id: str,
    toggle: Optional[ToggleCompletion] = None,
    store: TaskStore = Depends(get_task_store)
):
    """
    Flip completion for a day (today by default). Alert state is not touched
    here; the next engine tick clears it for tasks done today.
    """
    day = (toggle.date if toggle and toggle.date else None) or _today()
    task = store.toggle_completion(task_id, day)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    logger.info(f"Task {task_id} completion toggled for {day}")
    return to_response(task, _today())
