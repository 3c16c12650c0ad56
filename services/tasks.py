# services/tasks.py
"""
Task mutations and the reconciliation pipeline they trigger.

Every write follows the same order:

    persist task row -> subtask cascade (if any) -> project derivation -> emails

Each stage starts from a fresh read of the store, so a cascaded parent
completion is already visible when the project is re-derived. Store errors
abort the chain and reach the caller even when the task row itself was already
written. Email failures are only logged.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from db import TabularStore
from errors import NotFoundError
from models.task import (
    TASKS_TABLE, Task, TaskStatus, find_task_index, parse_status, split_attachments, validate_task,
)
from services import new_record_id
from services.notifications import Notifier, assignment_message, safe_send
from services.projects import get_project, notify_project_completed
from utils.cascade import resolve_subtask_cascade, should_cascade
from utils.progress import recalc_project_status

logger = logging.getLogger(__name__)

_TEXT_FIELDS = ("project_id", "title", "description", "assigned_to", "start_date", "end_date",
                "due_date", "parent_task_id")


def _attachments(value) -> List[str]:
    if isinstance(value, str):
        return split_attachments(value)
    return [str(v).strip() for v in (value or []) if str(v).strip()]


def list_tasks(store: TabularStore, project_id: Optional[str] = None) -> List[Task]:
    tasks = [Task.from_row(r) for r in store.read_rows(TASKS_TABLE)]
    if project_id:
        tasks = [t for t in tasks if t.project_id == project_id]
    return tasks


def get_task(store: TabularStore, task_id: str) -> Optional[Task]:
    rows = store.read_rows(TASKS_TABLE)
    index = find_task_index(rows, task_id)
    return Task.from_row(rows[index]) if index is not None else None


def _project_name(store: TabularStore, project_id: str) -> str:
    project = get_project(store, project_id)
    return project.name if project else "Unknown Project"


def _send_assignment(store, notifier, task: Task, *, reassigned: bool = False, new_task: bool = False) -> None:
    if notifier is None or not task.assigned_to:
        return
    subject, body = assignment_message(
        task.title, _project_name(store, task.project_id),
        description=task.description, due_date=task.due_date, status=task.status,
        attachments=task.attachments, reassigned=reassigned, new_task=new_task,
    )
    safe_send(notifier, task.assigned_to, subject, body)


def create_task(store: TabularStore, data: dict, notifier: Optional[Notifier] = None) -> Task:
    validate_task(data)
    fields = {k: str(data.get(k) or "").strip() for k in _TEXT_FIELDS}

    if fields["parent_task_id"]:
        parent = get_task(store, fields["parent_task_id"])
        if parent is None:
            raise NotFoundError("Task", fields["parent_task_id"])
        # subtasks live in their parent's project
        fields["project_id"] = parent.project_id

    task = Task(
        id=new_record_id(),
        status=parse_status(data.get("status")),
        attachments=_attachments(data.get("attachments")),
        **fields,
    )
    store.append_row(TASKS_TABLE, task.to_row())
    logger.info("Created task %s in project %s", task.id, task.project_id)

    result = recalc_project_status(store, task.project_id)
    notify_project_completed(notifier, result)
    _send_assignment(store, notifier, task, new_task=True)
    return task


def _merge(existing: Task, changes: dict) -> Task:
    update = {k: str(changes[k]).strip() for k in _TEXT_FIELDS if changes.get(k) is not None}
    if changes.get("status") is not None:
        update["status"] = parse_status(changes["status"])
    if changes.get("attachments") is not None:
        update["attachments"] = _attachments(changes["attachments"])
    return existing.model_copy(update=update)


def update_task(store: TabularStore, task_id: str, changes: dict, notifier: Optional[Notifier] = None) -> Task:
    rows = store.read_rows(TASKS_TABLE)
    index = find_task_index(rows, task_id)
    if index is None:
        raise NotFoundError("Task", task_id)

    existing = Task.from_row(rows[index])
    merged = _merge(existing, changes)
    store.update_row_at(TASKS_TABLE, index, merged.to_row())

    if should_cascade(merged):
        resolve_subtask_cascade(store, merged)

    result = recalc_project_status(store, merged.project_id)
    if existing.project_id and existing.project_id != merged.project_id:
        # moved out of another project
        notify_project_completed(notifier, recalc_project_status(store, existing.project_id))

    notify_project_completed(notifier, result)

    if merged.assigned_to and merged.assigned_to != existing.assigned_to:
        _send_assignment(store, notifier, merged, reassigned=bool(existing.assigned_to))
    return merged


def complete_task(store: TabularStore, task_id: str, notifier: Optional[Notifier] = None) -> Task:
    return update_task(store, task_id, {"status": TaskStatus.COMPLETED.value}, notifier)


def delete_task(store: TabularStore, task_id: str, notifier: Optional[Notifier] = None) -> None:
    rows = store.read_rows(TASKS_TABLE)
    index = find_task_index(rows, task_id)
    if index is None:
        raise NotFoundError("Task", task_id)

    project_id = Task.from_row(rows[index]).project_id
    store.delete_row_at(TASKS_TABLE, index)
    logger.info("Deleted task %s", task_id)

    if project_id:
        notify_project_completed(notifier, recalc_project_status(store, project_id))
