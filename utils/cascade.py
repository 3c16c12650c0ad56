# utils/cascade.py
from __future__ import annotations

import logging
from typing import Optional

from db import TabularStore
from models.task import TASKS_TABLE, Task, TaskStatus, find_task_index

logger = logging.getLogger(__name__)


def should_cascade(task: Task) -> bool:
    return task.is_subtask and task.is_completed


def resolve_subtask_cascade(store: TabularStore, updated_task: Task) -> Optional[Task]:
    """
    Complete the parent of ``updated_task`` once every sibling subtask is Completed.

    Run after the subtask row is persisted and before project derivation, so the
    derivation pass sees the parent's new status. Returns the parent as written,
    or None when nothing changed (not a completed subtask, parent gone, siblings
    still open, parent already Completed). One level only.

    A parent with no subtasks is never completed here; the cascade only fires
    from a subtask update.
    """
    if not should_cascade(updated_task):
        return None

    parent_id = updated_task.parent_task_id
    rows = store.read_rows(TASKS_TABLE)
    parent_index = find_task_index(rows, parent_id)
    if parent_index is None:
        logger.info("Cascade: parent %s of task %s not found", parent_id, updated_task.id)
        return None

    parent = Task.from_row(rows[parent_index])
    if parent.is_completed:
        return None

    siblings = [t for t in (Task.from_row(r) for r in rows) if t.parent_task_id == parent_id]
    if not siblings or not all(t.is_completed for t in siblings):
        return None

    completed_parent = parent.model_copy(update={"status": TaskStatus.COMPLETED.value})
    store.update_row_at(TASKS_TABLE, parent_index, completed_parent.to_row())
    logger.info(
        'Parent task "%s" auto-completed (all %s subtasks completed)',
        parent.title, len(siblings),
    )
    return completed_parent
