# utils/progress.py
"""
Project status/progress derivation.

A project's ``status`` and ``progress`` are never set by callers. They are
recomputed here from the project's main tasks (subtasks are ignored) with a
read -> aggregate -> write cycle against the tabular store:

1. read every task row, keep the project's main tasks
2. count total / completed / in progress
3. read the projects table, locate the project's row *now*
4. replace status and progress in that row and write the full row back

Known gap: the store has no locking or versioning. Two mutations in the same
project can read the same snapshot and the later write wins.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from db import TabularStore
from models.project import PROJECTS_TABLE, Project, find_project_index
from models.task import TASKS_TABLE, Task, TaskStatus, status_is

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecalcResult:
    just_completed: bool
    project_name: str
    owner_contact: str
    status: str
    progress: int


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def count_main_tasks(tasks: Iterable[Task], project_id: str) -> Tuple[int, int, int]:
    """(total, completed, in_progress) over the project's main tasks."""
    total = completed = in_progress = 0
    for t in tasks:
        if t.project_id != project_id or t.is_subtask:
            continue
        total += 1
        if status_is(t.status, TaskStatus.COMPLETED):
            completed += 1
        elif status_is(t.status, TaskStatus.IN_PROGRESS):
            in_progress += 1
    return total, completed, in_progress


def derive_status(total: int, completed: int, in_progress: int) -> Tuple[str, int]:
    """Status and progress for the given counts."""
    if total == 0:
        return TaskStatus.NOT_STARTED.value, 0
    if completed == total:
        return TaskStatus.COMPLETED.value, 100
    progress = round_half_up(100 * completed / total)
    if completed > 0 or in_progress > 0:
        return TaskStatus.IN_PROGRESS.value, progress
    # only Not Started / Blocked / unknown left
    return TaskStatus.NOT_STARTED.value, progress


def recalculate(store: TabularStore, project_id: str) -> Optional[RecalcResult]:
    """Recompute and persist a project's status/progress.

    Returns None when the project does not exist. Store errors propagate.
    """
    tasks = [Task.from_row(r) for r in store.read_rows(TASKS_TABLE)]
    total, completed, in_progress = count_main_tasks(tasks, project_id)
    status, progress = derive_status(total, completed, in_progress)

    project_rows = store.read_rows(PROJECTS_TABLE)
    index = find_project_index(project_rows, project_id)
    if index is None:
        logger.info("recalculate: project %s not found, nothing to update", project_id)
        return None

    project = Project.from_row(project_rows[index])
    was_completed = status_is(project.status, TaskStatus.COMPLETED)
    just_completed = status == TaskStatus.COMPLETED.value and not was_completed

    updated = project.model_copy(update={"status": status, "progress": progress})
    store.update_row_at(PROJECTS_TABLE, index, updated.to_row())

    logger.info(
        "Project %s: %s/%s main tasks completed -> %s (%s%%)%s",
        project_id, completed, total, status, progress,
        " [just completed]" if just_completed else "",
    )
    return RecalcResult(
        just_completed=just_completed,
        project_name=project.name,
        owner_contact=project.owner,
        status=status,
        progress=progress,
    )


recalc_project_status = recalculate
