# models/task.py
from __future__ import annotations

from enum import Enum
from typing import List, Optional, Sequence

from sqlmodel import SQLModel, Field

from errors import ValidationError

TASKS_TABLE = "Tasks"
TASK_COLUMNS = (
    "ID",
    "ProjectID",
    "Title",
    "Description",
    "AssignedTo",
    "StartDate",
    "EndDate",
    "DueDate",
    "Status",
    "Attachments",
    "ParentTaskID",
)


class TaskStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    BLOCKED = "Blocked"


_STATUS_ALIASES = {
    "notstarted": TaskStatus.NOT_STARTED,
    "todo": TaskStatus.NOT_STARTED,
    "inprogress": TaskStatus.IN_PROGRESS,
    "completed": TaskStatus.COMPLETED,
    "complete": TaskStatus.COMPLETED,
    "done": TaskStatus.COMPLETED,
    "blocked": TaskStatus.BLOCKED,
}


def normalize_status(s) -> str:
    """Canonical spelling for a loosely typed status; unknown values are title-cased."""
    if s is None or not str(s).strip():
        return TaskStatus.NOT_STARTED.value
    key = str(s).strip().lower()
    for ch in (" ", "-", "_"):
        key = key.replace(ch, "")
    match = _STATUS_ALIASES.get(key)
    return match.value if match else str(s).strip().title()


def parse_status(s) -> str:
    """Like :func:`normalize_status`, but only the four task statuses are accepted."""
    value = normalize_status(s)
    if value not in {st.value for st in TaskStatus}:
        raise ValidationError(f"Unknown task status: {s!r}")
    return value


def status_is(value, status: TaskStatus) -> bool:
    return normalize_status(value) == status.value


def _cell(row: Sequence, i: int) -> str:
    if i >= len(row) or row[i] is None:
        return ""
    return str(row[i])


def split_attachments(raw: str) -> List[str]:
    return [a.strip() for a in (raw or "").split(",") if a.strip()]


class Task(SQLModel):
    id: str = ""
    project_id: str = ""
    title: str = ""
    description: str = ""
    assigned_to: str = ""
    start_date: str = ""
    end_date: str = ""
    due_date: str = ""
    status: str = TaskStatus.NOT_STARTED.value
    attachments: List[str] = Field(default_factory=list)
    parent_task_id: str = ""

    @property
    def is_subtask(self) -> bool:
        return bool(self.parent_task_id.strip())

    @property
    def is_completed(self) -> bool:
        return status_is(self.status, TaskStatus.COMPLETED)

    @classmethod
    def from_row(cls, row: Sequence) -> "Task":
        return cls(
            id=_cell(row, 0),
            project_id=_cell(row, 1),
            title=_cell(row, 2),
            description=_cell(row, 3),
            assigned_to=_cell(row, 4),
            start_date=_cell(row, 5),
            end_date=_cell(row, 6),
            due_date=_cell(row, 7),
            status=_cell(row, 8) or TaskStatus.NOT_STARTED.value,
            attachments=split_attachments(_cell(row, 9)),
            parent_task_id=_cell(row, 10),
        )

    def to_row(self) -> tuple:
        return (
            self.id,
            self.project_id,
            self.title,
            self.description,
            self.assigned_to,
            self.start_date,
            self.end_date,
            self.due_date,
            self.status or TaskStatus.NOT_STARTED.value,
            ", ".join(self.attachments),
            self.parent_task_id,
        )


def validate_task(data: dict) -> None:
    if not str(data.get("title") or "").strip():
        raise ValidationError("Task title is required")
    if not str(data.get("project_id") or "").strip() and not str(data.get("parent_task_id") or "").strip():
        raise ValidationError("Project ID is required for this task")


def find_task_index(rows: Sequence[Sequence], task_id: str) -> Optional[int]:
    """Position of the row whose ID cell equals ``task_id``, from a fresh read."""
    for i, r in enumerate(rows):
        if _cell(r, 0) == task_id:
            return i
    return None
