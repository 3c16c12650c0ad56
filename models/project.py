# models/project.py
from __future__ import annotations

from typing import Optional, Sequence

from sqlmodel import SQLModel, Field

from errors import ValidationError
from models.task import TaskStatus, _cell

PROJECTS_TABLE = "Projects"
PROJECT_COLUMNS = (
    "ID",
    "Name",
    "Owner",
    "Description",
    "StartDate",
    "EndDate",
    "Status",
    "Progress",
)

# status and progress are derived from tasks; everything else is caller-editable
EDITABLE_PROJECT_FIELDS = ("name", "owner", "description", "start_date", "end_date")


def _progress(raw: str) -> int:
    try:
        return int(round(float(raw)))
    except (TypeError, ValueError):
        return 0


class Project(SQLModel):
    id: str = ""
    name: str = ""
    owner: str = ""
    description: str = ""
    start_date: str = ""
    end_date: str = ""
    status: str = TaskStatus.NOT_STARTED.value
    progress: int = Field(default=0, ge=0, le=100)

    @classmethod
    def from_row(cls, row: Sequence) -> "Project":
        return cls(
            id=_cell(row, 0),
            name=_cell(row, 1),
            owner=_cell(row, 2),
            description=_cell(row, 3),
            start_date=_cell(row, 4),
            end_date=_cell(row, 5),
            status=_cell(row, 6) or TaskStatus.NOT_STARTED.value,
            progress=max(0, min(100, _progress(_cell(row, 7)))),
        )

    def to_row(self) -> tuple:
        return (
            self.id,
            self.name,
            self.owner,
            self.description,
            self.start_date,
            self.end_date,
            self.status or TaskStatus.NOT_STARTED.value,
            str(self.progress),
        )


def validate_project(data: dict) -> None:
    if not str(data.get("name") or "").strip():
        raise ValidationError("Project name is required")
    if not str(data.get("start_date") or "").strip():
        raise ValidationError("Project start date is required")


def find_project_index(rows: Sequence[Sequence], project_id: str) -> Optional[int]:
    for i, r in enumerate(rows):
        if _cell(r, 0) == project_id:
            return i
    return None
