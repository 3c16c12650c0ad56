# services/projects.py
from __future__ import annotations

import logging
from typing import List, Optional

from db import TabularStore
from errors import NotFoundError
from models.project import (
    EDITABLE_PROJECT_FIELDS, PROJECTS_TABLE, Project, find_project_index, validate_project,
)
from models.task import TaskStatus
from services import new_record_id
from services.notifications import Notifier, completion_message, safe_send
from utils.progress import RecalcResult, recalc_project_status

logger = logging.getLogger(__name__)


def list_projects(store: TabularStore) -> List[Project]:
    return [Project.from_row(r) for r in store.read_rows(PROJECTS_TABLE)]


def get_project(store: TabularStore, project_id: str) -> Optional[Project]:
    rows = store.read_rows(PROJECTS_TABLE)
    index = find_project_index(rows, project_id)
    return Project.from_row(rows[index]) if index is not None else None


def create_project(store: TabularStore, data: dict) -> Project:
    """Append a new project. Status/progress start at Not Started / 0 whatever the caller sent."""
    validate_project(data)
    fields = {k: str(data.get(k) or "").strip() for k in EDITABLE_PROJECT_FIELDS}
    project = Project(id=new_record_id(), status=TaskStatus.NOT_STARTED.value, progress=0, **fields)
    store.append_row(PROJECTS_TABLE, project.to_row())
    logger.info("Created project %s (%s)", project.id, project.name)
    return project


def update_project(store: TabularStore, project_id: str, changes: dict) -> Project:
    """Merge editable fields, keep the stored status/progress, then re-derive them."""
    rows = store.read_rows(PROJECTS_TABLE)
    index = find_project_index(rows, project_id)
    if index is None:
        raise NotFoundError("Project", project_id)

    existing = Project.from_row(rows[index])
    ignored = [k for k in ("status", "progress") if k in changes]
    if ignored:
        logger.debug("Ignoring derived field(s) %s on project %s", ignored, project_id)

    update = {k: str(changes[k]) for k in EDITABLE_PROJECT_FIELDS if changes.get(k) is not None}
    merged = existing.model_copy(update=update)
    store.update_row_at(PROJECTS_TABLE, index, merged.to_row())

    result = recalc_project_status(store, project_id)
    if result is not None:
        merged = merged.model_copy(update={"status": result.status, "progress": result.progress})
    return merged


def delete_project(store: TabularStore, project_id: str) -> None:
    """Physically remove the project row. Its tasks are left in place."""
    rows = store.read_rows(PROJECTS_TABLE)
    index = find_project_index(rows, project_id)
    if index is None:
        raise NotFoundError("Project", project_id)
    store.delete_row_at(PROJECTS_TABLE, index)
    logger.info("Deleted project %s", project_id)


def notify_project_completed(notifier: Optional[Notifier], result: Optional[RecalcResult]) -> bool:
    """Owner email for the Completed edge. No-op unless ``result.just_completed``."""
    if notifier is None or result is None or not result.just_completed or not result.owner_contact:
        return False
    subject, body = completion_message(result.project_name)
    sent = safe_send(notifier, result.owner_contact, subject, body)
    if sent:
        logger.info("Completion email sent to %s for project %r", result.owner_contact, result.project_name)
    return sent
