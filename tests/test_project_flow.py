# tests/test_project_flow.py

from __future__ import annotations

import pytest

from errors import NotFoundError, ValidationError
from models.project import PROJECTS_TABLE
from models.task import TASKS_TABLE
from services.projects import (
    create_project, delete_project, get_project, list_projects, notify_project_completed, update_project,
)
from utils.progress import RecalcResult

from .fakes import InMemoryStore, RecordingNotifier, project_row, project_state, task_row


def test_create_project_ignores_supplied_status_and_progress():
    store = InMemoryStore({PROJECTS_TABLE: []})
    p = create_project(store, {"name": "Hermes", "start_date": "2026-10-01",
                               "status": "Completed", "progress": 90})
    stored = get_project(store, p.id)
    assert (stored.status, stored.progress) == ("Not Started", 0)
    assert stored.name == "Hermes"


def test_create_project_validation():
    store = InMemoryStore({PROJECTS_TABLE: []})
    with pytest.raises(ValidationError):
        create_project(store, {"start_date": "2026-10-01"})
    with pytest.raises(ValidationError):
        create_project(store, {"name": "Hermes"})


def test_update_project_cannot_set_derived_fields():
    store = InMemoryStore({
        TASKS_TABLE: [task_row("t1", status="Completed"), task_row("t2")],
        PROJECTS_TABLE: [project_row()],
    })
    p = update_project(store, "p1", {"name": "Apollo 2", "status": "Completed", "progress": 100})
    assert (p.name, p.status, p.progress) == ("Apollo 2", "In Progress", 50)
    stored = project_state(store)
    assert (stored.name, stored.status, stored.progress) == ("Apollo 2", "In Progress", 50)


def test_update_missing_project():
    store = InMemoryStore({PROJECTS_TABLE: []})
    with pytest.raises(NotFoundError):
        update_project(store, "ghost", {"name": "x"})


def test_delete_project_keeps_tasks():
    store = InMemoryStore({
        TASKS_TABLE: [task_row("t1")],
        PROJECTS_TABLE: [project_row(), project_row(id="p2", name="Gemini")],
    })
    delete_project(store, "p1")
    assert [p.id for p in list_projects(store)] == ["p2"]
    assert len(store.read_rows(TASKS_TABLE)) == 1


def test_notify_only_on_completion_edge():
    notifier = RecordingNotifier()
    done = RecalcResult(True, "Apollo", "owner@x.com", "Completed", 100)
    again = RecalcResult(False, "Apollo", "owner@x.com", "Completed", 100)

    assert notify_project_completed(notifier, done) is True
    assert notify_project_completed(notifier, again) is False
    assert notify_project_completed(notifier, None) is False
    assert len(notifier.sent) == 1
    assert 'project "Apollo"' in notifier.sent[0].body


def test_notify_failure_is_swallowed():
    notifier = RecordingNotifier(failing={"owner@x.com"})
    done = RecalcResult(True, "Apollo", "owner@x.com", "Completed", 100)
    assert notify_project_completed(notifier, done) is False
