# tests/conftest.py

from __future__ import annotations

import pytest

from models.project import PROJECTS_TABLE
from models.task import TASKS_TABLE

from .fakes import InMemoryStore, RecordingNotifier, project_row


@pytest.fixture()
def store() -> InMemoryStore:
    """One empty project ``p1`` (owner@x.com), no tasks."""
    return InMemoryStore({TASKS_TABLE: [], PROJECTS_TABLE: [project_row()]})


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
