from datetime import date

import pytest

from errors import MalformedDateError, ValidationError
from models.project import Project
from models.task import Task, normalize_status, parse_status
from utils.dates import days_until, parse_date, parse_date_strict
from utils.progress import count_main_tasks, derive_status, round_half_up


def test_normalize_status():
    assert normalize_status("completed") == "Completed"
    assert normalize_status(" IN-PROGRESS ") == "In Progress"
    assert normalize_status("todo") == "Not Started"
    assert normalize_status("") == "Not Started"
    assert normalize_status("on hold") == "On Hold"


def test_parse_status_accepts_only_task_statuses():
    assert parse_status("done") == "Completed"
    assert parse_status(None) == "Not Started"
    with pytest.raises(ValidationError):
        parse_status("on hold")


def test_task_row_roundtrip_with_ragged_row():
    t = Task.from_row(["t1", "p1", "Title"])
    assert (t.id, t.project_id, t.title, t.status, t.parent_task_id) == ("t1", "p1", "Title", "Not Started", "")
    assert not t.is_subtask
    assert len(t.to_row()) == 11


def test_task_attachments_split_and_join():
    row = ["t1", "p1", "T", "", "", "", "", "", "Completed", "a.pdf , b.png,", "parent"]
    t = Task.from_row(row)
    assert t.attachments == ["a.pdf", "b.png"]
    assert t.is_subtask and t.is_completed
    assert t.to_row()[9] == "a.pdf, b.png"


def test_project_progress_cell_is_clamped():
    p = Project.from_row(["p1", "Apollo", "o@x.com", "", "", "", "In Progress", "140"])
    assert p.progress == 100
    assert Project.from_row(["p1"]).progress == 0


def test_parse_date():
    assert parse_date("2026-10-21") == date(2026, 10, 21)
    assert parse_date("2026-10-21T15:30:00Z") == date(2026, 10, 21)
    assert parse_date("") is None
    assert parse_date("garbage") is None
    with pytest.raises(MalformedDateError):
        parse_date_strict("garbage")


def test_days_until():
    assert days_until(date(2026, 10, 21), date(2026, 10, 19)) == 2
    assert days_until(date(2026, 10, 17), date(2026, 10, 19)) == -2


def test_derive_status():
    assert derive_status(0, 0, 0) == ("Not Started", 0)
    assert derive_status(2, 2, 0) == ("Completed", 100)
    assert derive_status(3, 1, 0) == ("In Progress", 33)
    assert derive_status(3, 2, 0) == ("In Progress", 67)
    assert derive_status(2, 0, 1) == ("In Progress", 0)


def test_round_half_up():
    assert round_half_up(12.5) == 13
    assert round_half_up(62.5) == 63
    assert round_half_up(12.4) == 12


def test_count_main_tasks():
    class DummyTask:
        def __init__(self, project_id, status, is_subtask=False):
            self.project_id, self.status, self.is_subtask = project_id, status, is_subtask

    tasks = [DummyTask("p1", "Completed"), DummyTask("p1", "In Progress"),
             DummyTask("p1", "Completed", is_subtask=True), DummyTask("p2", "Completed")]
    assert count_main_tasks(tasks, "p1") == (2, 1, 1)
