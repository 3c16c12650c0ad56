# tests/test_progress.py

from __future__ import annotations

import pytest

from errors import StoreReadError, StoreWriteError
from models.project import PROJECTS_TABLE
from models.task import TASKS_TABLE
from utils.progress import recalculate

from .fakes import InMemoryStore, project_row, project_state, task_row


def _store(*tasks, project=None):
    return InMemoryStore({TASKS_TABLE: list(tasks), PROJECTS_TABLE: [project or project_row()]})


def test_zero_main_tasks_is_not_started():
    store = _store(project=project_row(status="In Progress", progress=40))
    result = recalculate(store, "p1")
    assert (result.status, result.progress) == ("Not Started", 0)
    assert project_state(store).status == "Not Started"
    assert project_state(store).progress == 0


def test_all_not_started_is_not_started():
    store = _store(task_row("t1"), task_row("t2"))
    result = recalculate(store, "p1")
    assert (result.status, result.progress) == ("Not Started", 0)


def test_all_completed_forces_100_regardless_of_stored_progress():
    store = _store(task_row("t1", status="Completed"), task_row("t2", status="completed"),
                   project=project_row(progress=13))
    result = recalculate(store, "p1")
    assert (result.status, result.progress) == ("Completed", 100)
    assert project_state(store).progress == 100


def test_in_progress_task_alone_makes_project_in_progress():
    store = _store(task_row("t1", status="In Progress"), task_row("t2"))
    result = recalculate(store, "p1")
    assert (result.status, result.progress) == ("In Progress", 0)


def test_blocked_and_not_started_mix_is_not_started():
    store = _store(task_row("t1", status="Blocked"), task_row("t2"))
    assert recalculate(store, "p1").status == "Not Started"


def test_progress_rounds_half_up():
    # 1/8 = 12.5%
    rows = [task_row("t0", status="Completed")] + [task_row(f"t{i}") for i in range(1, 8)]
    store = _store(*rows)
    assert recalculate(store, "p1").progress == 13


def test_status_comparison_is_case_insensitive():
    store = _store(task_row("t1", status="COMPLETED"), task_row("t2", status="in progress"))
    result = recalculate(store, "p1")
    assert (result.status, result.progress) == ("In Progress", 50)


def test_subtasks_are_excluded_from_progress():
    store = _store(
        task_row("t1", status="Completed"),
        task_row("t2"),
        task_row("s1", status="Completed", parent="t2"),
        task_row("s2", status="Completed", parent="t2"),
    )
    assert recalculate(store, "p1").progress == 50


def test_other_projects_tasks_are_ignored():
    store = _store(task_row("t1", status="Completed"), task_row("x1", project_id="p2"))
    result = recalculate(store, "p1")
    assert (result.status, result.progress) == ("Completed", 100)


def test_only_status_and_progress_are_replaced():
    store = _store(task_row("t1", status="Completed"))
    before = project_state(store)
    recalculate(store, "p1")
    after = project_state(store)
    assert after.model_dump(exclude={"status", "progress"}) == before.model_dump(exclude={"status", "progress"})


def test_missing_project_is_a_noop():
    store = _store(task_row("t1", project_id="ghost"))
    assert recalculate(store, "ghost") is None
    assert store.writes == []


def test_just_completed_fires_once():
    store = _store(task_row("t1", status="Completed"))
    first = recalculate(store, "p1")
    second = recalculate(store, "p1")
    assert first.just_completed is True
    assert second.just_completed is False
    assert (first.status, first.progress) == (second.status, second.progress)


def test_completion_result_carries_name_and_owner():
    store = _store(task_row("t1", status="Completed"))
    result = recalculate(store, "p1")
    assert result.project_name == "Apollo"
    assert result.owner_contact == "owner@x.com"


def test_project_row_is_located_after_positions_shift():
    store = _store(
        task_row("t1", project_id="p2", status="Completed"),
        project=project_row(id="p0", name="Zero"),
    )
    store.tables[PROJECTS_TABLE].append(project_row(id="p2", name="Two"))
    store.delete_row_at(PROJECTS_TABLE, 0)

    recalculate(store, "p2")
    assert project_state(store, "p2").status == "Completed"
    assert store.writes[-1] == ("update", PROJECTS_TABLE, 0)


def test_end_to_end_scenario():
    store = _store(task_row("t1", status="Completed"), task_row("t2"))
    r = recalculate(store, "p1")
    assert (r.status, r.progress, r.just_completed) == ("In Progress", 50, False)

    store.update_row_at(TASKS_TABLE, 1, task_row("t2", status="Completed"))
    r = recalculate(store, "p1")
    assert (r.status, r.progress, r.just_completed) == ("Completed", 100, True)

    assert recalculate(store, "p1").just_completed is False


def test_write_failure_propagates():
    store = _store(task_row("t1"))
    store.fail_writes_on.add(PROJECTS_TABLE)
    with pytest.raises(StoreWriteError):
        recalculate(store, "p1")


@pytest.mark.parametrize("table", [TASKS_TABLE, PROJECTS_TABLE])
def test_recalculate_read_failure_propagates(table):
    store = _store(task_row("t1", status="Completed"))
    store.fail_reads_on.add(table)
    with pytest.raises(StoreReadError):
        recalculate(store, "p1")
    assert store.writes == []
