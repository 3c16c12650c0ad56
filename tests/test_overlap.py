# tests/test_overlap.py

from __future__ import annotations

from datetime import date
from itertools import permutations

from models.task import Task
from utils.overlap import (
    compute_overlaps, dates_overlap, find_overlapping_tasks, get_overlap_warnings, tasks_overlap,
)


def _t(id, start, end):
    return Task(id=id, project_id="p1", title=id, start_date=start, end_date=end)


def test_dates_overlap_closed_interval():
    d = date
    assert dates_overlap(d(2026, 1, 1), d(2026, 1, 5), d(2026, 1, 5), d(2026, 1, 9))
    assert not dates_overlap(d(2026, 1, 1), d(2026, 1, 4), d(2026, 1, 5), d(2026, 1, 9))
    assert dates_overlap(d(2026, 1, 1), d(2026, 1, 31), d(2026, 1, 10), d(2026, 1, 11))


def test_touching_tasks_overlap():
    a = _t("a", "2026-01-01", "2026-01-05")
    b = _t("b", "2026-01-05", "2026-01-09")
    assert tasks_overlap(a, b)


def test_overlap_is_symmetric():
    tasks = [
        _t("a", "2026-01-01", "2026-01-05"),
        _t("b", "2026-01-04", "2026-01-09"),
        _t("c", "2026-02-01", "2026-02-03"),
        _t("d", "", "2026-02-03"),
        _t("e", "not a date", "2026-02-03"),
    ]
    for x, y in permutations(tasks, 2):
        assert tasks_overlap(x, y) == tasks_overlap(y, x)


def test_missing_or_bad_dates_never_overlap():
    a = _t("a", "2026-01-01", "2026-01-05")
    assert not tasks_overlap(a, _t("b", "", "2026-01-03"))
    assert not tasks_overlap(a, _t("c", "2026-01-02", ""))
    assert not tasks_overlap(a, _t("d", "2026-13-45", "2026-01-03"))


def test_find_overlapping_excludes_self():
    a = _t("a", "2026-01-01", "2026-01-05")
    b = _t("b", "2026-01-03", "2026-01-04")
    c = _t("c", "2026-03-01", "2026-03-04")
    assert find_overlapping_tasks(a, [a, b, c]) == ["b"]


def test_overlap_warnings_map():
    tasks = [
        _t("a", "2026-01-01", "2026-01-05"),
        _t("b", "2026-01-03", "2026-01-04"),
        _t("c", "2026-01-05", "2026-01-06"),
        _t("d", "2026-03-01", "2026-03-04"),
        _t("e", "", ""),
    ]
    warnings = get_overlap_warnings(tasks)
    assert warnings == {"a": ["b", "c"], "b": ["a"], "c": ["a"], "d": []}


def test_overlap_warnings_are_deterministic():
    tasks = [_t("a", "2026-01-01", "2026-01-05"), _t("b", "2026-01-03", "2026-01-08")]
    assert compute_overlaps(tasks) == compute_overlaps(tasks) == {"a": ["b"], "b": ["a"]}
