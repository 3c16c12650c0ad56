# utils/overlap.py
"""Closed-interval overlap checks between task date ranges.

Pure functions: no I/O, no state. Used by the timeline/read path only and never
affects stored status or progress.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from errors import MalformedDateError
from models.task import Task
from utils.dates import parse_date_strict

logger = logging.getLogger(__name__)


def dates_overlap(start1: date, end1: date, start2: date, end2: date) -> bool:
    # touching endpoints count
    return start1 <= end2 and start2 <= end1


def task_range(task: Task) -> Optional[Tuple[date, date]]:
    """(start, end) when both dates are present and parseable, else None."""
    try:
        start = parse_date_strict(task.start_date)
        end = parse_date_strict(task.end_date)
    except MalformedDateError as e:
        logger.warning("Skipping task %s for overlap checks: %s", task.id, e)
        return None
    if start is None or end is None:
        return None
    return start, end


def tasks_overlap(a: Task, b: Task) -> bool:
    ra, rb = task_range(a), task_range(b)
    if ra is None or rb is None:
        return False
    return dates_overlap(ra[0], ra[1], rb[0], rb[1])


def find_overlapping_tasks(task: Task, all_tasks: Iterable[Task]) -> List[str]:
    return [
        other.id
        for other in all_tasks
        if other is not task and other.id != task.id and tasks_overlap(task, other)
    ]


def get_overlap_warnings(tasks: Iterable[Task]) -> Dict[str, List[str]]:
    """Task id -> ids it overlaps with, for every task that has a valid range.

    Tasks without a usable range are left out entirely; tasks with a range but no
    overlaps map to an empty list.
    """
    ranged = []
    for t in tasks:
        r = task_range(t)
        if r is not None:
            ranged.append((t, r))

    warnings: Dict[str, List[str]] = {t.id: [] for t, _ in ranged}
    for i, (a, ra) in enumerate(ranged):
        for b, rb in ranged[i + 1:]:
            if a.id == b.id:
                continue
            if dates_overlap(ra[0], ra[1], rb[0], rb[1]):
                warnings[a.id].append(b.id)
                warnings[b.id].append(a.id)
    return warnings


compute_overlaps = get_overlap_warnings
