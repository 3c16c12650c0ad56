# utils/timeline.py
from typing import List

import pandas as pd

from models.task import Task
from utils.overlap import get_overlap_warnings, task_range

TIMELINE_COLUMNS = ["Id", "Item", "Start", "Finish", "Status", "Type", "Overlaps"]


def timeline_df(tasks: List[Task]) -> pd.DataFrame:
    """Gantt rows for tasks with a usable date range; subtasks follow their parent."""
    warnings = get_overlap_warnings(tasks)
    by_parent = {}
    for t in tasks:
        if t.is_subtask:
            by_parent.setdefault(t.parent_task_id, []).append(t)

    def _row(t: Task, is_sub: bool):
        r = task_range(t)
        if r is None:
            return None
        return {
            "Id": t.id,
            "Item": f"  ↳ {t.title}" if is_sub else f"Task: {t.title}",
            "Start": pd.Timestamp(r[0]),
            "Finish": pd.Timestamp(r[1]),
            "Status": t.status,
            "Type": "Subtask" if is_sub else "Task",
            "Overlaps": len(warnings.get(t.id, [])),
        }

    main_ids = {t.id for t in tasks if not t.is_subtask}
    rows = []
    for t in tasks:
        if t.is_subtask:
            continue
        rows.append(_row(t, False))
        for st_ in by_parent.get(t.id, []):
            rows.append(_row(st_, True))
    # subtasks whose parent is missing still show up, at the end
    for pid, subs in by_parent.items():
        if pid not in main_ids:
            rows.extend(_row(st_, True) for st_ in subs)

    df = pd.DataFrame([r for r in rows if r is not None], columns=TIMELINE_COLUMNS)
    return df.reset_index(drop=True)
