# utils/dashboard.py
"""Read-only dashboard numbers built from task and project rows."""
from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional

import pandas as pd

from models.project import Project
from models.task import Task, TaskStatus, normalize_status, status_is
from utils.dates import parse_date
from utils.progress import round_half_up

logger = logging.getLogger(__name__)

_BASE_STATUSES = [TaskStatus.NOT_STARTED.value, TaskStatus.IN_PROGRESS.value, TaskStatus.COMPLETED.value]


def _df_for_analytics(tasks: List[Task]) -> pd.DataFrame:
    rows = [{
        "id": t.id,
        "title": t.title,
        "project_id": t.project_id,
        "assigned_to": t.assigned_to.strip(),
        "status": normalize_status(t.status),
        "due_date": parse_date(t.due_date),
        "raw_due_date": t.due_date,
        "is_subtask": t.is_subtask,
    } for t in tasks]
    return pd.DataFrame(rows, columns=["id", "title", "project_id", "assigned_to", "status",
                                       "due_date", "raw_due_date", "is_subtask"])


def dashboard_summary(tasks: List[Task], projects: List[Project], today: Optional[date] = None) -> Dict:
    today = today or date.today()
    df = _df_for_analytics(tasks)
    names = {p.id: p.name for p in projects}
    completed_projects = {p.id for p in projects if status_is(p.status, TaskStatus.COMPLETED)}
    stored_progress = {p.id: p.progress for p in projects}

    status_counts = {s: 0 for s in _BASE_STATUSES}
    main = df[~df["is_subtask"]] if not df.empty else df
    if not main.empty:
        for status, n in main.groupby("status").size().items():
            status_counts[status] = status_counts.get(status, 0) + int(n)

    project_completion = []
    if not main.empty:
        scoped = main[main["project_id"] != ""]
        for pid, grp in scoped.groupby("project_id", sort=False):
            total = len(grp)
            done = int((grp["status"] == TaskStatus.COMPLETED.value).sum())
            if pid in stored_progress:
                progress = stored_progress[pid]
            else:
                progress = round_half_up(100 * done / total) if total else 0
            project_completion.append({
                "project_id": pid,
                "project": names.get(pid, pid),
                "total_tasks": total,
                "completed_tasks": done,
                "progress": max(0, min(100, int(progress))),
            })
    project_completion.sort(key=lambda r: r["progress"], reverse=True)

    workload: Dict[str, int] = {}
    if not df.empty:
        assigned = df[df["assigned_to"] != ""]
        counts = assigned.groupby("assigned_to").size().sort_values(ascending=False, kind="stable")
        workload = {k: int(v) for k, v in counts.items()}

    overdue = []
    if not df.empty:
        bad = df[(df["raw_due_date"].str.strip() != "") & df["due_date"].isna()]
        for _, r in bad.iterrows():
            logger.warning("Invalid due date for task %s: %s", r["id"], r["raw_due_date"])
        mask = (
            df["due_date"].notna()
            & (df["status"] != TaskStatus.COMPLETED.value)
            & ~df["project_id"].isin(completed_projects)
        )
        for _, r in df[mask].iterrows():
            if r["due_date"] < today:
                overdue.append({
                    "id": r["id"],
                    "title": r["title"],
                    "project_id": r["project_id"],
                    "project": names.get(r["project_id"], r["project_id"]),
                    "assigned_to": r["assigned_to"],
                    "status": r["status"],
                    "due_date": r["raw_due_date"],
                })

    return {
        "status_counts": status_counts,
        "project_completion": project_completion,
        "employee_workload": workload,
        "overdue_tasks": overdue,
        "total_tasks": len(tasks),
        "total_projects": len(projects),
    }
