# utils/reminders.py
"""
Due-date reminder sweep.

Runs once a day (see utils/scheduler.py) and on demand. For every open task with
a due date and an assignee it looks at the whole-day offset between today and the
due date:

- due in exactly 2 days  -> "2-day-before" reminder
- exactly 2 days overdue -> "2-day-overdue" reminder

The sweep only reads; it never writes task or project state. There is no record
of what was already sent, so a second sweep on the same day re-sends.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Callable, Dict, List, Optional

from db import TabularStore
from errors import MalformedDateError
from models.project import PROJECTS_TABLE, Project
from models.task import TASKS_TABLE, Task
from services.notifications import Notifier, safe_send
from utils.dates import days_until, parse_date_strict

logger = logging.getLogger(__name__)

REMINDER_OFFSET_DAYS = 2


class ReminderType(str, Enum):
    UPCOMING = "2-day-before"
    OVERDUE = "2-day-overdue"


class SweepOutcome(str, Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class Reminder:
    type: ReminderType
    task_id: str
    recipient: str
    due_date: str
    task_title: str = ""
    project_name: str = ""


@dataclass
class SweepResult:
    outcome: SweepOutcome
    reminders_sent: int = 0
    reminders: List[Reminder] = field(default_factory=list)
    failures: int = 0
    message: str = ""

    @property
    def success(self) -> bool:
        return self.outcome is not SweepOutcome.FAILED


def reminder_type_for(diff_days: int) -> Optional[ReminderType]:
    if diff_days == REMINDER_OFFSET_DAYS:
        return ReminderType.UPCOMING
    if diff_days == -REMINDER_OFFSET_DAYS:
        return ReminderType.OVERDUE
    return None


def reminder_message(kind: ReminderType, task: Task, project_name: str) -> tuple[str, str]:
    if kind is ReminderType.UPCOMING:
        subject = f'Reminder: Task "{task.title}" is due in 2 days'
        intro = "This is a friendly reminder that your task is due in 2 days:"
        due_line = f"Due Date: {task.due_date}"
        outro = "Please make sure to complete this task on time."
    else:
        subject = f'Overdue Reminder: Task "{task.title}" is 2 days overdue'
        intro = "This is an important reminder that your task is now 2 days overdue:"
        due_line = f"Due Date: {task.due_date} (2 days ago)"
        outro = "Please update the task status or complete it as soon as possible."

    lines = ["Hello,", "", intro, "", f"Task: {task.title}", f"Project: {project_name}",
             due_line, f"Status: {task.status}"]
    if task.description:
        lines.append(f"Description: {task.description}")
    lines += ["", outro, "", "Best regards,", "Project Management System"]
    return subject, "\n".join(lines)


class ReminderSweeper:
    def __init__(self, store: TabularStore, notifier: Notifier,
                 today: Optional[Callable[[], date]] = None):
        self.store = store
        self.notifier = notifier
        self.today = today or date.today

    def _load(self):
        tasks = [Task.from_row(r) for r in self.store.read_rows(TASKS_TABLE)]
        projects: Dict[str, str] = {}
        for r in self.store.read_rows(PROJECTS_TABLE):
            p = Project.from_row(r)
            projects[p.id] = p.name
        return tasks, projects

    def sweep(self) -> SweepResult:
        logger.info("Checking tasks for reminder emails...")
        try:
            tasks, project_names = self._load()
        except Exception as e:
            logger.exception("Reminder job failed while loading data")
            return SweepResult(outcome=SweepOutcome.FAILED, message=f"Reminder job failed: {e}")

        if not tasks:
            return SweepResult(outcome=SweepOutcome.SUCCESS, message="No tasks found.")

        today = self.today()
        result = SweepResult(outcome=SweepOutcome.SUCCESS)

        for task in tasks:
            if not task.due_date.strip() or not task.assigned_to.strip() or task.is_completed:
                continue
            try:
                due = parse_date_strict(task.due_date)
            except MalformedDateError:
                logger.warning("Invalid due date for task %s: %s", task.id, task.due_date)
                continue

            kind = reminder_type_for(days_until(due, today))
            if kind is None:
                continue

            project_name = project_names.get(task.project_id) or task.project_id
            subject, body = reminder_message(kind, task, project_name)
            if not safe_send(self.notifier, task.assigned_to, subject, body):
                result.failures += 1
                continue

            logger.info("Sent %s reminder for task %r to %s", kind.value, task.title, task.assigned_to)
            result.reminders.append(Reminder(
                type=kind,
                task_id=task.id,
                recipient=task.assigned_to,
                due_date=task.due_date,
                task_title=task.title,
                project_name=project_name,
            ))

        result.reminders_sent = len(result.reminders)
        if result.failures:
            result.outcome = SweepOutcome.PARTIAL
        result.message = (
            f"Reminder job completed. Sent {result.reminders_sent} reminder(s)"
            + (f", {result.failures} failed." if result.failures else ".")
        )
        logger.info(result.message)
        return result


def run_reminder_sweep(store: TabularStore, notifier: Notifier, today: Optional[date] = None) -> SweepResult:
    return ReminderSweeper(store, notifier, today=(lambda: today) if today else None).sweep()
