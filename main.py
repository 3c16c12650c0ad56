# main.py

#============================================================#
#                        Trackwise-PM                        #
#============================================================#
# Version     : V1.0.1                                       #
#------------------------------------------------------------#
# Purpose     : Trackwise-PM keeps project status/progress   #
#               derived from tasks, cascades subtask         #
#               completion, flags overlapping schedules and  #
#               sends daily due-date reminders.              #
#============================================================#

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from typing import List, Optional

from config import get_settings
from db import get_store
from logging_setup import setup_logging
from services.notifications import SmtpNotifier
from services.projects import list_projects
from services.tasks import list_tasks
from utils.dashboard import dashboard_summary
from utils.overlap import compute_overlaps
from utils.progress import recalc_project_status
from utils.reminders import ReminderSweeper, SweepOutcome
from utils.scheduler import run_reminder_scheduler
from utils.timeline import timeline_df

logger = logging.getLogger(__name__)


def _print(obj) -> None:
    print(json.dumps(obj, indent=2, default=str))


def cmd_init_db(args) -> int:
    get_store()
    logger.info("Store ready at %s", get_settings().database_url)
    return 0


def cmd_recalc(args) -> int:
    result = recalc_project_status(get_store(), args.project_id)
    if result is None:
        print(f"Project {args.project_id} not found", file=sys.stderr)
        return 1
    _print(asdict(result))
    return 0


def cmd_overlaps(args) -> int:
    _print(compute_overlaps(list_tasks(get_store(), project_id=args.project)))
    return 0


def cmd_timeline(args) -> int:
    df = timeline_df(list_tasks(get_store(), project_id=args.project))
    _print(df.to_dict(orient="records"))
    return 0


def cmd_dashboard(args) -> int:
    store = get_store()
    _print(dashboard_summary(list_tasks(store), list_projects(store)))
    return 0


def cmd_sweep(args) -> int:
    result = ReminderSweeper(get_store(), SmtpNotifier()).sweep()
    _print({
        "outcome": result.outcome.value,
        "reminders_sent": result.reminders_sent,
        "reminders": [asdict(r) for r in result.reminders],
        "failures": result.failures,
        "message": result.message,
    })
    return 0 if result.outcome is SweepOutcome.SUCCESS else 1


def cmd_schedule(args) -> int:
    settings = get_settings()
    sweeper = ReminderSweeper(get_store(), SmtpNotifier(settings))
    try:
        asyncio.run(run_reminder_scheduler(sweeper, run_at=settings.reminder_time))
    except KeyboardInterrupt:
        logger.info("Scheduler stopped.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="trackwise", description="Trackwise-PM reconciliation tools")
    sub = p.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="create the task/project tables").set_defaults(func=cmd_init_db)

    sp = sub.add_parser("recalc", help="re-derive a project's status and progress")
    sp.add_argument("project_id")
    sp.set_defaults(func=cmd_recalc)

    sp = sub.add_parser("overlaps", help="print overlapping task ids")
    sp.add_argument("--project", default=None, help="limit to one project id")
    sp.set_defaults(func=cmd_overlaps)

    sp = sub.add_parser("timeline", help="print Gantt rows, subtasks under their parent")
    sp.add_argument("--project", default=None, help="limit to one project id")
    sp.set_defaults(func=cmd_timeline)

    sub.add_parser("dashboard", help="print the dashboard summary").set_defaults(func=cmd_dashboard)
    sub.add_parser("sweep", help="run the due-date reminder sweep now").set_defaults(func=cmd_sweep)
    sub.add_parser("schedule", help="run the daily reminder sweep until stopped").set_defaults(func=cmd_schedule)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    settings = get_settings()
    console_level = getattr(logging, str(settings.log_level).upper(), logging.INFO)
    setup_logging(log_dir=settings.log_dir, console_level=console_level)

    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
