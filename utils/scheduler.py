# utils/scheduler.py
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, time, timedelta
from typing import Callable, Optional

from utils.reminders import ReminderSweeper, SweepOutcome, SweepResult

logger = logging.getLogger(__name__)


def seconds_until(run_at: time, now: datetime) -> float:
    """Seconds from ``now`` to the next occurrence of ``run_at`` (today if still ahead)."""
    target = now.replace(hour=run_at.hour, minute=run_at.minute, second=0, microsecond=0)
    if target <= now:
        target += timedelta(days=1)
    return (target - now).total_seconds()


async def run_reminder_scheduler(
        sweeper: ReminderSweeper,
        *,
        run_at: time = time(9, 0),
        now: Optional[Callable[[], datetime]] = None,
        on_result: Optional[Callable[[SweepResult], None]] = None,
) -> None:
    """
    Sweep once a day at ``run_at`` local time.

    The sweep reports failures in its result instead of raising, so one bad day
    never stops the loop. Cancel the coroutine to stop.
    """
    clock = now or datetime.now
    logger.info("Task reminder job scheduled (runs daily at %s)", run_at.strftime("%H:%M"))

    while True:
        delay = seconds_until(run_at, clock())
        logger.debug("Next reminder sweep in %.0f s", delay)
        await asyncio.sleep(delay)

        result = sweeper.sweep()
        if result.outcome is not SweepOutcome.SUCCESS:
            logger.warning("Reminder sweep finished with outcome=%s: %s", result.outcome.value, result.message)
        if on_result is not None:
            on_result(result)
