# utils/dates.py
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from dateutil import parser

from errors import MalformedDateError


def parse_date_strict(x) -> Optional[date]:
    """Calendar date for a cell value. Empty -> None, unparseable -> MalformedDateError."""
    if x is None:
        return None
    if isinstance(x, datetime):
        return x.date()
    if isinstance(x, date):
        return x
    s = str(x).strip()
    if not s:
        return None
    try:
        return parser.parse(s).date()
    except (ValueError, OverflowError) as e:
        raise MalformedDateError(x) from e


def parse_date(x) -> Optional[date]:
    try:
        return parse_date_strict(x)
    except MalformedDateError:
        return None


def days_until(due: date, today: date) -> int:
    """Whole calendar days from ``today`` to ``due`` (negative when past)."""
    return (due - today).days
