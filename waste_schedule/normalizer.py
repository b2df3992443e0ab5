"""
This module deduplicates schedule entries and resolves day/month pickup dates.
"""
import logging
from dataclasses import replace
from datetime import date
from typing import Dict, Iterable, Optional

from .exceptions import ParseError
from .models import ScheduleEntry

logger = logging.getLogger(__name__)


def infer_date(day: int, month: int, today: date) -> date:
    """
    Resolves a day/month pair to a full date relative to today.

    The pair rolls over to next year only when its day is before today's day
    and its month is not after today's month. Today itself stays in this year.

    Raises:
        ParseError: If the pair is not a valid calendar date in the chosen year.
    """
    year = today.year
    if day < today.day and month <= today.month:
        year += 1
    try:
        return date(year, month, day)
    except ValueError as e:
        raise ParseError(f"Invalid pickup date {day:02d}/{month:02d} for year {year}", field="next_empty") from e


def parse_day_month(raw: str, today: date) -> date:
    """Parses a "DD/MM" string, see infer_date()."""
    try:
        day_text, month_text = raw.strip().split("/")
        day, month = int(day_text), int(month_text)
    except ValueError as e:
        raise ParseError(f"Invalid pickup date '{raw}'", field="next_empty") from e
    return infer_date(day, month, today)


def normalize(raw: Iterable[ScheduleEntry], today: Optional[date] = None) -> Dict[str, ScheduleEntry]:
    """
    Deduplicates entries by entity key, keeping the earliest due date.

    Args:
        raw: Entries as returned by a ScheduleSource.
        today: Reference date for day/month inference. Defaults to date.today().

    Returns:
        A mapping of entity key to the authoritative entry for this pass.
    """
    today = today or date.today()
    normalized: Dict[str, ScheduleEntry] = {}

    for entry in raw:
        if entry.due_date is None:
            if entry.raw_next_empty is None:
                raise ParseError(f"Entry '{entry.name}' has no pickup date", field="due_date")
            entry = replace(entry, due_date=parse_day_month(entry.raw_next_empty, today))

        key = entry.entity_key
        current = normalized.get(key)
        if current is None or entry.due_date < current.due_date:
            if current is not None:
                logger.debug(f"Replacing {current.due_date} with earlier {entry.due_date} for '{key}'")
            normalized[key] = entry

    return normalized
