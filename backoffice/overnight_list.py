"""Overnight list generator and entry editing.

The overnight list is a tab-separated day sheet for the crew: where the
truck starts and ends, where the group sleeps and which meals are covered.
Day numbers are dense (0..N-1); removing an entry renumbers every entry
after it.
"""
import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import List, Sequence

from .errors import InvalidArgument
from .formatting import document_filename, format_short_date
from .models import MEAL_CODE_LABELS, OvernightEntry

logger = logging.getLogger(__name__)

COLUMNS = (
    "Day", "Date", "Start", "End", "Activity", "Accommodation",
    "Type", "Breakfast", "Lunch", "Dinner", "Notes",
)

HEADER = "\t".join(COLUMNS)

FOOTER = "-- 0 = {} 1= {} X= {}".format(
    MEAL_CODE_LABELS["0"], MEAL_CODE_LABELS["1"], MEAL_CODE_LABELS["X"]
)


def _entry_line(entry: OvernightEntry) -> str:
    fields = [
        str(entry.day),
        format_short_date(entry.date),
        entry.start,
        entry.end,
        entry.activity,
        entry.accommodation,
        entry.type,
        entry.breakfast,
        entry.lunch,
        entry.dinner,
        entry.notes or "",
    ]
    return "\t".join(fields)


def generate_overnight_list(entries: Sequence[OvernightEntry]) -> str:
    """Generate the overnight list text.

    An empty list still yields the header and the meal legend.
    """
    body = "\n".join(_entry_line(e) for e in entries)
    logger.info(f"Generated overnight list with {len(entries)} entries")
    return f"{HEADER}\n{body}\n\n{FOOTER}"


def remove_entry(entries: Sequence[OvernightEntry], index: int) -> List[OvernightEntry]:
    """Remove the entry at ``index`` and renumber days 0..N-2."""
    if not 0 <= index < len(entries):
        raise InvalidArgument(f"No overnight entry at index {index} (have {len(entries)})")
    kept = [e for i, e in enumerate(entries) if i != index]
    return [replace(e, day=i) for i, e in enumerate(kept)]


def add_entry(entries: Sequence[OvernightEntry], tour_start: date) -> List[OvernightEntry]:
    """Append a blank day after the last one, dated from the tour start."""
    next_day = max((e.day for e in entries), default=-1) + 1
    new_entry = OvernightEntry(
        day=next_day,
        date=tour_start + timedelta(days=next_day),
        start="",
        end="",
    )
    return list(entries) + [new_entry]


def redate_entries(entries: Sequence[OvernightEntry], tour_start: date) -> List[OvernightEntry]:
    """Recompute every entry's date as tour start + day number."""
    return [replace(e, date=tour_start + timedelta(days=e.day)) for e in entries]


def overnight_list_filename(tour_start: date) -> str:
    return document_filename("Overnight_List", tour_start.isoformat())
