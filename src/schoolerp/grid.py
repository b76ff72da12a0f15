"""Weekly timetable grid helpers.

Turns the flat period lists returned by /timetable/class/{id} and
/timetable/teacher/{id} into a day x period grid and a printable table.
"""

from collections.abc import Iterable

from src.schoolerp.models import (
    PERIOD_NUMBERS,
    WEEKDAYS,
    FreeSlot,
    TimetableEntry,
    Weekday,
)

Grid = dict[Weekday, dict[int, TimetableEntry | None]]


def build_grid(entries: Iterable[TimetableEntry]) -> Grid:
    """Place entries on a Mon-Sat x 1-8 grid; empty cells are None.

    If two entries claim the same cell the later one wins.
    """
    grid: Grid = {day: {period: None for period in PERIOD_NUMBERS} for day in WEEKDAYS}
    for entry in entries:
        grid[entry.day][entry.period] = entry
    return grid


def free_slots(entries: Iterable[TimetableEntry]) -> list[FreeSlot]:
    """Slots with no entry, in day then period order."""
    grid = build_grid(entries)
    return [
        FreeSlot(day=day, period=period)
        for day in WEEKDAYS
        for period, entry in grid[day].items()
        if entry is None
    ]


def _cell(entry: TimetableEntry | None, detail: str) -> str:
    if entry is None:
        return "Free"
    second = getattr(entry, detail) or "-"
    text = f"{entry.subject_name or entry.subject_code or '?'} / {second}"
    if entry.room:
        text = f"{text} ({entry.room})"
    return text


def format_grid(entries: Iterable[TimetableEntry], detail: str = "teacher_name") -> str:
    """Format a weekly grid as a human-readable table.

    Columns: Day | P1 .. P8. Each cell shows ``subject / <detail>``, where
    detail is ``teacher_name`` for class timetables and ``class_name`` for
    teacher timetables.
    """
    entries = list(entries)
    if not entries:
        return "(no periods scheduled)"

    grid = build_grid(entries)
    headers = ["Day", *(f"P{period}" for period in PERIOD_NUMBERS)]
    rows = [
        [day.value, *(_cell(grid[day][period], detail) for period in PERIOD_NUMBERS)]
        for day in WEEKDAYS
    ]

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    header_line = " | ".join(h.ljust(widths[i]) for i, h in enumerate(headers))
    separator = "-+-".join("-" * w for w in widths)
    row_lines = [" | ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)) for row in rows]

    return "\n".join([header_line, separator, *row_lines])
