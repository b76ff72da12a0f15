"""Client for the school ERP timetable API.

Typed HTTP client, bearer-token persistence, weekly grid rendering and the
edit-period workflow (PeriodEditor) used by the timetable CLI.
"""

from src.schoolerp.api import AsyncTimetableApi, TimetableApi
from src.schoolerp.editor import EditorPhase, EditorState, PeriodEditor
from src.schoolerp.models import PERIODS_PER_DAY, Period, Weekday

__all__ = [
    "TimetableApi",
    "AsyncTimetableApi",
    "PeriodEditor",
    "EditorPhase",
    "EditorState",
    "Period",
    "Weekday",
    "PERIODS_PER_DAY",
]
