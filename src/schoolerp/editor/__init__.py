"""Edit-period dialog: immutable state, pure transitions and the async controller."""

from src.schoolerp.editor.controller import PeriodEditor, TimetableService
from src.schoolerp.editor.state import (
    EditorPhase,
    EditorState,
    Notice,
    NoticeVariant,
    UpdateOutcome,
)

__all__ = [
    "PeriodEditor",
    "TimetableService",
    "EditorPhase",
    "EditorState",
    "Notice",
    "NoticeVariant",
    "UpdateOutcome",
]
