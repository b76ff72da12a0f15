"""Immutable state of the period editor dialog.

EditorState is a frozen pydantic model: transitions never mutate it, they
return a copy built with ``model_copy(update=...)``.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from src.schoolerp.models import ClassRef, SubjectRef, TeacherRef, Weekday


class EditorPhase(str, Enum):
    IDLE = "idle"  # dialog closed
    CLASS_PENDING = "class_pending"  # class list loading
    SELECTING_SLOT = "selecting_slot"
    FETCHING_PERIOD = "fetching_period"
    NOT_FOUND = "not_found"
    LOADED = "loaded"
    UPDATING = "updating"


class UpdateOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class NoticeVariant(str, Enum):
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class Notice(BaseModel):
    """A user-facing message (the toast of the web front end)."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str
    variant: NoticeVariant = NoticeVariant.DEFAULT


class EditorState(BaseModel):
    """Selections and option lists of the period editor.

    ``loading`` is True while a request chain started by fetch or subject
    selection has not settled; it gates the fetch and update actions.
    ``teacher_selectable`` is False whenever the teacher list is empty. In
    that case ``teacher_id`` is None if a teacher query came back empty, and
    otherwise still holds the loaded period's own teacher (period without a
    subject, or option lists that failed to load).
    """

    model_config = ConfigDict(frozen=True)

    phase: EditorPhase = EditorPhase.IDLE
    loading: bool = False

    classes: tuple[ClassRef, ...] = ()
    class_id: str | None = None
    day: Weekday | None = None
    period_number: int | None = None

    period_id: str | None = None
    subjects: tuple[SubjectRef, ...] = ()
    subject_id: str | None = None
    teachers: tuple[TeacherRef, ...] = ()
    teacher_id: str | None = None
    teacher_selectable: bool = False

    last_update: UpdateOutcome | None = None

    @property
    def slot_complete(self) -> bool:
        return bool(self.class_id and self.day and self.period_number)

    @property
    def can_fetch(self) -> bool:
        return (
            self.slot_complete
            and not self.loading
            and self.phase
            in (EditorPhase.SELECTING_SLOT, EditorPhase.NOT_FOUND, EditorPhase.LOADED)
        )

    @property
    def can_update(self) -> bool:
        return (
            self.phase is EditorPhase.LOADED
            and self.period_id is not None
            and not self.loading
        )
