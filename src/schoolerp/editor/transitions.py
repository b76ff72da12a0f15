"""Pure transition functions of the period editor.

Each function takes the current EditorState (plus the event payload) and
returns the next one. None of them perform I/O; PeriodEditor decides which
transition a remote result maps to.
"""

from collections.abc import Iterable

from src.schoolerp.editor.state import EditorPhase, EditorState, UpdateOutcome
from src.schoolerp.models import (
    PERIOD_NUMBERS,
    ClassRef,
    Period,
    SubjectRef,
    TeacherRef,
    Weekday,
)

# Phases in which the class/day/period selectors accept input.
SLOT_EDITABLE_PHASES = frozenset(
    {
        EditorPhase.CLASS_PENDING,
        EditorPhase.SELECTING_SLOT,
        EditorPhase.FETCHING_PERIOD,
        EditorPhase.NOT_FOUND,
        EditorPhase.LOADED,
    }
)

_CLEARED_PERIOD = {
    "period_id": None,
    "subjects": (),
    "subject_id": None,
    "teachers": (),
    "teacher_id": None,
    "teacher_selectable": False,
}


def opened(_state: EditorState) -> EditorState:
    """Dialog opened: start from a blank state waiting on the class list."""
    return EditorState(phase=EditorPhase.CLASS_PENDING)


def classes_loaded(state: EditorState, classes: Iterable[ClassRef]) -> EditorState:
    phase = EditorPhase.SELECTING_SLOT if state.phase is EditorPhase.CLASS_PENDING else state.phase
    return state.model_copy(update={"classes": tuple(classes), "phase": phase})


def _slot_changed(state: EditorState, **slot) -> EditorState:
    # Once a slot has been looked up, any change to it invalidates the result.
    if state.phase is EditorPhase.CLASS_PENDING:
        return state.model_copy(update=slot)
    return state.model_copy(
        update={
            **slot,
            **_CLEARED_PERIOD,
            "phase": EditorPhase.SELECTING_SLOT,
            "loading": False,
        }
    )


def class_selected(state: EditorState, class_id: str) -> EditorState:
    if not class_id:
        raise ValueError("class_id must be a non-empty id")
    return _slot_changed(state, class_id=class_id)


def day_selected(state: EditorState, day: Weekday | str) -> EditorState:
    return _slot_changed(state, day=Weekday.parse(day))


def period_selected(state: EditorState, period_number: int) -> EditorState:
    if period_number not in PERIOD_NUMBERS:
        raise ValueError(
            f"Period must be between {PERIOD_NUMBERS[0]} and {PERIOD_NUMBERS[-1]}, got {period_number!r}"
        )
    return _slot_changed(state, period_number=period_number)


def fetch_started(state: EditorState) -> EditorState:
    return state.model_copy(
        update={
            **_CLEARED_PERIOD,
            "phase": EditorPhase.FETCHING_PERIOD,
            "loading": True,
            "last_update": None,
        }
    )


def period_not_found(state: EditorState) -> EditorState:
    """No period at the slot: slot kept so the user can pick another one."""
    return state.model_copy(
        update={**_CLEARED_PERIOD, "phase": EditorPhase.NOT_FOUND, "loading": False}
    )


def fetch_failed(state: EditorState) -> EditorState:
    return state.model_copy(
        update={**_CLEARED_PERIOD, "phase": EditorPhase.SELECTING_SLOT, "loading": False}
    )


def period_loaded(state: EditorState, period: Period) -> EditorState:
    """Period found; option lists follow in subjects_loaded/teachers_loaded."""
    return state.model_copy(
        update={
            **_CLEARED_PERIOD,
            "phase": EditorPhase.LOADED,
            "period_id": period.id,
            "subject_id": period.subject_id,
            "teacher_id": period.teacher_id,
        }
    )


def subjects_loaded(state: EditorState, subjects: Iterable[SubjectRef]) -> EditorState:
    subjects = tuple(subjects)
    if not subjects:
        return options_unavailable(state)
    return state.model_copy(update={"subjects": subjects})


def options_unavailable(state: EditorState) -> EditorState:
    """Option lists could not be loaded for the stored period.

    Nothing can be chosen, but the period's own subject and teacher stay
    selected so an update leaves them as they are.
    """
    return teachers_unavailable(state).model_copy(update={"subjects": ()})


def teachers_unavailable(state: EditorState) -> EditorState:
    """Teacher options could not be loaded; the selected teacher is kept."""
    return state.model_copy(update={"teachers": (), "teacher_selectable": False})


def teachers_loaded(state: EditorState, teachers: Iterable[TeacherRef]) -> EditorState:
    """Replace the teacher options for the current subject.

    The teacher selection survives only if it is one of the new options.
    An empty list disables teacher selection altogether.
    """
    teachers = tuple(teachers)
    keep = state.teacher_id in {teacher.id for teacher in teachers}
    return state.model_copy(
        update={
            "teachers": teachers,
            "teacher_id": state.teacher_id if keep else None,
            "teacher_selectable": bool(teachers),
        }
    )


def settled(state: EditorState) -> EditorState:
    return state.model_copy(update={"loading": False})


def subject_selected(state: EditorState, subject_id: str) -> EditorState:
    """New subject chosen: old teacher options no longer apply until re-queried."""
    if subject_id not in {subject.id for subject in state.subjects}:
        raise ValueError(f"Unknown subject {subject_id!r} for class {state.class_id!r}")
    return state.model_copy(
        update={
            "subject_id": subject_id,
            "teachers": (),
            "teacher_selectable": False,
            "loading": True,
        }
    )


def teacher_selected(state: EditorState, teacher_id: str) -> EditorState:
    if teacher_id not in {teacher.id for teacher in state.teachers}:
        raise ValueError(f"Teacher {teacher_id!r} cannot teach subject {state.subject_id!r}")
    return state.model_copy(update={"teacher_id": teacher_id})


def update_started(state: EditorState) -> EditorState:
    return state.model_copy(update={"phase": EditorPhase.UPDATING, "last_update": None})


def update_succeeded(state: EditorState) -> EditorState:
    """Saved: subject/teacher cleared, slot kept for editing the next period."""
    return state.model_copy(
        update={
            **_CLEARED_PERIOD,
            "phase": EditorPhase.SELECTING_SLOT,
            "last_update": UpdateOutcome.SUCCEEDED,
        }
    )


def update_failed(state: EditorState) -> EditorState:
    return state.model_copy(
        update={"phase": EditorPhase.LOADED, "last_update": UpdateOutcome.FAILED}
    )


def closed(_state: EditorState) -> EditorState:
    return EditorState()
