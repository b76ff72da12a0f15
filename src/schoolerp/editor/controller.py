"""PeriodEditor - async controller for the edit-period dialog.

Sequences the dependent lookups (period -> subjects for the class -> teachers
for the subject) and the final update against the timetable service, and
applies the matching transition after each step.

Every remote failure is caught here and turned into a Notice; the editor always
lands in a stable, re-enterable phase. Nothing is retried automatically.

Overlapping requests: each request chain captures a generation number when it
starts. Changing the slot, choosing another subject, starting a new fetch or
closing the dialog bumps the generation, and a response whose generation is no
longer current is dropped instead of applied.
"""

from collections.abc import Callable
from typing import Protocol

from src.schoolerp.editor import transitions
from src.schoolerp.editor.state import EditorPhase, EditorState, Notice, NoticeVariant
from src.schoolerp.errors import ErpApiError, NotFoundError
from src.schoolerp.logging import get_logger
from src.schoolerp.models import (
    ClassRef,
    MessageResponse,
    PeriodLookup,
    PeriodUpdate,
    SubjectList,
    TeacherList,
    Weekday,
)

log = get_logger(__name__)


class TimetableService(Protocol):
    """The remote calls the editor needs (AsyncTimetableApi implements it)."""

    async def list_classes(self) -> list[ClassRef]: ...

    async def subjects_for_class(self, class_id: str) -> SubjectList: ...

    async def teachers_for_subject(self, subject_id: str) -> TeacherList: ...

    async def get_period(self, class_id: str, day: Weekday, period_number: int) -> PeriodLookup: ...

    async def update_period(self, period_id: str, update: PeriodUpdate) -> MessageResponse: ...


NO_PERIOD = Notice(
    title="No Period Found",
    description="No period exists for this class, day, and period.",
    variant=NoticeVariant.DESTRUCTIVE,
)
NO_SUBJECTS = Notice(title="No Subjects Found", description="No subjects exist for this class.")
NO_TEACHERS = Notice(title="No Teachers Found", description="No teachers exist for this subject.")


def _error(description: str) -> Notice:
    return Notice(title="Error", description=description, variant=NoticeVariant.DESTRUCTIVE)


class PeriodEditor:
    """Edit-period dialog driven against a TimetableService.

    Args:
        service: Async timetable service.
        on_notice: Optional callback receiving each Notice as it is raised.
    """

    def __init__(
        self,
        service: TimetableService,
        on_notice: Callable[[Notice], None] | None = None,
    ) -> None:
        self.service = service
        self.on_notice = on_notice
        self.notices: list[Notice] = []
        self._state = EditorState()
        self._generation = 0
        self._dialog_generation = 0

    @property
    def state(self) -> EditorState:
        return self._state

    def _apply(self, transition, *args) -> EditorState:
        previous = self._state.phase
        self._state = transition(self._state, *args)
        if self._state.phase is not previous:
            log.debug(
                "editor_transition",
                transition=transition.__name__,
                from_phase=previous.value,
                to_phase=self._state.phase.value,
            )
        return self._state

    def _notify(self, notice: Notice) -> None:
        self.notices.append(notice)
        log.info("editor_notice", title=notice.title, variant=notice.variant.value)
        if self.on_notice is not None:
            self.on_notice(notice)

    def _bump(self) -> int:
        self._generation += 1
        return self._generation

    def _stale(self, generation: int, step: str) -> bool:
        if generation != self._generation:
            log.info(
                "stale_response_discarded",
                step=step,
                generation=generation,
                current=self._generation,
            )
            return True
        return False

    # -- dialog lifecycle -----------------------------------------------

    async def open(self) -> EditorState:
        """Open the dialog and load the class list (failure leaves it empty)."""
        self._dialog_generation += 1
        dialog_generation = self._dialog_generation
        self._bump()
        self._apply(transitions.opened)

        try:
            classes = await self.service.list_classes()
            failure = None
        except ErpApiError as e:
            classes, failure = [], e

        if dialog_generation != self._dialog_generation:
            log.info("stale_response_discarded", step="list_classes")
            return self._state
        if failure is not None:
            log.warning("class_list_failed", error=str(failure))
            self._notify(_error("Failed to fetch classes."))
        return self._apply(transitions.classes_loaded, classes)

    def close(self) -> EditorState:
        """Reset everything, whatever is in flight."""
        self._dialog_generation += 1
        self._bump()
        return self._apply(transitions.closed)

    # -- slot selection -------------------------------------------------

    def _select_slot(self, transition, value) -> EditorState:
        if self._state.phase not in transitions.SLOT_EDITABLE_PHASES:
            log.debug("slot_selection_ignored", phase=self._state.phase.value)
            return self._state
        self._bump()
        return self._apply(transition, value)

    def select_class(self, class_id: str) -> EditorState:
        return self._select_slot(transitions.class_selected, class_id)

    def select_day(self, day: Weekday | str) -> EditorState:
        return self._select_slot(transitions.day_selected, day)

    def select_period(self, period_number: int) -> EditorState:
        return self._select_slot(transitions.period_selected, period_number)

    # -- fetch chain ----------------------------------------------------

    async def fetch_period(self) -> EditorState:
        """Look up the selected slot, then its subject and teacher options."""
        if not self._state.can_fetch:
            log.debug("fetch_ignored", phase=self._state.phase.value, loading=self._state.loading)
            return self._state

        generation = self._bump()
        slot = self._state
        self._apply(transitions.fetch_started)

        try:
            lookup = await self.service.get_period(slot.class_id, slot.day, slot.period_number)
        except NotFoundError:
            lookup = PeriodLookup()
        except ErpApiError as e:
            if self._stale(generation, "get_period"):
                return self._state
            log.warning("period_fetch_failed", error=str(e))
            self._notify(_error("Failed to fetch period details."))
            return self._apply(transitions.fetch_failed)

        if self._stale(generation, "get_period"):
            return self._state

        if lookup.period is None:
            log.info(
                "period_not_found",
                class_id=slot.class_id,
                day=slot.day.value,
                period=slot.period_number,
            )
            self._notify(NO_PERIOD)
            return self._apply(transitions.period_not_found)

        period = lookup.period
        log.info("period_fetched", period_id=period.id, subject_id=period.subject_id)
        self._apply(transitions.period_loaded, period)

        try:
            subjects = await self.service.subjects_for_class(slot.class_id)
        except ErpApiError as e:
            if self._stale(generation, "subjects_for_class"):
                return self._state
            log.warning("subject_list_failed", class_id=slot.class_id, error=str(e))
            self._notify(_error("Failed to fetch subjects for this class."))
            self._apply(transitions.options_unavailable)
            return self._apply(transitions.settled)

        if self._stale(generation, "subjects_for_class"):
            return self._state

        self._apply(transitions.subjects_loaded, subjects.subjects)
        if not subjects.subjects:
            self._notify(NO_SUBJECTS)
            return self._apply(transitions.settled)

        if period.subject_id and not await self._load_teachers(
            generation, period.subject_id, on_failure=transitions.teachers_unavailable
        ):
            return self._state
        return self._apply(transitions.settled)

    async def _load_teachers(self, generation: int, subject_id: str, on_failure=None) -> bool:
        """Query teachers for subject_id; False if the answer arrived too late.

        On failure the teacher options are emptied. ``on_failure`` overrides
        that, e.g. to keep the stored teacher of a freshly loaded period.
        """
        try:
            result = await self.service.teachers_for_subject(subject_id)
        except ErpApiError as e:
            if self._stale(generation, "teachers_for_subject"):
                return False
            log.warning("teacher_list_failed", subject_id=subject_id, error=str(e))
            self._notify(_error("Failed to fetch teachers for this subject."))
            if on_failure is not None:
                self._apply(on_failure)
            else:
                self._apply(transitions.teachers_loaded, [])
            return True

        if self._stale(generation, "teachers_for_subject"):
            return False
        if not result.teachers:
            self._notify(NO_TEACHERS)
        self._apply(transitions.teachers_loaded, result.teachers)
        return True

    # -- subject / teacher ----------------------------------------------

    async def select_subject(self, subject_id: str) -> EditorState:
        """Switch subject and replace the teacher options with its teachers."""
        if self._state.phase is not EditorPhase.LOADED:
            log.debug("subject_selection_ignored", phase=self._state.phase.value)
            return self._state

        self._apply(transitions.subject_selected, subject_id)
        generation = self._bump()
        if not await self._load_teachers(generation, subject_id):
            return self._state
        return self._apply(transitions.settled)

    def select_teacher(self, teacher_id: str) -> EditorState:
        if self._state.phase is not EditorPhase.LOADED or not self._state.teacher_selectable:
            log.debug("teacher_selection_ignored", phase=self._state.phase.value)
            return self._state
        return self._apply(transitions.teacher_selected, teacher_id)

    # -- update ---------------------------------------------------------

    async def update(self) -> EditorState:
        """Submit the loaded period with the current subject/teacher."""
        state = self._state
        if not state.can_update:
            log.debug("update_ignored", phase=state.phase.value, period_id=state.period_id)
            return state

        generation = self._generation
        payload = PeriodUpdate(
            class_id=state.class_id,
            day=state.day,
            period_number=state.period_number,
            subject_id=state.subject_id,
            teacher_id=state.teacher_id,
        )
        self._apply(transitions.update_started)

        try:
            result = await self.service.update_period(state.period_id, payload)
        except ErpApiError as e:
            if self._stale(generation, "update_period"):
                return self._state
            log.warning("period_update_failed", period_id=state.period_id, error=str(e))
            self._notify(_error(e.message or "Failed to update period. Please try again."))
            return self._apply(transitions.update_failed)

        if self._stale(generation, "update_period"):
            return self._state

        log.info("period_updated", period_id=state.period_id)
        self._notify(
            Notice(
                title="Period Updated",
                description=result.message or "Period updated successfully.",
            )
        )
        return self._apply(transitions.update_succeeded)
