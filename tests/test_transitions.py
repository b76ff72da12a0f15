"""
Unit Tests: editor transitions

Transitions are pure: each returns a new EditorState and leaves its input alone.
"""

import unittest

from pydantic import ValidationError as PydanticValidationError

from src.schoolerp.editor import transitions
from src.schoolerp.editor.state import EditorPhase, EditorState, UpdateOutcome
from src.schoolerp.models import ClassRef, Period, SubjectRef, TeacherRef, Weekday


def loaded_state() -> EditorState:
    state = transitions.classes_loaded(
        transitions.opened(EditorState()), [ClassRef(id="c1", grade="7", section="C")]
    )
    state = transitions.class_selected(state, "c1")
    state = transitions.day_selected(state, "friday")
    state = transitions.period_selected(state, 2)
    state = transitions.fetch_started(state)
    state = transitions.period_loaded(
        state,
        Period(id="p1", class_id="c1", day="Friday", period_number=2, subject_id="art", teacher_id="t1"),
    )
    state = transitions.subjects_loaded(state, [SubjectRef(id="art", name="Art")])
    state = transitions.teachers_loaded(state, [TeacherRef(id="t1", first_name="Ines")])
    return transitions.settled(state)


class TestTransitions(unittest.TestCase):
    def test_state_is_immutable(self):
        state = EditorState()
        with self.assertRaises(PydanticValidationError):
            state.phase = EditorPhase.LOADED

    def test_transition_returns_new_state(self):
        before = loaded_state()

        after = transitions.update_succeeded(before)

        self.assertIsNot(before, after)
        self.assertEqual(before.phase, EditorPhase.LOADED)
        self.assertEqual(before.subject_id, "art")
        self.assertEqual(after.phase, EditorPhase.SELECTING_SLOT)
        self.assertEqual(after.last_update, UpdateOutcome.SUCCEEDED)

    def test_open_moves_to_class_pending(self):
        state = transitions.opened(loaded_state())

        self.assertEqual(state, EditorState(phase=EditorPhase.CLASS_PENDING))

    def test_slot_selection_while_classes_load_keeps_phase(self):
        state = transitions.day_selected(transitions.opened(EditorState()), Weekday.TUESDAY)

        self.assertEqual(state.phase, EditorPhase.CLASS_PENDING)
        self.assertEqual(state.day, Weekday.TUESDAY)

    def test_day_is_parsed_case_insensitively(self):
        state = loaded_state()

        self.assertEqual(state.day, Weekday.FRIDAY)

    def test_invalid_slot_values_rejected(self):
        state = transitions.opened(EditorState())
        with self.assertRaises(ValueError):
            transitions.period_selected(state, 9)
        with self.assertRaises(ValueError):
            transitions.period_selected(state, 0)
        with self.assertRaises(ValueError):
            transitions.day_selected(state, "Sunday")
        with self.assertRaises(ValueError):
            transitions.class_selected(state, "")

    def test_teachers_loaded_clears_unqualified_teacher(self):
        state = transitions.teachers_loaded(loaded_state(), [TeacherRef(id="t2", first_name="Jo")])

        self.assertIsNone(state.teacher_id)
        self.assertTrue(state.teacher_selectable)

    def test_empty_teacher_list_disables_selection(self):
        state = transitions.teachers_loaded(loaded_state(), [])

        self.assertIsNone(state.teacher_id)
        self.assertFalse(state.teacher_selectable)

    def test_unavailable_options_keep_stored_pairing(self):
        for transition in (transitions.options_unavailable, transitions.teachers_unavailable):
            with self.subTest(transition=transition.__name__):
                state = transition(loaded_state())

                self.assertEqual((state.subject_id, state.teacher_id), ("art", "t1"))
                self.assertEqual(state.teachers, ())
                self.assertFalse(state.teacher_selectable)
                self.assertTrue(state.can_update)

        self.assertEqual(transitions.options_unavailable(loaded_state()).subjects, ())
        self.assertEqual(len(transitions.teachers_unavailable(loaded_state()).subjects), 1)

    def test_update_failed_returns_to_loaded(self):
        state = transitions.update_failed(transitions.update_started(loaded_state()))

        self.assertEqual(state.phase, EditorPhase.LOADED)
        self.assertEqual(state.period_id, "p1")
        self.assertEqual(state.last_update, UpdateOutcome.FAILED)

    def test_not_found_keeps_slot(self):
        state = transitions.period_not_found(transitions.fetch_started(loaded_state()))

        self.assertEqual(state.phase, EditorPhase.NOT_FOUND)
        self.assertEqual((state.class_id, state.day, state.period_number), ("c1", Weekday.FRIDAY, 2))
        self.assertEqual(state.classes[0].label, "7 - C")

    def test_closed_clears_everything(self):
        self.assertEqual(transitions.closed(loaded_state()), EditorState())


if __name__ == "__main__":
    unittest.main()
