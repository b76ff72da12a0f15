"""
Unit Tests: weekly grid helpers
"""

import unittest

from src.schoolerp.grid import build_grid, format_grid, free_slots
from src.schoolerp.models import TimetableEntry, Weekday

ENTRIES = [
    TimetableEntry(day="Monday", period=1, subject_name="Math", teacher_name="Alice Moore", room="R101"),
    TimetableEntry(day="Monday", period=2, subject_name="Science", teacher_name="Bob Khan"),
    TimetableEntry(day="Saturday", period=8, subject_name="Art", teacher_name="Cara Diaz", class_name="7 - C"),
]


class TestGrid(unittest.TestCase):
    def test_build_grid_places_entries(self):
        grid = build_grid(ENTRIES)

        self.assertEqual(len(grid), 6)
        self.assertEqual(grid[Weekday.MONDAY][1].subject_name, "Math")
        self.assertIsNone(grid[Weekday.TUESDAY][1])
        self.assertEqual(grid[Weekday.SATURDAY][8].teacher_name, "Cara Diaz")

    def test_free_slots(self):
        free = free_slots(ENTRIES)

        self.assertEqual(len(free), 6 * 8 - 3)
        self.assertEqual((free[0].day, free[0].period), (Weekday.MONDAY, 3))
        self.assertNotIn((Weekday.SATURDAY, 8), [(slot.day, slot.period) for slot in free])

    def test_format_grid(self):
        table = format_grid(ENTRIES)
        lines = table.splitlines()

        self.assertTrue(lines[0].startswith("Day"))
        self.assertIn("P8", lines[0])
        self.assertEqual(len(lines), 2 + 6)
        self.assertIn("Math / Alice Moore (R101)", lines[2])
        self.assertIn("Free", lines[3])

    def test_format_grid_for_teacher_shows_class(self):
        table = format_grid(ENTRIES, detail="class_name")

        self.assertIn("Art / 7 - C", table)
        self.assertIn("Math / -", table)

    def test_empty(self):
        self.assertEqual(format_grid([]), "(no periods scheduled)")


if __name__ == "__main__":
    unittest.main()
