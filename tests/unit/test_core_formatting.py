from __future__ import annotations

import unittest

from tests.unit._bootstrap import ensure_project_on_path


ensure_project_on_path()


class TestCoreFormatting(unittest.TestCase):
    def test_format_duration_clock(self) -> None:
        from core.formatting import format_duration_clock

        self.assertEqual(format_duration_clock(None), "-")
        self.assertEqual(format_duration_clock(float("nan")), "-")
        self.assertEqual(format_duration_clock(302), "5:02")
        self.assertEqual(format_duration_clock(3723), "1:02:03")

    def test_format_elapsed_time(self) -> None:
        from core.formatting import format_elapsed_time

        self.assertEqual(format_elapsed_time(1500), "00:25:00")
        self.assertEqual(format_elapsed_time(36125), "10:02:05")

    def test_format_delay(self) -> None:
        from core.formatting import format_delay

        self.assertEqual(format_delay(0), "No delay")
        self.assertEqual(format_delay(45), "45s")
        self.assertEqual(format_delay(120), "2m")
        self.assertEqual(format_delay(150), "2m 30s")
        self.assertEqual(format_delay(3900), "1h 5m")
        self.assertEqual(format_delay(3605), "1h 5s")

    def test_format_grade(self) -> None:
        from core.formatting import format_grade

        self.assertEqual(format_grade(0.3), "flat")
        self.assertEqual(format_grade(4.24), "4.2% uphill")
        self.assertEqual(format_grade(-3.0), "3.0% downhill")

    def test_format_pace_adjustment(self) -> None:
        from core.formatting import format_pace_adjustment

        self.assertEqual(format_pace_adjustment(0.4), "no adjustment")
        self.assertEqual(format_pace_adjustment(12.2), "12s slower per km")
        self.assertEqual(format_pace_adjustment(-65, "per_mile"), "1:05 faster per mile")


if __name__ == "__main__":
    unittest.main()
