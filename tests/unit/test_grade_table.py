from __future__ import annotations

import math
import unittest

import numpy as np

from tests.unit._bootstrap import ensure_project_on_path


ensure_project_on_path()


class TestGradeTable(unittest.TestCase):
    def test_grade_factor_basics(self) -> None:
        from core.grade_table import grade_factor

        self.assertAlmostEqual(grade_factor(0.0), 1.0, places=6)
        self.assertGreater(grade_factor(5.0), 1.0)
        self.assertLess(grade_factor(-5.0), 1.0)

    def test_monotone_on_uphill_range(self) -> None:
        from core.grade_table import grade_factor

        grades = np.linspace(0.0, 50.0, 501)
        factors = grade_factor(grades)
        self.assertTrue(np.all(np.diff(factors) >= -1e-12))

    def test_bounded_everywhere(self) -> None:
        from core.grade_table import grade_factor

        grades = np.linspace(-80.0, 80.0, 1601)
        factors = grade_factor(grades)
        self.assertTrue(np.all(factors >= 0.5))
        self.assertTrue(np.all(factors <= 3.0))

    def test_grade_is_clamped_to_fifty_percent(self) -> None:
        from core.grade_table import grade_factor

        self.assertEqual(grade_factor(120.0), grade_factor(50.0))
        self.assertEqual(grade_factor(-120.0), grade_factor(-50.0))

    def test_tangents_join_polynomial(self) -> None:
        from core.grade_table import LEFT_END, POLY_COEFFS, SLOPE_LEFT, INTERCEPT_LEFT

        a0, a1, a2, a3, a4 = POLY_COEFFS
        g = LEFT_END
        poly = a4 * g**4 + a3 * g**3 + a2 * g**2 + a1 * g + a0
        self.assertAlmostEqual(poly, SLOPE_LEFT * g + INTERCEPT_LEFT, places=3)

    def test_steep_descent_slows_down_again(self) -> None:
        from core.grade_table import grade_factor

        self.assertGreater(grade_factor(-40.0), grade_factor(-10.0))

    def test_non_finite_grade_gives_nan(self) -> None:
        from core.grade_table import grade_factor

        self.assertTrue(math.isnan(grade_factor(float("nan"))))

    def test_scalar_in_scalar_out(self) -> None:
        from core.grade_table import grade_factor

        self.assertIsInstance(grade_factor(3.0), float)
        self.assertEqual(grade_factor(np.array([0.0, 3.0])).shape, (2,))


if __name__ == "__main__":
    unittest.main()
