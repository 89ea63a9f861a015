from __future__ import annotations

import unittest

from tests.unit._bootstrap import ensure_project_on_path


ensure_project_on_path()


class TestPlanConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        from core.plan_config import PlanConfig

        plan = PlanConfig(pace=300.0)
        self.assertEqual(plan.pace_mode, "pace")
        self.assertIsNone(plan.target_time_seconds)
        self.assertEqual(plan.unit_meters, 1000.0)
        self.assertAlmostEqual(plan.base_pace_per_meter, 0.3)

    def test_mile_unit(self) -> None:
        from core.plan_config import PlanConfig

        plan = PlanConfig(pace=482.8032, pace_unit="per_mile")
        self.assertEqual(plan.unit_meters, 1609.344)
        self.assertAlmostEqual(plan.base_pace_per_meter, 0.3)

    def test_invalid_pace_has_no_base(self) -> None:
        from core.plan_config import PlanConfig

        for pace in (None, 0.0, -10.0, float("nan"), float("inf")):
            plan = PlanConfig(pace=pace)
            self.assertFalse(plan.has_valid_pace)
            self.assertIsNone(plan.base_pace_per_meter)

    def test_time_target_requires_positive_time(self) -> None:
        from core.plan_config import TimeTarget

        with self.assertRaises(ValueError):
            TimeTarget(target_time_seconds=0)
        with self.assertRaises(ValueError):
            TimeTarget(target_time_seconds=float("nan"))
        self.assertEqual(TimeTarget(target_time_seconds=1800).mode, "time")

    def test_from_fields(self) -> None:
        from core.plan_config import NormalizedTarget, PlanConfig

        plan = PlanConfig.from_fields(pace=300, pace_unit="min_per_mi", pace_mode="normalized")
        self.assertEqual(plan.pace_unit, "per_mile")
        self.assertIsInstance(plan.target, NormalizedTarget)

        timed = PlanConfig.from_fields(pace_mode="time", target_time_seconds=1800)
        self.assertEqual(timed.target_time_seconds, 1800.0)

    def test_from_fields_parses_mmss_pace(self) -> None:
        from core.plan_config import PlanConfig

        self.assertEqual(PlanConfig.from_fields(pace="5:30").pace, 330.0)
        with self.assertRaises(ValueError):
            PlanConfig.from_fields(pace="5")

    def test_from_fields_rejects_invalid_combinations(self) -> None:
        from core.plan_config import PlanConfig

        with self.assertRaises(ValueError):
            PlanConfig.from_fields(pace=300, pace_mode="time")
        with self.assertRaises(ValueError):
            PlanConfig.from_fields(pace=300, pace_mode="sprint")
        with self.assertRaises(ValueError):
            PlanConfig.from_fields(pace=300, pace_unit="per_furlong")
        with self.assertRaises(ValueError):
            PlanConfig.from_fields(pace=300, pacing_strategy="negative")

    def test_linear_strategy_factor(self) -> None:
        from core.plan_config import PlanConfig

        plan = PlanConfig(pace=300.0, pacing_strategy="linear", pacing_linear_percent=10.0)
        self.assertAlmostEqual(plan.strategy_factor(0.0), 0.95)
        self.assertAlmostEqual(plan.strategy_factor(0.5), 1.0)
        self.assertAlmostEqual(plan.strategy_factor(1.0), 1.05)

    def test_linear_percent_is_clamped(self) -> None:
        from core.plan_config import PlanConfig

        plan = PlanConfig(pace=300.0, pacing_strategy="linear", pacing_linear_percent=400.0)
        self.assertEqual(plan.linear_fraction, 0.5)
        self.assertEqual(PlanConfig(pace=300.0).strategy_factor(0.0), 1.0)


if __name__ == "__main__":
    unittest.main()
