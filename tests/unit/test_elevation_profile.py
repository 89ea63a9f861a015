from __future__ import annotations

import math
import unittest

import numpy as np

from tests.unit._bootstrap import ensure_project_on_path


ensure_project_on_path()


def _profile(pairs):
    from core.elevation_profile import ElevationPoint, build_profile

    return build_profile(
        ElevationPoint(distance=float(d), elevation=float(e), lat=45.0 + i * 0.001, lng=6.0)
        for i, (d, e) in enumerate(pairs)
    )


class TestExtraction(unittest.TestCase):
    def test_distances_accumulate_across_geometries(self) -> None:
        from core.elevation_profile import extract_elevation_profile

        geometries = [
            [(45.0, 6.0, 100.0), (45.001, 6.0, 110.0)],
            [(45.002, 6.0, 120.0)],
        ]
        profile = extract_elevation_profile(geometries)
        self.assertEqual(len(profile), 3)
        self.assertEqual(profile.distances[0], 0.0)
        # ~111 m per 0.001 degree of latitude
        self.assertAlmostEqual(profile.distances[1], 111.2, delta=1.0)
        self.assertAlmostEqual(profile.total_distance, 2 * profile.distances[1], delta=0.01)
        self.assertTrue(np.all(np.diff(profile.distances) >= 0))

    def test_missing_elevation_defaults_to_zero(self) -> None:
        from core.elevation_profile import extract_elevation_profile

        profile = extract_elevation_profile([[(45.0, 6.0), (45.001, 6.0, None), (45.002, 6.0, float("nan"))]])
        self.assertEqual(list(profile.elevations), [0.0, 0.0, 0.0])

    def test_invalid_coordinates_are_skipped_and_reported(self) -> None:
        from core.elevation_profile import extract_elevation_profile
        from core.transform_report import TransformReport

        report = TransformReport()
        profile = extract_elevation_profile(
            [[(45.0, 6.0, 1.0), ("x", 6.0, 1.0), (95.0, 6.0, 1.0), None, (45.001, 6.0, 2.0)]],
            report=report,
        )
        self.assertEqual(len(profile), 2)
        step = report.step("profile:valid_coordinates")
        self.assertIsNotNone(step)
        self.assertEqual(step.dropped, 3)
        self.assertEqual(report.total_dropped(), 3)

    def test_malformed_input_gives_empty_profile(self) -> None:
        from core.elevation_profile import extract_elevation_profile

        self.assertTrue(extract_elevation_profile(None).is_empty)
        self.assertTrue(extract_elevation_profile([]).is_empty)
        self.assertTrue(extract_elevation_profile([42]).is_empty)

    def test_has_elevation_samples(self) -> None:
        from core.elevation_profile import has_elevation_samples

        self.assertFalse(has_elevation_samples([[(45.0, 6.0), (45.1, 6.0, None)]]))
        self.assertTrue(has_elevation_samples([[(45.0, 6.0), (45.1, 6.0, 12.0)]]))

    def test_profile_arrays_are_read_only(self) -> None:
        profile = _profile([(0, 10), (100, 20)])
        with self.assertRaises(ValueError):
            profile.distances[0] = 5.0


class TestInterpolation(unittest.TestCase):
    def test_knots_are_exact(self) -> None:
        from core.elevation_profile import interpolate

        profile = _profile([(0, 100), (250, 137.5), (900, 80), (1000, 95)])
        for p in profile.points:
            hit = interpolate(profile, p.distance)
            self.assertEqual(hit.elevation, p.elevation)
            self.assertEqual(hit.lat, p.lat)

    def test_linear_between_knots(self) -> None:
        from core.elevation_profile import interpolate

        profile = _profile([(0, 100), (100, 120)])
        self.assertAlmostEqual(interpolate(profile, 25).elevation, 105.0)

    def test_clamps_outside_extent(self) -> None:
        from core.elevation_profile import interpolate

        profile = _profile([(0, 100), (100, 120)])
        self.assertEqual(interpolate(profile, -50).elevation, 100.0)
        self.assertEqual(interpolate(profile, 500).elevation, 120.0)

    def test_duplicate_distance_later_point_wins(self) -> None:
        from core.elevation_profile import interpolate

        profile = _profile([(0, 100), (50, 110), (50, 130), (100, 140)])
        self.assertEqual(interpolate(profile, 50).elevation, 130.0)

    def test_empty_profile(self) -> None:
        from core.elevation_profile import EMPTY_PROFILE, elevations_at, interpolate

        self.assertIsNone(interpolate(EMPTY_PROFILE, 10))
        self.assertTrue(np.all(np.isnan(elevations_at(EMPTY_PROFILE, [0.0, 1.0]))))

    def test_nan_distance(self) -> None:
        from core.elevation_profile import interpolate

        self.assertIsNone(interpolate(_profile([(0, 1), (10, 2)]), float("nan")))


class TestGrade(unittest.TestCase):
    def test_constant_slope(self) -> None:
        from core.elevation_profile import grade_at

        profile = _profile([(0, 0), (1000, 100)])
        self.assertAlmostEqual(grade_at(profile, 500, 100), 10.0)

    def test_window_clamped_at_edges_divides_by_full_window(self) -> None:
        from core.elevation_profile import grade_at

        profile = _profile([(0, 0), (1000, 100)])
        # window [-50, 50] clamps to [0, 50]: 5 m over a 100 m window
        self.assertAlmostEqual(grade_at(profile, 0, 100), 5.0)

    def test_degenerate_window_or_profile(self) -> None:
        from core.elevation_profile import grade_at

        profile = _profile([(0, 0), (1000, 100)])
        self.assertEqual(grade_at(profile, 500, 0), 0.0)
        self.assertEqual(grade_at(profile, 500, -10), 0.0)
        self.assertEqual(grade_at(_profile([(0, 10)]), 0, 100), 0.0)


class TestGainLossAndStats(unittest.TestCase):
    def test_segment_gain_loss_uses_inner_vertices(self) -> None:
        from core.elevation_profile import segment_gain_loss

        profile = _profile([(0, 100), (100, 150), (200, 120), (300, 130)])
        gain, loss = segment_gain_loss(profile, 0, 300)
        self.assertAlmostEqual(gain, 60.0)
        self.assertAlmostEqual(loss, 30.0)

        gain, loss = segment_gain_loss(profile, 50, 150)
        self.assertAlmostEqual(gain, 25.0)
        self.assertAlmostEqual(loss, 15.0)

    def test_profile_stats(self) -> None:
        from core.elevation_profile import EMPTY_PROFILE, profile_stats

        stats = profile_stats(_profile([(0, 100), (100, 150), (200, 120)]))
        self.assertEqual(stats["min_elevation_m"], 100.0)
        self.assertEqual(stats["max_elevation_m"], 150.0)
        self.assertEqual(stats["total_distance_m"], 200.0)
        self.assertEqual(stats["elevation_gain_m"], 50.0)
        self.assertEqual(stats["elevation_loss_m"], 30.0)
        self.assertEqual(profile_stats(EMPTY_PROFILE)["total_distance_m"], 0.0)
        self.assertFalse(math.isnan(profile_stats(EMPTY_PROFILE)["elevation_gain_m"]))


if __name__ == "__main__":
    unittest.main()
