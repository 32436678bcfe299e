from __future__ import annotations

import math
import unittest

from aesplot import (
    CategoricalDomain,
    NumericDomain,
    build_coord,
    build_panel_coord,
    build_scale,
    munch_arc,
    polar_pixel_projector,
)
from aesplot.coords import ARC_SEGMENTS


X_DOMAIN = NumericDomain(0.0, 10.0)
Y_DOMAIN = NumericDomain(-2.0, 5.0)


class CartesianCoordTests(unittest.TestCase):
    def test_domain_boundaries_land_inside_margins(self) -> None:
        width, height, margin = 200.0, 120.0, 25.0
        coord = build_panel_coord("cartesian", X_DOMAIN, Y_DOMAIN, width, height, margin)
        for dx in (X_DOMAIN.lo, X_DOMAIN.hi):
            for dy in (Y_DOMAIN.lo, Y_DOMAIN.hi):
                px, py = coord.project(dx, dy)
                self.assertGreaterEqual(px, margin)
                self.assertLessEqual(px, width - margin)
                self.assertGreaterEqual(py, margin)
                self.assertLessEqual(py, height - margin)

    def test_y_grows_upward(self) -> None:
        coord = build_panel_coord("cartesian", X_DOMAIN, Y_DOMAIN, 200.0, 120.0, 25.0)
        self.assertEqual(coord.project(0.0, -2.0), (25.0, 95.0))
        self.assertEqual(coord.project(10.0, 5.0), (175.0, 25.0))

    def test_rect_is_four_projected_corners(self) -> None:
        coord = build_panel_coord("cartesian", X_DOMAIN, Y_DOMAIN, 200.0, 120.0, 25.0)
        self.assertEqual(coord.rect(30.0, 40.0, 90.0, 60.0), ((30.0, 60.0), (40.0, 60.0), (40.0, 90.0), (30.0, 90.0)))


class FlipCoordTests(unittest.TestCase):
    def test_flip_matches_cartesian_with_swapped_arguments(self) -> None:
        width, height, margin = 300.0, 200.0, 20.0
        # flip: scales built against swapped domains, projector swaps arguments
        sx = build_scale(Y_DOMAIN, (margin, width - margin))
        sy = build_scale(X_DOMAIN, (height - margin, margin))
        flip = build_coord("flip", sx, sy, width, height, margin)

        cx = build_scale(Y_DOMAIN, (margin, width - margin))
        cy = build_scale(X_DOMAIN, (height - margin, margin))
        cartesian = build_coord("cartesian", cx, cy, width, height, margin)

        for a, b in ((0.0, -2.0), (3.5, 1.25), (10.0, 5.0), (7.0, 0.0)):
            fx, fy = flip(a, b)
            cx_, cy_ = cartesian(b, a)
            self.assertAlmostEqual(fx, cx_)
            self.assertAlmostEqual(fy, cy_)

    def test_panel_coord_swaps_domains_for_flip(self) -> None:
        flip = build_panel_coord("flip", X_DOMAIN, Y_DOMAIN, 300.0, 200.0, 20.0)
        cartesian = build_panel_coord("cartesian", Y_DOMAIN, X_DOMAIN, 300.0, 200.0, 20.0)
        self.assertEqual(flip.scale_x.domain, Y_DOMAIN)
        self.assertEqual(flip.scale_y.domain, X_DOMAIN)
        self.assertIs(flip.x_data_scale, flip.scale_y)
        for a, b in ((1.0, 2.0), (9.0, -1.5)):
            fx, fy = flip.project(a, b)
            cx, cy = cartesian.project(b, a)
            self.assertAlmostEqual(fx, cx)
            self.assertAlmostEqual(fy, cy)

    def test_category_bands_run_vertically_under_flip(self) -> None:
        coord = build_panel_coord("flip", CategoricalDomain(("a", "b")), NumericDomain(0.0, 4.0), 300.0, 200.0, 20.0)
        lo, hi = coord.x_band("a")
        corners = coord.rect(lo, hi, coord.y_data_scale(0.0), coord.y_data_scale(4.0))
        ys = {round(p[1], 6) for p in corners}
        xs = {round(p[0], 6) for p in corners}
        self.assertEqual(ys, {round(lo, 6), round(hi, 6)})
        self.assertEqual(xs, {20.0, 280.0})


class PolarCoordTests(unittest.TestCase):
    def test_angle_zero_points_straight_up(self) -> None:
        project = polar_pixel_projector(100.0, 100.0, 10.0)
        x, y = project(10.0, 10.0)
        self.assertAlmostEqual(x, 50.0)
        self.assertAlmostEqual(y, 10.0)

    def test_projection_is_injective_on_angle(self) -> None:
        project = polar_pixel_projector(100.0, 100.0, 10.0)
        seen = set()
        for i in range(64):
            px = 10.0 + 80.0 * i / 64.0
            x, y = project(px, 50.0)
            key = (round(x, 6), round(y, 6))
            self.assertNotIn(key, seen)
            seen.add(key)
            self.assertAlmostEqual(math.hypot(x - 50.0, y - 50.0), 20.0)

    def test_unit_square_corners_stay_inside_radius(self) -> None:
        unit = NumericDomain(0.0, 1.0)
        sx = build_scale(unit, (10.0, 90.0))
        sy = build_scale(unit, (90.0, 10.0))
        project = build_coord("polar", sx, sy, 100.0, 100.0, 10.0)
        for corner in ((0.0, 0.0), (0.0, 1.0), (1.0, 0.0), (1.0, 1.0)):
            x, y = project(*corner)
            self.assertLessEqual(math.hypot(x - 50.0, y - 50.0), 40.0 + 1e-9)

    def test_arc_munching_samples_both_edges(self) -> None:
        coord = build_panel_coord("polar", X_DOMAIN, Y_DOMAIN, 100.0, 100.0, 10.0)
        self.assertEqual(coord.arc_segments, ARC_SEGMENTS)
        outline = coord.rect(10.0, 30.0, 90.0, 30.0)
        self.assertEqual(len(outline), 2 * (ARC_SEGMENTS + 1))
        outer = [math.hypot(x - 50.0, y - 50.0) for x, y in outline[: ARC_SEGMENTS + 1]]
        inner = [math.hypot(x - 50.0, y - 50.0) for x, y in outline[ARC_SEGMENTS + 1 :]]
        for r in outer:
            self.assertAlmostEqual(r, 30.0)
        for r in inner:
            self.assertAlmostEqual(r, 0.0)

    def test_munch_arc_with_one_segment_is_a_quad(self) -> None:
        outline = munch_arc(lambda a, b: (a, b), 0.0, 1.0, 0.0, 2.0, 1)
        self.assertEqual(outline, ((0.0, 2.0), (1.0, 2.0), (1.0, 0.0), (0.0, 0.0)))


if __name__ == "__main__":
    unittest.main()
