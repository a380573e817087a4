"""
Tests for geometry helpers.
"""

import unittest
import math

from inkboard.core.shapes import Point, Anchor
from inkboard.core.geometry import (
    distance, rotate_about_center, snap_angle, lerp, safe_divisor,
    sample_anchors, segment_intersection, point_in_polygon,
    distance_to_segment, polyline_length, polygon_area, is_closed, SCALE_EPSILON
)


class TestBasicGeometry(unittest.TestCase):
    """Test point helpers."""

    def test_distance(self):
        self.assertAlmostEqual(distance(Point(1, 1), Point(4, 5)), 5.0)

    def test_rotate_about_center_inverse(self):
        """Rotating forward then back returns the original point."""
        p = Point(13.5, -7.25)
        c = Point(3, 4)
        back = rotate_about_center(rotate_about_center(p, c, 1.2), c, -1.2)
        self.assertAlmostEqual(back.x, p.x)
        self.assertAlmostEqual(back.y, p.y)

    def test_snap_angle_preserves_length(self):
        """Snapping keeps the distance and rounds to 45 degrees."""
        origin = Point(0, 0)
        snapped = snap_angle(Point(10, 1), origin)
        self.assertAlmostEqual(snapped.x, math.hypot(10, 1))
        self.assertAlmostEqual(snapped.y, 0.0)

        diagonal = snap_angle(Point(10, 9), origin)
        self.assertAlmostEqual(diagonal.x, diagonal.y)
        self.assertAlmostEqual(distance(origin, diagonal), math.hypot(10, 9))

    def test_lerp_unclamped(self):
        self.assertEqual(lerp(Point(0, 0), Point(10, 20), 0.5), Point(5, 10))
        self.assertEqual(lerp(Point(0, 0), Point(10, 20), 2), Point(20, 40))

    def test_safe_divisor(self):
        """Near-zero divisors become a signed epsilon."""
        self.assertEqual(safe_divisor(0.0), SCALE_EPSILON)
        self.assertEqual(safe_divisor(-1e-12), -SCALE_EPSILON)
        self.assertEqual(safe_divisor(2.0), 2.0)


class TestSampling(unittest.TestCase):
    """Test path flattening."""

    def test_straight_segments_not_subdivided(self):
        anchors = [Anchor.corner(Point(0, 0)), Anchor.corner(Point(10, 0))]
        self.assertEqual(sample_anchors(anchors), [Point(0, 0), Point(10, 0)])

    def test_closed_path_returns_to_start(self):
        anchors = [Anchor.corner(Point(0, 0)), Anchor.corner(Point(10, 0)),
                   Anchor.corner(Point(10, 10))]
        points = sample_anchors(anchors, closed=True)
        self.assertEqual(points[-1], Point(0, 0))
        self.assertTrue(is_closed(points))

    def test_curved_segment_sampled(self):
        anchors = [
            Anchor(Point(0, 0), Point(0, 0), Point(0, 10)),
            Anchor(Point(10, 0), Point(10, 10), Point(10, 0)),
        ]
        points = sample_anchors(anchors, steps=20)
        self.assertEqual(len(points), 21)
        self.assertEqual(points[-1], Point(10, 0))
        # Midpoint of this symmetric curve is at y = 7.5
        self.assertAlmostEqual(points[10].y, 7.5)


class TestIntersections(unittest.TestCase):
    """Test segment and polygon predicates."""

    def test_crossing_segments(self):
        result = segment_intersection(Point(0, 0), Point(10, 0), Point(5, -5), Point(5, 5))
        self.assertIsNotNone(result)
        point, t, u = result
        self.assertAlmostEqual(point.x, 5)
        self.assertAlmostEqual(t, 0.5)
        self.assertAlmostEqual(u, 0.5)

    def test_parallel_segments(self):
        self.assertIsNone(segment_intersection(Point(0, 0), Point(10, 0), Point(0, 1), Point(10, 1)))

    def test_collinear_segments(self):
        self.assertIsNone(segment_intersection(Point(0, 0), Point(10, 0), Point(5, 0), Point(15, 0)))

    def test_disjoint_segments(self):
        self.assertIsNone(segment_intersection(Point(0, 0), Point(1, 0), Point(5, -5), Point(5, 5)))

    def test_point_in_polygon(self):
        square = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]
        self.assertTrue(point_in_polygon(Point(5, 5), square))
        self.assertFalse(point_in_polygon(Point(15, 5), square))
        self.assertFalse(point_in_polygon(Point(5, 5), square[:2]))

    def test_distance_to_segment(self):
        self.assertAlmostEqual(distance_to_segment(Point(5, 3), Point(0, 0), Point(10, 0)), 3)
        self.assertAlmostEqual(distance_to_segment(Point(13, 4), Point(0, 0), Point(10, 0)), 5)

    def test_polyline_length(self):
        self.assertAlmostEqual(polyline_length([Point(0, 0), Point(3, 4), Point(3, 10)]), 11)

    def test_polygon_area(self):
        square = [Point(0, 0), Point(0, 10), Point(10, 10), Point(10, 0)]
        self.assertAlmostEqual(polygon_area(square), 100)
        self.assertAlmostEqual(polygon_area(list(reversed(square))), 100)
        self.assertEqual(polygon_area([Point(0, 0), Point(5, 0), Point(10, 0)]), 0)
        self.assertEqual(polygon_area([Point(0, 0), Point(5, 5)]), 0)


if __name__ == '__main__':
    unittest.main()
