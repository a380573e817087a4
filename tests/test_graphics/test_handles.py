"""
Tests for resize handle geometry and selection handle layout.
"""

import unittest
import math

from inkboard.core.shapes import Point, BoundingBox, Rectangle, ImageShape, TextShape, BrushPath
from inkboard.graphics.handles import (
    ResizeHandle, HandleKind, handle_offset, opposite_handle, rotate_resize_handle,
    compute_selection_handles, compute_crop_handles, find_handle_at, SelectionHandle
)


class TestHandleGeometry(unittest.TestCase):
    """Test handle offsets and rotation mapping."""

    def test_offsets(self):
        self.assertEqual(handle_offset(ResizeHandle.TOP_LEFT, 100, 50), (-50, -25))
        self.assertEqual(handle_offset(ResizeHandle.RIGHT, 100, 50), (50, 0))
        self.assertEqual(handle_offset(ResizeHandle.BOTTOM, 100, 50), (0, 25))

    def test_opposites(self):
        self.assertEqual(opposite_handle(ResizeHandle.TOP_LEFT), ResizeHandle.BOTTOM_RIGHT)
        self.assertEqual(opposite_handle(ResizeHandle.LEFT), ResizeHandle.RIGHT)
        self.assertEqual(opposite_handle(ResizeHandle.BOTTOM), ResizeHandle.TOP)

    def test_rotate_resize_handle(self):
        self.assertEqual(rotate_resize_handle(ResizeHandle.TOP, math.pi / 2), ResizeHandle.RIGHT)
        self.assertEqual(rotate_resize_handle(ResizeHandle.TOP_LEFT, math.pi), ResizeHandle.BOTTOM_RIGHT)
        self.assertEqual(rotate_resize_handle(ResizeHandle.LEFT, 0), ResizeHandle.LEFT)
        self.assertEqual(rotate_resize_handle(ResizeHandle.RIGHT, -math.pi / 2), ResizeHandle.TOP)

    def test_rotate_resize_handle_nearest(self):
        """Arbitrary angles pick the closest compass direction."""
        self.assertEqual(rotate_resize_handle(ResizeHandle.TOP, math.radians(30)), ResizeHandle.TOP_RIGHT)
        self.assertEqual(rotate_resize_handle(ResizeHandle.TOP, math.radians(10)), ResizeHandle.TOP)


class TestSelectionHandles(unittest.TestCase):
    """Test handle layout for selections."""

    def test_empty(self):
        self.assertEqual(compute_selection_handles([]), [])

    def test_single_rect_resize_handles(self):
        rect = Rectangle(x=0, y=0, width=100, height=50)
        handles = compute_selection_handles([rect], rotate_handle_offset=20)
        self.assertEqual(len(handles), 9)
        resize = [h for h in handles if h.kind == HandleKind.RESIZE]
        self.assertEqual(len(resize), 8)
        by_handle = {h.handle: h for h in resize}
        self.assertEqual(by_handle[ResizeHandle.BOTTOM_RIGHT].position, Point(100, 50))
        rotate = handles[-1]
        self.assertEqual(rotate.kind, HandleKind.ROTATE)
        self.assertEqual(rotate.position, Point(50, -20))

    def test_rotated_rect_cursor(self):
        rect = Rectangle(x=0, y=0, width=100, height=50, rotation=math.pi / 2)
        handles = compute_selection_handles([rect])
        top = next(h for h in handles if h.handle == ResizeHandle.TOP)
        self.assertEqual(top.cursor_handle, ResizeHandle.RIGHT)
        # Top handle of a rect rotated 90 degrees sits right of the centre
        self.assertAlmostEqual(top.position.x, 75)
        self.assertAlmostEqual(top.position.y, 25)

    def test_multi_selection_scale_handles(self):
        shapes = [Rectangle(x=0, y=0, width=10, height=10), Rectangle(x=20, y=20, width=10, height=10)]
        handles = compute_selection_handles(shapes, rotate_handle_offset=5)
        kinds = {h.kind for h in handles}
        self.assertEqual(kinds, {HandleKind.SCALE, HandleKind.ROTATE})
        by_handle = {h.handle: h for h in handles if h.handle is not None}
        self.assertEqual(by_handle[ResizeHandle.BOTTOM_RIGHT].position, Point(30, 30))
        self.assertEqual(handles[-1].position, Point(15, -5))

    def test_text_and_paths_use_scale(self):
        for shape in (TextShape(width=10, height=10), BrushPath(points=[Point(0, 0), Point(5, 5)])):
            handles = compute_selection_handles([shape])
            self.assertEqual(handles[0].kind, HandleKind.SCALE)

    def test_crop_handles(self):
        image = ImageShape(x=100, y=100, width=200, height=100)
        handles = compute_crop_handles(image, BoundingBox(10, 10, 50, 60))
        by_handle = {h.handle: h for h in handles}
        self.assertEqual(by_handle[ResizeHandle.TOP_LEFT].position, Point(110, 110))
        self.assertEqual(by_handle[ResizeHandle.BOTTOM_RIGHT].position, Point(150, 160))
        self.assertTrue(all(h.kind == HandleKind.CROP for h in handles))


class TestFindHandle(unittest.TestCase):

    def test_nearest_within_radius(self):
        handles = [
            SelectionHandle(kind=HandleKind.SCALE, position=Point(0, 0)),
            SelectionHandle(kind=HandleKind.SCALE, position=Point(4, 0)),
        ]
        self.assertIs(find_handle_at(Point(3, 0), handles, 5), handles[1])
        self.assertIsNone(find_handle_at(Point(20, 0), handles, 5))


if __name__ == '__main__':
    unittest.main()
