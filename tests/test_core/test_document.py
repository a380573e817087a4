"""
Tests for the document model.
"""

import unittest

from inkboard.core.document import Document, replace_shapes_by_id
from inkboard.core.shapes import Point, Rectangle, Ellipse, BrushPath, Group, BoundingBox


class TestDocument(unittest.TestCase):
    """Test Document container operations."""

    def setUp(self):
        self.rect = Rectangle(x=0, y=0, width=10, height=10)
        self.ellipse = Ellipse(x=20, y=0, width=10, height=10)
        self.inner = BrushPath(points=[Point(0, 0), Point(5, 5)])
        self.group = Group(children=[self.inner])
        self.document = Document(shapes=[self.rect, self.ellipse, self.group])

    def test_add_and_remove(self):
        extra = Rectangle(width=1, height=1)
        self.document.add_shape(extra)
        self.assertIs(self.document.shapes[-1], extra)
        self.assertTrue(self.document.remove_shape(extra.id))
        self.assertFalse(self.document.remove_shape(extra.id))

    def test_find_nested_shape(self):
        self.assertIs(self.document.get_shape_by_id(self.inner.id), self.inner)
        self.assertIsNone(self.document.get_shape_by_id(Rectangle().id))

    def test_update_nested_shape(self):
        """Updating a group child rebuilds only that group."""
        moved = BrushPath(id=self.inner.id, points=[Point(1, 1), Point(6, 6)])
        self.document.update_shapes({moved.id: moved})

        self.assertIs(self.document.shapes[0], self.rect)
        self.assertIs(self.document.shapes[1], self.ellipse)
        new_group = self.document.shapes[2]
        self.assertEqual(new_group.id, self.group.id)
        self.assertIs(new_group.children[0], moved)

    def test_untouched_subtree_keeps_identity(self):
        result = replace_shapes_by_id([self.group], {})
        self.assertIs(result[0], self.group)

    def test_design_bounds(self):
        bounds = self.document.get_design_bounds()
        self.assertEqual(bounds, BoundingBox(0, 0, 30, 10))

    def test_design_bounds_empty(self):
        self.assertIsNone(Document().get_design_bounds())


if __name__ == '__main__':
    unittest.main()
