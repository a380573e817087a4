"""
Inkboard Core Module

Contains the fundamental data structures: shapes, geometry helpers,
the document model and editor settings.
"""

from .shapes import (
    Point, BoundingBox, ShapeStyle, Anchor, Shape, BoxShape,
    Rectangle, Ellipse, ImageShape, Frame, TextShape, Polygon,
    VectorPath, BrushPath, Group
)
from .document import Document
from .settings import EditorSettings

__all__ = [
    'Point', 'BoundingBox', 'ShapeStyle', 'Anchor', 'Shape', 'BoxShape',
    'Rectangle', 'Ellipse', 'ImageShape', 'Frame', 'TextShape', 'Polygon',
    'VectorPath', 'BrushPath', 'Group', 'Document', 'EditorSettings'
]
