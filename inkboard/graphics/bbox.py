"""
Bounding box computation for every shape variant.
"""

from typing import Iterable, List
import math

from ..core.shapes import (
    Point, BoundingBox, Shape, BoxShape, Ellipse, Polygon,
    VectorPath, BrushPath, Group
)
from ..core.geometry import sample_anchors
from .matrix import shape_matrix, is_plain_box, transform_points


def polygon_vertices(shape: Polygon) -> List[Point]:
    """Unrotated vertices of a regular polygon inscribed in its box, first at the top."""
    center = shape.center
    rx = shape.width / 2
    ry = shape.height / 2
    vertices = []
    for i in range(shape.sides):
        angle = -math.pi / 2 + 2 * math.pi * i / shape.sides
        vertices.append(Point(center.x + rx * math.cos(angle), center.y + ry * math.sin(angle)))
    return vertices


def box_corners(shape: BoxShape) -> List[Point]:
    """Unrotated corners of a box shape, clockwise from the top-left."""
    return [
        Point(shape.x, shape.y),
        Point(shape.x + shape.width, shape.y),
        Point(shape.x + shape.width, shape.y + shape.height),
        Point(shape.x, shape.y + shape.height),
    ]


def path_points(shape: Shape) -> List[Point]:
    """Polyline approximation of a brush or vector path."""
    if isinstance(shape, VectorPath):
        return sample_anchors(shape.anchors, shape.closed)
    if isinstance(shape, BrushPath):
        return list(shape.points)
    raise TypeError(f"Not a path shape: {type(shape).__name__}")


def _ellipse_bounds(shape: Ellipse) -> BoundingBox:
    # Exact extent of an affinely mapped ellipse
    m = shape_matrix(shape)
    rx = shape.width / 2
    ry = shape.height / 2
    half_x = math.hypot(m[0, 0] * rx, m[0, 1] * ry)
    half_y = math.hypot(m[1, 0] * rx, m[1, 1] * ry)
    c = shape.center
    return BoundingBox(c.x - half_x, c.y - half_y, c.x + half_x, c.y + half_y)


def get_shape_bounding_box(shape: Shape, include_stroke: bool = False) -> BoundingBox:
    """
    Calculate the axis-aligned bounding box of a shape in world space.

    Args:
        shape: Any shape variant
        include_stroke: Grow the box by half the stroke width

    Returns:
        BoundingBox (a zero box at the origin for empty paths and groups)
    """
    if isinstance(shape, Group):
        if not shape.children:
            return BoundingBox(0.0, 0.0, 0.0, 0.0)
        bounds = get_shapes_bounding_box(shape.children, include_stroke)
    elif isinstance(shape, Ellipse):
        bounds = _ellipse_bounds(shape)
    elif isinstance(shape, BoxShape):
        if is_plain_box(shape) and not isinstance(shape, Polygon):
            bounds = BoundingBox.from_rect(shape.x, shape.y, shape.width, shape.height)
        else:
            local = polygon_vertices(shape) if isinstance(shape, Polygon) else box_corners(shape)
            bounds = BoundingBox.from_points(transform_points(shape_matrix(shape), local))
    elif isinstance(shape, (VectorPath, BrushPath)):
        bounds = BoundingBox.from_points(path_points(shape))
    else:
        raise TypeError(f"Unsupported shape type: {type(shape).__name__}")

    if include_stroke and not isinstance(shape, Group):
        bounds = bounds.expanded(shape.style.stroke_width / 2)
    return bounds


def get_shapes_bounding_box(shapes: Iterable[Shape], include_stroke: bool = False) -> BoundingBox:
    """Union of the bounding boxes of several shapes (zero box if there are none)."""
    result = None
    for shape in shapes:
        bounds = get_shape_bounding_box(shape, include_stroke)
        result = bounds if result is None else result.union(bounds)
    if result is None:
        return BoundingBox(0.0, 0.0, 0.0, 0.0)
    return result


def marquee_rect(start: Point, end: Point) -> BoundingBox:
    """Normalized rectangle spanned by a rubber-band drag."""
    return BoundingBox(
        min(start.x, end.x), min(start.y, end.y),
        max(start.x, end.x), max(start.y, end.y)
    )
