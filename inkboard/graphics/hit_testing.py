"""
Point-in-shape hit testing.
"""

from typing import List, Optional, Sequence
import math

import numpy as np

from ..core.shapes import (
    Point, BoundingBox, Shape, BoxShape, Ellipse, Polygon, VectorPath, BrushPath, Group
)
from ..core.geometry import (
    distance_to_segment, point_in_polygon, is_closed, segment_intersection
)
from .matrix import shape_matrix, transform_points
from .bbox import polygon_vertices, box_corners, path_points, get_shape_bounding_box

# Points sampled around an ellipse outline for region selection
ELLIPSE_OUTLINE_STEPS = 16


def _to_local(point: Point, shape: BoxShape) -> Optional[Point]:
    """Map a world point into the shape's unrotated, unscaled, unskewed frame."""
    try:
        inverse = np.linalg.inv(shape_matrix(shape))
    except np.linalg.LinAlgError:
        return None
    x, y, _ = inverse @ np.array([point.x, point.y, 1.0])
    return Point(float(x), float(y))


def _hits_box(point: Point, shape: BoxShape, tolerance: float) -> bool:
    local = _to_local(point, shape)
    if local is None:
        return False

    if isinstance(shape, Ellipse):
        rx = shape.width / 2 + tolerance
        ry = shape.height / 2 + tolerance
        if rx <= 0 or ry <= 0:
            return False
        c = shape.center
        nx = (local.x - c.x) / rx
        ny = (local.y - c.y) / ry
        return nx * nx + ny * ny <= 1.0

    if isinstance(shape, Polygon):
        vertices = polygon_vertices(shape)
        if point_in_polygon(local, vertices):
            return True
        edges = zip(vertices, vertices[1:] + vertices[:1])
        return any(distance_to_segment(local, a, b) <= tolerance for a, b in edges)

    return (shape.x - tolerance <= local.x <= shape.x + shape.width + tolerance and
            shape.y - tolerance <= local.y <= shape.y + shape.height + tolerance)


def _hits_path(point: Point, shape: Shape, tolerance: float) -> bool:
    points = path_points(shape)
    if not points:
        return False
    if len(points) == 1:
        return point.distance_to(points[0]) <= tolerance
    closed = shape.closed if isinstance(shape, VectorPath) else is_closed(points)
    if closed and point_in_polygon(point, points):
        return True
    return any(distance_to_segment(point, a, b) <= tolerance for a, b in zip(points, points[1:]))


def is_point_hitting_shape(point: Point, shape: Shape, tolerance: float = 0.0) -> bool:
    """
    Check if a world point hits a shape.

    Args:
        point: World position
        shape: Shape to test
        tolerance: Extra distance accepted around outlines and strokes
    """
    if isinstance(shape, Group):
        return any(is_point_hitting_shape(point, c, tolerance) for c in shape.children)
    if isinstance(shape, BoxShape):
        return _hits_box(point, shape, tolerance)
    if isinstance(shape, (VectorPath, BrushPath)):
        stroke = shape.style.stroke_width / 2
        return _hits_path(point, shape, tolerance + stroke)
    raise TypeError(f"Unsupported shape type: {type(shape).__name__}")


def find_shape_at(point: Point, shapes: Sequence[Shape], tolerance: float = 0.0) -> Optional[Shape]:
    """Return the topmost visible, unlocked shape under point."""
    for shape in reversed(shapes):
        if not shape.visible or shape.locked:
            continue
        if is_point_hitting_shape(point, shape, tolerance):
            return shape
    return None


def shape_outline(shape: Shape) -> List[Point]:
    """
    World-space outline of a single shape as a polyline.

    Box outlines are closed (the first point is repeated at the end); paths
    are returned as sampled. Groups have no outline of their own.
    """
    if isinstance(shape, Group):
        raise TypeError("Groups have no outline; use their children")
    if isinstance(shape, Ellipse):
        c = shape.center
        local = [
            Point(c.x + shape.width / 2 * math.cos(2 * math.pi * i / ELLIPSE_OUTLINE_STEPS),
                  c.y + shape.height / 2 * math.sin(2 * math.pi * i / ELLIPSE_OUTLINE_STEPS))
            for i in range(ELLIPSE_OUTLINE_STEPS)
        ]
    elif isinstance(shape, BoxShape):
        local = polygon_vertices(shape) if isinstance(shape, Polygon) else box_corners(shape)
    elif isinstance(shape, (VectorPath, BrushPath)):
        return path_points(shape)
    else:
        raise TypeError(f"Unsupported shape type: {type(shape).__name__}")

    outline = transform_points(shape_matrix(shape), local)
    return outline + outline[:1]


def _crosses(outline: Sequence[Point], polyline: Sequence[Point]) -> bool:
    for a, b in zip(outline, outline[1:]):
        for c, d in zip(polyline, polyline[1:]):
            if segment_intersection(a, b, c, d) is not None:
                return True
    return False


def is_shape_in_marquee(shape: Shape, rect: BoundingBox) -> bool:
    """
    Check if a marquee rectangle touches a shape.

    A shape counts when it lies inside the rectangle, when its outline
    crosses or enters it, or (for box shapes) when the rectangle lies
    inside the shape's body. A group counts when any child does.
    """
    if isinstance(shape, Group):
        return any(is_shape_in_marquee(c, rect) for c in shape.children)

    bounds = get_shape_bounding_box(shape, include_stroke=True)
    if not bounds.intersects(rect):
        return False
    if rect.contains(Point(bounds.min_x, bounds.min_y)) and rect.contains(Point(bounds.max_x, bounds.max_y)):
        return True

    outline = shape_outline(shape)
    if any(rect.contains(p) for p in outline):
        return True
    edges = [
        Point(rect.min_x, rect.min_y), Point(rect.max_x, rect.min_y),
        Point(rect.max_x, rect.max_y), Point(rect.min_x, rect.max_y),
        Point(rect.min_x, rect.min_y),
    ]
    if _crosses(outline, edges):
        return True
    return isinstance(shape, BoxShape) and is_point_hitting_shape(rect.center, shape)


def is_shape_in_lasso(shape: Shape, lasso: Sequence[Point]) -> bool:
    """
    Check if a shape lies entirely inside a lasso polygon.

    The lasso is closed implicitly and needs at least three points. Every
    outline point must be inside it and no outline segment may cross it.
    A group counts only when all of its children do.
    """
    if len(lasso) < 3:
        return False
    if isinstance(shape, Group):
        return bool(shape.children) and all(is_shape_in_lasso(c, lasso) for c in shape.children)

    outline = shape_outline(shape)
    if not outline or not all(point_in_polygon(p, lasso) for p in outline):
        return False
    return not _crosses(outline, list(lasso) + [lasso[0]])
