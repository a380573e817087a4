"""
Geometry helpers shared by transforms, bounding boxes, hit testing and
the lasso cutter.
"""

from enum import Enum
from typing import List, Optional, Sequence, Tuple
import math

from .shapes import Point, Anchor, CLOSED_PATH_TOLERANCE


# Smallest magnitude a scale factor may take when used as a divisor
SCALE_EPSILON = 1e-8

# Sizes below this are treated as zero
ZERO_EPSILON = 1e-6

# Bezier samples per segment
BEZIER_STEPS = 20


class Axis(Enum):
    """World axis used for axis locking and mirroring."""
    X = "x"
    Y = "y"


def distance(a: Point, b: Point) -> float:
    """Euclidean distance between two points."""
    return math.hypot(b.x - a.x, b.y - a.y)


def rotate_about_center(point: Point, center: Point, angle: float) -> Point:
    """Rotate point about center by angle (radians, clockwise on a y-down canvas)."""
    return point.rotate(angle, center)


def snap_angle(point: Point, origin: Point, step: float = math.pi / 4) -> Point:
    """
    Snap the direction from origin to point to a multiple of step.

    The distance from origin is preserved.
    """
    dx = point.x - origin.x
    dy = point.y - origin.y
    length = math.hypot(dx, dy)
    angle = round(math.atan2(dy, dx) / step) * step
    return Point(origin.x + length * math.cos(angle), origin.y + length * math.sin(angle))


def lerp(a: Point, b: Point, t: float) -> Point:
    """Linear interpolation; t is not clamped."""
    return Point(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


def safe_divisor(value: float, epsilon: float = SCALE_EPSILON) -> float:
    """Replace a near-zero divisor with a signed epsilon (zero counts as positive)."""
    if abs(value) >= epsilon:
        return value
    return -epsilon if value < 0 else epsilon


def sign(value: float) -> float:
    """Sign of value, treating zero as positive."""
    return -1.0 if value < 0 else 1.0


def sample_cubic_bezier(p0: Point, c1: Point, c2: Point, p3: Point,
                        steps: int = BEZIER_STEPS) -> List[Point]:
    """Sample a cubic Bezier segment, excluding its start point."""
    points = []
    for i in range(1, steps + 1):
        t = i / steps
        mt = 1 - t
        a = mt * mt * mt
        b = 3 * mt * mt * t
        c = 3 * mt * t * t
        d = t * t * t
        points.append(Point(
            a * p0.x + b * c1.x + c * c2.x + d * p3.x,
            a * p0.y + b * c1.y + c * c2.y + d * p3.y
        ))
    return points


def sample_anchors(anchors: Sequence[Anchor], closed: bool = False,
                   steps: int = BEZIER_STEPS) -> List[Point]:
    """
    Flatten a vector path into a polyline.

    Straight segments (both handles collapsed onto their anchors) contribute
    only their end point; curved ones are sampled. A closed path ends with a
    copy of its first point.
    """
    if not anchors:
        return []
    points = [anchors[0].point]
    pairs = list(zip(anchors, anchors[1:]))
    if closed and len(anchors) > 1:
        pairs.append((anchors[-1], anchors[0]))
    for start, end in pairs:
        if start.handle_out == start.point and end.handle_in == end.point:
            points.append(end.point)
        else:
            points.extend(sample_cubic_bezier(
                start.point, start.handle_out, end.handle_in, end.point, steps
            ))
    return points


def segment_intersection(p1: Point, p2: Point, p3: Point, p4: Point
                         ) -> Optional[Tuple[Point, float, float]]:
    """
    Intersect segment p1-p2 with segment p3-p4.

    Returns:
        (point, t, u) where t and u are the parameters along each segment,
        or None for disjoint, parallel or collinear segments
    """
    rx = p2.x - p1.x
    ry = p2.y - p1.y
    sx = p4.x - p3.x
    sy = p4.y - p3.y
    denom = rx * sy - ry * sx
    if abs(denom) < ZERO_EPSILON:
        return None
    qx = p3.x - p1.x
    qy = p3.y - p1.y
    t = (qx * sy - qy * sx) / denom
    u = (qx * ry - qy * rx) / denom
    if t < 0 or t > 1 or u < 0 or u > 1:
        return None
    return Point(p1.x + t * rx, p1.y + t * ry), t, u


def point_in_polygon(point: Point, polygon: Sequence[Point]) -> bool:
    """Even-odd containment test; the polygon is implicitly closed."""
    n = len(polygon)
    if n < 3:
        return False
    inside = False
    j = n - 1
    for i in range(n):
        pi = polygon[i]
        pj = polygon[j]
        if (pi.y > point.y) != (pj.y > point.y):
            x_cross = (pj.x - pi.x) * (point.y - pi.y) / (pj.y - pi.y) + pi.x
            if point.x < x_cross:
                inside = not inside
        j = i
    return inside


def distance_to_segment(point: Point, a: Point, b: Point) -> float:
    """Shortest distance from point to the segment a-b."""
    dx = b.x - a.x
    dy = b.y - a.y
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return distance(point, a)
    t = ((point.x - a.x) * dx + (point.y - a.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return distance(point, Point(a.x + t * dx, a.y + t * dy))


def polyline_length(points: Sequence[Point]) -> float:
    return sum(distance(a, b) for a, b in zip(points, points[1:]))


def polygon_area(polygon: Sequence[Point]) -> float:
    """Unsigned shoelace area; the polygon is implicitly closed."""
    n = len(polygon)
    if n < 3:
        return 0.0
    total = 0.0
    for i in range(n):
        a = polygon[i]
        b = polygon[(i + 1) % n]
        total += a.x * b.y - b.x * a.y
    return abs(total) / 2


def is_closed(points: Sequence[Point], tolerance: float = CLOSED_PATH_TOLERANCE) -> bool:
    """True when a polyline with at least three points ends where it starts."""
    return len(points) >= 3 and distance(points[0], points[-1]) <= tolerance
