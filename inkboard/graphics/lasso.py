"""
Lasso path cutting.

A lasso stroke cuts brush and vector paths wherever it crosses them. The
pieces of a path that fall inside the lasso are discarded and the pieces
outside survive as new shapes.

A stroke that encloses no area (two points, or all points on one line) has
no inside. The runs between its crossings are then kept and discarded in
turn, starting with the run before the first crossing.
"""

from dataclasses import replace
from typing import Iterable, List, Optional, Sequence, Tuple
from uuid import UUID, uuid4
import logging

import numpy as np

from ..core.shapes import Point, Anchor, Shape, VectorPath, BrushPath
from ..core.geometry import point_in_polygon, polygon_area, ZERO_EPSILON
from .bbox import path_points

logger = logging.getLogger(__name__)

# Intersections closer than this along the path are merged
_POSITION_EPSILON = 1e-9


def _segment_intersections(points: np.ndarray, lasso: np.ndarray) -> np.ndarray:
    """
    Arc-length positions along a polyline where it crosses the lasso.

    Args:
        points: (n, 2) path polyline
        lasso: (m, 2) lasso polyline (already closed if it should be)

    Returns:
        Sorted unique positions measured from the start of the path
    """
    p = points[:-1]
    r = points[1:] - p
    q = lasso[:-1]
    s = lasso[1:] - q

    # Pairwise cross products between every path and lasso segment
    denom = r[:, None, 0] * s[None, :, 1] - r[:, None, 1] * s[None, :, 0]
    qp = q[None, :, :] - p[:, None, :]
    t_num = qp[..., 0] * s[None, :, 1] - qp[..., 1] * s[None, :, 0]
    u_num = qp[..., 0] * r[:, None, 1] - qp[..., 1] * r[:, None, 0]

    with np.errstate(divide='ignore', invalid='ignore'):
        t = t_num / denom
        u = u_num / denom
    valid = (np.abs(denom) >= ZERO_EPSILON) & (t >= 0) & (t <= 1) & (u >= 0) & (u <= 1)

    lengths = np.hypot(r[:, 0], r[:, 1])
    starts = np.concatenate(([0.0], np.cumsum(lengths)[:-1]))
    seg_idx, lasso_idx = np.nonzero(valid)
    positions = starts[seg_idx] + t[seg_idx, lasso_idx] * lengths[seg_idx]
    positions = np.sort(positions)

    if positions.size == 0:
        return positions
    keep = np.concatenate(([True], np.diff(positions) > _POSITION_EPSILON))
    return positions[keep]


class _Polyline:
    """Arc-length parametrised polyline."""

    def __init__(self, points: Sequence[Point]):
        self.points = list(points)
        coords = np.array([[p.x, p.y] for p in self.points])
        deltas = np.diff(coords, axis=0)
        self.cumulative = np.concatenate(([0.0], np.cumsum(np.hypot(deltas[:, 0], deltas[:, 1]))))
        self.length = float(self.cumulative[-1])

    def point_at(self, position: float) -> Point:
        position = min(max(position, 0.0), self.length)
        i = int(np.searchsorted(self.cumulative, position, side='right')) - 1
        i = min(max(i, 0), len(self.points) - 2)
        seg_len = self.cumulative[i + 1] - self.cumulative[i]
        if seg_len <= 0:
            return self.points[i]
        t = (position - self.cumulative[i]) / seg_len
        a = self.points[i]
        b = self.points[i + 1]
        return Point(float(a.x + (b.x - a.x) * t), float(a.y + (b.y - a.y) * t))

    def slice(self, start: float, end: float) -> List[Point]:
        """Points from position start to position end, both ends interpolated."""
        result = [self.point_at(start)]
        for point, position in zip(self.points, self.cumulative):
            if start < position < end:
                result.append(point)
        result.append(self.point_at(end))
        return result


def _encloses_area(lasso: Sequence[Point]) -> bool:
    return polygon_area(lasso) > ZERO_EPSILON


def _split_polyline(points: Sequence[Point], closed: bool,
                    lasso_points: Sequence[Point], lasso: np.ndarray,
                    enclosing: bool) -> Optional[List[List[Point]]]:
    """
    Split a polyline where the lasso crosses it.

    With an enclosing lasso a run is discarded when its midpoint lies inside
    the lasso, and on closed paths the runs on either side of the seam form
    one run. Otherwise runs alternate between kept and discarded from the
    start of the path, and the seam of a closed path stays a break.

    Returns:
        The surviving pieces, or None when the path is not cut
    """
    coords = np.array([[p.x, p.y] for p in points])
    positions = _segment_intersections(coords, lasso)
    if len(positions) < 2:
        return None

    line = _Polyline(points)
    positions = [float(p) for p in positions]

    # (start, end, midpoint) for each run between intersections
    runs: List[Tuple[float, float, float]] = []
    if closed and enclosing:
        for a, b in zip(positions, positions[1:]):
            runs.append((a, b, (a + b) / 2))
        wrap_start = positions[-1]
        wrap_end = positions[0]
        wrap_len = (line.length - wrap_start) + wrap_end
        mid = wrap_start + wrap_len / 2
        if mid > line.length:
            mid -= line.length
        runs.append((wrap_start, wrap_end + line.length, mid))
    else:
        bounds = [0.0] + positions + [line.length]
        for a, b in zip(bounds, bounds[1:]):
            runs.append((a, b, (a + b) / 2))

    pieces = []
    for index, (start, end, mid) in enumerate(runs):
        if enclosing:
            discard = point_in_polygon(line.point_at(mid), lasso_points)
        else:
            discard = index % 2 == 1
        if discard or end - start <= _POSITION_EPSILON:
            continue
        if end > line.length:
            piece = line.slice(start, line.length) + line.slice(0.0, end - line.length)[1:]
        else:
            piece = line.slice(start, end)
        if len(piece) >= 2:
            pieces.append(piece)
    return pieces


def _fragment(shape: Shape, points: List[Point]) -> Shape:
    if isinstance(shape, VectorPath):
        return replace(shape, id=uuid4(),
                       anchors=tuple(Anchor.corner(p) for p in points), closed=False)
    return replace(shape, id=uuid4(), points=tuple(points))


def cut_paths(lasso: Sequence[Point], shapes: Iterable[Shape],
              selected_ids: Optional[Iterable[UUID]] = None) -> List[Shape]:
    """
    Cut brush and vector paths with a lasso stroke.

    Args:
        lasso: Lasso polyline in world coordinates (closed implicitly when it
            encloses an area)
        shapes: Shapes to process, in paint order
        selected_ids: Restrict cutting to these shapes (all paths if None)

    Returns:
        New shape list with each cut path replaced in place by its surviving
        fragments; other shapes are passed through untouched
    """
    shapes = list(shapes)
    lasso = list(lasso)
    if len(lasso) < 2:
        return shapes

    selected = set(selected_ids) if selected_ids is not None else None
    enclosing = _encloses_area(lasso)
    lasso_coords = [[p.x, p.y] for p in lasso]
    if enclosing:
        lasso_coords.append(lasso_coords[0])
    lasso_array = np.array(lasso_coords, dtype=float)

    result = []
    for shape in shapes:
        if not isinstance(shape, (VectorPath, BrushPath)):
            result.append(shape)
            continue
        if selected is not None and shape.id not in selected:
            result.append(shape)
            continue

        points = path_points(shape)
        if len(points) < 2:
            result.append(shape)
            continue

        closed = shape.closed
        pieces = _split_polyline(points, closed, lasso, lasso_array, enclosing)
        if pieces is None:
            result.append(shape)
            continue

        logger.debug("Lasso cut %s %s into %d fragment(s)", shape.kind, shape.id, len(pieces))
        result.extend(_fragment(shape, piece) for piece in pieces)
    return result
