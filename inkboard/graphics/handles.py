"""
Resize handle geometry and selection handle layout.

Handles are identified by compass position on the unrotated box. Their
on-screen direction (used for cursors) follows the shape rotation, see
``rotate_resize_handle``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple
from uuid import UUID
import math

from ..core.shapes import (
    Point, BoundingBox, Shape, BoxShape, Rectangle, Ellipse, ImageShape,
    Frame, Polygon
)
from ..core.geometry import rotate_about_center, sign
from .bbox import get_shapes_bounding_box


class ResizeHandle(Enum):
    """The eight resize handles of a box."""
    TOP_LEFT = "top-left"
    TOP = "top"
    TOP_RIGHT = "top-right"
    RIGHT = "right"
    BOTTOM_RIGHT = "bottom-right"
    BOTTOM = "bottom"
    BOTTOM_LEFT = "bottom-left"
    LEFT = "left"

    @property
    def is_corner(self) -> bool:
        dx, dy = _DIRECTIONS[self]
        return dx != 0 and dy != 0


class HandleKind(Enum):
    """What dragging a selection handle does."""
    RESIZE = "resize"     # Single box shape, edits its own frame
    SCALE = "scale"       # Selection box, scales every selected shape
    ROTATE = "rotate"
    CROP = "crop"


# Unit direction of each handle from the box centre (y grows downwards)
_DIRECTIONS = {
    ResizeHandle.TOP_LEFT: (-1, -1),
    ResizeHandle.TOP: (0, -1),
    ResizeHandle.TOP_RIGHT: (1, -1),
    ResizeHandle.RIGHT: (1, 0),
    ResizeHandle.BOTTOM_RIGHT: (1, 1),
    ResizeHandle.BOTTOM: (0, 1),
    ResizeHandle.BOTTOM_LEFT: (-1, 1),
    ResizeHandle.LEFT: (-1, 0),
}

# Handles in clockwise order starting from angle 0 (pointing right)
_COMPASS = [
    ResizeHandle.RIGHT,
    ResizeHandle.BOTTOM_RIGHT,
    ResizeHandle.BOTTOM,
    ResizeHandle.BOTTOM_LEFT,
    ResizeHandle.LEFT,
    ResizeHandle.TOP_LEFT,
    ResizeHandle.TOP,
    ResizeHandle.TOP_RIGHT,
]

# Shapes that get per-shape resize handles when selected alone
RESIZABLE_TYPES = (Rectangle, Ellipse, ImageShape, Polygon, Frame)


def handle_direction(handle: ResizeHandle) -> Tuple[int, int]:
    """Unit direction (-1, 0 or 1 per axis) of a handle from the box centre."""
    return _DIRECTIONS[handle]


def handle_offset(handle: ResizeHandle, width: float, height: float) -> Tuple[float, float]:
    """Offset of a handle from the centre of an unrotated width x height box."""
    dx, dy = _DIRECTIONS[handle]
    return dx * width / 2, dy * height / 2


def opposite_handle(handle: ResizeHandle) -> ResizeHandle:
    """The handle diagonally (or directly) across the box."""
    dx, dy = _DIRECTIONS[handle]
    for candidate, direction in _DIRECTIONS.items():
        if direction == (-dx, -dy):
            return candidate
    raise ValueError(f"No opposite handle for {handle}")


def rotate_resize_handle(handle: ResizeHandle, rotation: float) -> ResizeHandle:
    """
    Return the handle whose direction is closest to ``handle`` rotated by
    ``rotation`` radians.

    Used to pick the resize cursor of a rotated shape: the top handle of a
    shape rotated by 90 degrees behaves like a right handle on screen.
    """
    dx, dy = _DIRECTIONS[handle]
    cos_a = math.cos(rotation)
    sin_a = math.sin(rotation)
    rx = dx * cos_a - dy * sin_a
    ry = dx * sin_a + dy * cos_a
    index = round(math.atan2(ry, rx) / (math.pi / 4)) % 8
    return _COMPASS[index]


def handle_world_position(shape: BoxShape, handle: ResizeHandle) -> Point:
    """World position of a handle on a box shape's rotated frame."""
    center = shape.center
    ox, oy = handle_offset(handle, shape.width, shape.height)
    return rotate_about_center(Point(center.x + ox, center.y + oy), center, shape.rotation)


def bbox_handle_position(bounds: BoundingBox, handle: ResizeHandle) -> Point:
    """Position of a handle on an axis-aligned box."""
    ox, oy = handle_offset(handle, bounds.width, bounds.height)
    center = bounds.center
    return Point(center.x + ox, center.y + oy)


@dataclass(frozen=True)
class SelectionHandle:
    """A hit-testable handle drawn around the selection."""
    kind: HandleKind
    position: Point
    handle: Optional[ResizeHandle] = None
    cursor_handle: Optional[ResizeHandle] = None
    shape_id: Optional[UUID] = None


def uses_resize_handles(shapes: Sequence[Shape]) -> bool:
    """A single simple box shape is resized in its own frame; anything else is scaled."""
    return len(shapes) == 1 and isinstance(shapes[0], RESIZABLE_TYPES)


def compute_selection_handles(shapes: Sequence[Shape],
                              rotate_handle_offset: float = 20.0) -> List[SelectionHandle]:
    """
    Lay out the handles for the current selection.

    Args:
        shapes: Selected shapes
        rotate_handle_offset: Distance of the rotation handle above the top edge

    Returns:
        Eight resize or scale handles followed by the rotation handle
        (empty for an empty selection)
    """
    if not shapes:
        return []

    if uses_resize_handles(shapes):
        shape = shapes[0]
        handles = [
            SelectionHandle(
                kind=HandleKind.RESIZE,
                position=handle_world_position(shape, handle),
                handle=handle,
                cursor_handle=rotate_resize_handle(handle, shape.rotation),
                shape_id=shape.id
            )
            for handle in ResizeHandle
        ]
        center = shape.center
        top = Point(center.x, center.y - shape.height / 2 - rotate_handle_offset)
        handles.append(SelectionHandle(
            kind=HandleKind.ROTATE,
            position=rotate_about_center(top, center, shape.rotation),
            shape_id=shape.id
        ))
        return handles

    bounds = get_shapes_bounding_box(shapes)
    handles = [
        SelectionHandle(
            kind=HandleKind.SCALE,
            position=bbox_handle_position(bounds, handle),
            handle=handle,
            cursor_handle=handle
        )
        for handle in ResizeHandle
    ]
    handles.append(SelectionHandle(
        kind=HandleKind.ROTATE,
        position=Point(bounds.center.x, bounds.min_y - rotate_handle_offset)
    ))
    return handles


def crop_to_world(image: ImageShape, local: Point) -> Point:
    """Map a point in the image's local box frame to world space."""
    center = image.center
    x = center.x + (local.x - image.width / 2) * sign(image.scale_x)
    y = center.y + (local.y - image.height / 2) * sign(image.scale_y)
    return rotate_about_center(Point(x, y), center, image.rotation)


def world_to_crop(image: ImageShape, point: Point) -> Point:
    """Map a world point into the image's local box frame."""
    center = image.center
    p = rotate_about_center(point, center, -image.rotation)
    return Point(
        (p.x - center.x) * sign(image.scale_x) + image.width / 2,
        (p.y - center.y) * sign(image.scale_y) + image.height / 2
    )


def compute_crop_handles(image: ImageShape, crop_rect: BoundingBox) -> List[SelectionHandle]:
    """Lay out the eight crop handles of an image being cropped."""
    handles = []
    for handle in ResizeHandle:
        local = bbox_handle_position(crop_rect, handle)
        handles.append(SelectionHandle(
            kind=HandleKind.CROP,
            position=crop_to_world(image, local),
            handle=handle,
            cursor_handle=rotate_resize_handle(handle, image.rotation),
            shape_id=image.id
        ))
    return handles


def find_handle_at(point: Point, handles: Sequence[SelectionHandle],
                   radius: float) -> Optional[SelectionHandle]:
    """Return the handle nearest to point within radius, if any."""
    best = None
    best_distance = radius
    for handle in handles:
        d = point.distance_to(handle.position)
        if d <= radius and (best is None or d < best_distance):
            best = handle
            best_distance = d
    return best
