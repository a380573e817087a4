"""
Transform Operations for Inkboard

Pure functions that return a transformed copy of a shape:
- Translation (move)
- Rotation about an arbitrary centre
- Scaling about a pivot, including mirroring
- Skew via edge handles
- Resize of a single box shape through one of its handles
- Mirroring (flip horizontal/vertical)
- Crop rectangle editing for images

Every function accepts any shape variant and returns the same variant.
Inputs are never mutated.
"""

from dataclasses import replace
from typing import Callable
import math

from ..core.shapes import (
    Point, BoundingBox, Anchor, Shape, BoxShape, ImageShape,
    VectorPath, BrushPath, Group, clamp_shear
)
from ..core.geometry import (
    Axis, rotate_about_center, safe_divisor, sign, ZERO_EPSILON
)
from .handles import (
    ResizeHandle, handle_direction, handle_offset, opposite_handle, world_to_crop
)


def _map_points(shape: Shape, fn: Callable[[Point], Point]) -> Shape:
    """Apply fn to every point of a path shape (anchors and both handles)."""
    if isinstance(shape, VectorPath):
        anchors = tuple(
            Anchor(fn(a.point), fn(a.handle_in), fn(a.handle_out))
            for a in shape.anchors
        )
        return replace(shape, anchors=anchors)
    if isinstance(shape, BrushPath):
        return replace(shape, points=tuple(fn(p) for p in shape.points))
    raise TypeError(f"Not a path shape: {type(shape).__name__}")


def _check_shape(shape) -> None:
    if not isinstance(shape, Shape):
        raise TypeError(f"Expected a Shape, got {type(shape).__name__}")


def _with_center(shape: BoxShape, center: Point, **changes) -> BoxShape:
    """Copy of a box shape moved so its centre lands on center."""
    width = changes.get('width', shape.width)
    height = changes.get('height', shape.height)
    return replace(shape, x=center.x - width / 2, y=center.y - height / 2, **changes)


def move_shape(shape: Shape, dx: float, dy: float) -> Shape:
    """Translate a shape by (dx, dy)."""
    _check_shape(shape)
    if isinstance(shape, BoxShape):
        return replace(shape, x=shape.x + dx, y=shape.y + dy)
    if isinstance(shape, Group):
        return replace(shape, children=tuple(move_shape(c, dx, dy) for c in shape.children))
    return _map_points(shape, lambda p: Point(p.x + dx, p.y + dy))


def rotate_shape(shape: Shape, center: Point, angle: float) -> Shape:
    """
    Rotate a shape by angle (radians) about center.

    Box shapes orbit their own centre around ``center`` and accumulate the
    angle in ``rotation``; paths rotate every point and handle.
    """
    _check_shape(shape)
    if isinstance(shape, BoxShape):
        new_center = rotate_about_center(shape.center, center, angle)
        return _with_center(shape, new_center, rotation=shape.rotation + angle)
    if isinstance(shape, Group):
        return replace(shape, children=tuple(rotate_shape(c, center, angle) for c in shape.children))
    return _map_points(shape, lambda p: rotate_about_center(p, center, angle))


def scale_shape(shape: Shape, pivot: Point, factor_x: float, factor_y: float) -> Shape:
    """
    Scale a shape about pivot.

    Box shapes move their centre to ``pivot + (centre - pivot) * factor``,
    take the factor magnitude into width/height and its sign into
    scale_x/scale_y. A zero factor collapses the size but keeps the sign.
    """
    _check_shape(shape)
    if isinstance(shape, BoxShape):
        c = shape.center
        new_center = Point(
            pivot.x + (c.x - pivot.x) * factor_x,
            pivot.y + (c.y - pivot.y) * factor_y
        )
        changes = dict(
            width=shape.width * abs(factor_x),
            height=shape.height * abs(factor_y),
            scale_x=shape.scale_x * sign(factor_x),
            scale_y=shape.scale_y * sign(factor_y)
        )
        if isinstance(shape, ImageShape) and shape.crop is not None:
            changes['crop'] = _scale_crop(shape.crop, abs(factor_x), abs(factor_y))
        return _with_center(shape, new_center, **changes)
    if isinstance(shape, Group):
        return replace(shape, children=tuple(
            scale_shape(c, pivot, factor_x, factor_y) for c in shape.children
        ))
    return _map_points(shape, lambda p: Point(
        pivot.x + (p.x - pivot.x) * factor_x,
        pivot.y + (p.y - pivot.y) * factor_y
    ))


def _scale_crop(crop: BoundingBox, fx: float, fy: float) -> BoundingBox:
    return BoundingBox(crop.min_x * fx, crop.min_y * fy, crop.max_x * fx, crop.max_y * fy)


def skew_shape(shape: Shape, handle: ResizeHandle, pointer: Point) -> Shape:
    """
    Shear a box shape by dragging one of its edge handles to pointer.

    The pointer is de-rotated about the centre and divided by the scale on
    its own axis. Top/bottom handles then solve
    skew_x = (lx / scale_x - ox) / oy and left/right handles solve
    skew_y = (ly / scale_y - oy) / ox, where (ox, oy) is the handle offset.
    Corner handles, non-box shapes and non-finite input leave the shape
    unchanged. The result is clamped to the allowed shear range.
    """
    _check_shape(shape)
    if not isinstance(shape, BoxShape) or not pointer.is_finite():
        return shape

    center = shape.center
    local = rotate_about_center(pointer, center, -shape.rotation)
    lx = local.x - center.x
    ly = local.y - center.y
    ox, oy = handle_offset(handle, shape.width, shape.height)
    dx, dy = handle_direction(handle)

    # Pointer offset in unscaled units, solved against the handle offset
    if dx == 0:
        if abs(oy) < ZERO_EPSILON:
            return shape
        skew_x = (lx / safe_divisor(shape.scale_x) - ox) / oy
        if not math.isfinite(skew_x):
            return shape
        return replace(shape, skew_x=clamp_shear(skew_x))
    if dy == 0:
        if abs(ox) < ZERO_EPSILON:
            return shape
        skew_y = (ly / safe_divisor(shape.scale_y) - oy) / ox
        if not math.isfinite(skew_y):
            return shape
        return replace(shape, skew_y=clamp_shear(skew_y))
    return shape


def resize_shape(shape: Shape, handle: ResizeHandle, pointer: Point,
                 keep_aspect_ratio: bool = False) -> Shape:
    """
    Resize a box shape by dragging one of its handles to pointer.

    The opposite handle stays fixed in world space. Dragging past the
    anchor mirrors the shape (the matching scale sign flips). A shape with
    zero width or height grows straight from the anchor to the pointer.

    Args:
        shape: Box shape in its state at the start of the drag
        handle: Handle being dragged
        pointer: Where the handle should end up (world space)
        keep_aspect_ratio: Preserve width/height ratio

    Returns:
        Resized copy (non-box shapes and non-finite pointers return shape)
    """
    _check_shape(shape)
    if not isinstance(shape, BoxShape) or not pointer.is_finite():
        return shape

    center = shape.center
    width = shape.width
    height = shape.height
    dir_x, dir_y = handle_direction(handle)

    # Work in the unrotated frame around the current centre
    local = rotate_about_center(pointer, center, -shape.rotation)
    ax, ay = handle_offset(opposite_handle(handle), width, height)
    anchor = Point(center.x + ax, center.y + ay)

    # Signed extents: negative when the handle was dragged across the anchor
    new_width = (local.x - anchor.x) * dir_x if dir_x else width
    new_height = (local.y - anchor.y) * dir_y if dir_y else height

    if keep_aspect_ratio and width > ZERO_EPSILON and height > ZERO_EPSILON:
        if dir_x and dir_y:
            ratio = max(abs(new_width) / width, abs(new_height) / height)
            new_width = math.copysign(width * ratio, new_width)
            new_height = math.copysign(height * ratio, new_height)
        elif dir_x:
            new_height = height * abs(new_width) / width
        else:
            new_width = width * abs(new_height) / height

    new_center_local = Point(
        anchor.x + dir_x * new_width / 2 if dir_x else center.x,
        anchor.y + dir_y * new_height / 2 if dir_y else center.y
    )
    new_center = rotate_about_center(new_center_local, center, shape.rotation)

    changes = dict(
        width=abs(new_width),
        height=abs(new_height),
        scale_x=shape.scale_x * sign(new_width),
        scale_y=shape.scale_y * sign(new_height)
    )
    if isinstance(shape, ImageShape) and shape.crop is not None:
        fx = abs(new_width) / width if width > ZERO_EPSILON else 1.0
        fy = abs(new_height) / height if height > ZERO_EPSILON else 1.0
        changes['crop'] = _scale_crop(shape.crop, fx, fy)
    return _with_center(shape, new_center, **changes)


def flip_shape(shape: Shape, center: Point, axis: Axis) -> Shape:
    """
    Mirror a shape across a line through center.

    Axis.X mirrors horizontally (x coordinates are reflected), Axis.Y
    mirrors vertically. Box shapes keep their geometry but negate their
    rotation and skew and flip the matching scale sign.
    """
    _check_shape(shape)
    if axis == Axis.X:
        reflect = lambda p: Point(2 * center.x - p.x, p.y)
    else:
        reflect = lambda p: Point(p.x, 2 * center.y - p.y)

    if isinstance(shape, BoxShape):
        changes = dict(
            rotation=-shape.rotation,
            skew_x=-shape.skew_x,
            skew_y=-shape.skew_y
        )
        if axis == Axis.X:
            changes['scale_x'] = -shape.scale_x
        else:
            changes['scale_y'] = -shape.scale_y
        return _with_center(shape, reflect(shape.center), **changes)
    if isinstance(shape, Group):
        return replace(shape, children=tuple(flip_shape(c, center, axis) for c in shape.children))
    return _map_points(shape, reflect)


def transform_crop_rect(initial_rect: BoundingBox, image: ImageShape,
                        handle: ResizeHandle, pointer: Point) -> BoundingBox:
    """
    Move the crop edges controlled by handle to the pointer.

    The pointer is mapped into the image's local frame, the resulting
    rectangle is normalized and clamped inside the image box.
    """
    if not pointer.is_finite():
        return initial_rect

    local = world_to_crop(image, pointer)
    dir_x, dir_y = handle_direction(handle)
    min_x, min_y = initial_rect.min_x, initial_rect.min_y
    max_x, max_y = initial_rect.max_x, initial_rect.max_y

    if dir_x < 0:
        min_x = local.x
    elif dir_x > 0:
        max_x = local.x
    if dir_y < 0:
        min_y = local.y
    elif dir_y > 0:
        max_y = local.y

    min_x, max_x = sorted((min_x, max_x))
    min_y, max_y = sorted((min_y, max_y))

    def clamp(value, upper):
        return max(0.0, min(upper, value))

    return BoundingBox(
        clamp(min_x, image.width), clamp(min_y, image.height),
        clamp(max_x, image.width), clamp(max_y, image.height)
    )
