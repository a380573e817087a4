"""
Drag states for the selection state machine.

Exactly one drag state is active at a time. Every transforming state
captures the shapes as they were when the drag started so each pointer
sample is applied to the originals, never to the previous frame's result.
Marquee and lasso states only collect pointer input.
"""

from dataclasses import dataclass
from enum import Enum, Flag, auto
from typing import Optional, Tuple, Union
from uuid import UUID

from ..core.shapes import Point, BoundingBox, Shape, BoxShape, ImageShape
from ..core.geometry import Axis
from .bbox import marquee_rect
from .handles import ResizeHandle


class Modifier(Flag):
    """Keyboard modifiers held during a pointer event."""
    NONE = 0
    SHIFT = auto()
    CTRL = auto()
    ALT = auto()
    META = auto()


class SelectionMode(Enum):
    """What a press on the canvas does."""
    MOVE = "move"      # Pick, move and transform; empty space starts a marquee
    LASSO = "lasso"    # Freehand stroke selecting the shapes it encloses
    CUT = "cut"        # Freehand stroke cutting the paths it crosses


@dataclass(frozen=True)
class IdleDrag:
    """No drag in progress."""
    pass


@dataclass(frozen=True)
class MoveDrag:
    shape_ids: Tuple[UUID, ...]
    original_shapes: Tuple[Shape, ...]
    initial_pointer_pos: Point
    initial_selection_bbox: BoundingBox
    axis_lock: Optional[Axis] = None


@dataclass(frozen=True)
class ResizeDrag:
    shape_id: UUID
    handle: ResizeHandle
    original_shape: BoxShape
    initial_pointer_pos: Point


@dataclass(frozen=True)
class ScaleDrag:
    shape_ids: Tuple[UUID, ...]
    handle: ResizeHandle
    pivot: Point
    original_shapes: Tuple[Shape, ...]
    initial_pointer_pos: Point
    initial_selection_bbox: BoundingBox


@dataclass(frozen=True)
class RotateDrag:
    shape_ids: Tuple[UUID, ...]
    center: Point
    original_shapes: Tuple[Shape, ...]
    initial_angle: float


@dataclass(frozen=True)
class SkewDrag:
    shape_id: UUID
    handle: ResizeHandle
    original_shape: BoxShape


@dataclass(frozen=True)
class CropDrag:
    shape_id: UUID
    handle: ResizeHandle
    original_rect: BoundingBox
    original_image: ImageShape


@dataclass(frozen=True)
class MarqueeDrag:
    """Rubber-band rectangle dragged out from empty canvas."""
    start: Point
    current: Point

    @property
    def rect(self) -> BoundingBox:
        return marquee_rect(self.start, self.current)


@dataclass(frozen=True)
class LassoDrag:
    """Freehand stroke being captured for lasso selection or cutting."""
    points: Tuple[Point, ...]
    mode: SelectionMode = SelectionMode.LASSO


DragState = Union[IdleDrag, MoveDrag, ResizeDrag, ScaleDrag, RotateDrag, SkewDrag, CropDrag,
                  MarqueeDrag, LassoDrag]


def resolve_axis_lock(current: Optional[Axis], dx: float, dy: float,
                      constrain: bool, switch_margin: float) -> Optional[Axis]:
    """
    Decide which axis a constrained move is locked to.

    The first locked axis is the dominant one. Once locked, the axis only
    switches when the perpendicular displacement exceeds the locked one by
    more than switch_margin.

    Args:
        current: Axis locked so far, if any
        dx, dy: Displacement since the drag started
        constrain: Whether the constraint modifier is held
        switch_margin: Hysteresis in world units

    Returns:
        The locked axis, or None when unconstrained
    """
    if not constrain:
        return None
    if current is None:
        if dx == 0 and dy == 0:
            return None
        return Axis.X if abs(dx) >= abs(dy) else Axis.Y
    if current == Axis.X and abs(dy) > abs(dx) + switch_margin:
        return Axis.Y
    if current == Axis.Y and abs(dx) > abs(dy) + switch_margin:
        return Axis.X
    return current


def apply_axis_lock(dx: float, dy: float, axis: Optional[Axis]) -> Tuple[float, float]:
    """Zero the displacement orthogonal to the locked axis."""
    if axis == Axis.X:
        return dx, 0.0
    if axis == Axis.Y:
        return 0.0, dy
    return dx, dy
