"""
Inkboard Graphics Module

Contains the interactive transform components:
- Transform: Pure shape transforms
- Bbox / Handles / Hit testing: Derived geometry
- Selection: Selection handling and the drag state machine
- Lasso: Path cutting
"""

from .transform import (
    move_shape, rotate_shape, scale_shape, skew_shape, resize_shape,
    flip_shape, transform_crop_rect
)
from .bbox import get_shape_bounding_box, get_shapes_bounding_box, marquee_rect
from .handles import (
    ResizeHandle, HandleKind, SelectionHandle, rotate_resize_handle,
    compute_selection_handles, compute_crop_handles, find_handle_at
)
from .hit_testing import (
    is_point_hitting_shape, find_shape_at, is_shape_in_marquee, is_shape_in_lasso
)
from .drag_state import (
    Modifier, SelectionMode, IdleDrag, MoveDrag, ResizeDrag, ScaleDrag, RotateDrag,
    SkewDrag, CropDrag, MarqueeDrag, LassoDrag
)
from .coalescer import FrameCoalescer
from .lasso import cut_paths
from .selection import SelectionManager

__all__ = [
    # Transform
    'move_shape',
    'rotate_shape',
    'scale_shape',
    'skew_shape',
    'resize_shape',
    'flip_shape',
    'transform_crop_rect',
    # Geometry
    'get_shape_bounding_box',
    'get_shapes_bounding_box',
    'marquee_rect',
    'ResizeHandle',
    'HandleKind',
    'SelectionHandle',
    'rotate_resize_handle',
    'compute_selection_handles',
    'compute_crop_handles',
    'find_handle_at',
    'is_point_hitting_shape',
    'find_shape_at',
    'is_shape_in_marquee',
    'is_shape_in_lasso',
    # Drag state machine
    'Modifier',
    'SelectionMode',
    'IdleDrag',
    'MoveDrag',
    'ResizeDrag',
    'ScaleDrag',
    'RotateDrag',
    'SkewDrag',
    'CropDrag',
    'MarqueeDrag',
    'LassoDrag',
    'FrameCoalescer',
    'SelectionManager',
    # Lasso
    'cut_paths',
]
