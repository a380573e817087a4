"""
Selection Handling for Inkboard

Manages selection state and turns pointer events into drag operations.

While a drag is in progress the manager holds a live copy of the shape
collection; the document keeps the pre-drag state until pointer up commits
the live copy (or a cancel drops it).
"""

from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional, Sequence
from uuid import UUID
import logging
import math

from PyQt6.QtCore import QObject, pyqtSignal

from ..core.document import Document, find_shape, replace_shapes_by_id
from ..core.geometry import Axis, ZERO_EPSILON, polyline_length
from ..core.settings import EditorSettings, make_grid_snapper
from ..core.shapes import Point, BoundingBox, Shape, BoxShape, ImageShape
from .bbox import get_shapes_bounding_box
from .coalescer import FrameCoalescer, Scheduler
from .drag_state import (
    DragState, IdleDrag, MoveDrag, ResizeDrag, ScaleDrag, RotateDrag,
    SkewDrag, CropDrag, MarqueeDrag, LassoDrag, Modifier, SelectionMode,
    resolve_axis_lock, apply_axis_lock
)
from .handles import (
    HandleKind, SelectionHandle, compute_selection_handles, compute_crop_handles,
    find_handle_at, handle_direction, handle_offset, handle_world_position,
    opposite_handle
)
from .hit_testing import find_shape_at, is_shape_in_marquee, is_shape_in_lasso
from .lasso import cut_paths
from .transform import (
    move_shape, rotate_shape, scale_shape, skew_shape, resize_shape, flip_shape,
    transform_crop_rect
)

logger = logging.getLogger(__name__)

# Marquees and lasso strokes no longer than this are treated as clicks
MIN_REGION_EXTENT = 1.0


class SelectionManager(QObject):
    """
    Manages selection state and interactive transforms.

    Features:
    - Single and multi-selection with shift toggling
    - Move with axis lock, resize, scale, rotate, skew and crop drags
    - Grid snapping of pointer input
    - Frame-coalesced pointer moves
    - Marquee and lasso region selection
    - Mirror, rotate and lasso cut on the current selection
    """

    # Signals
    selection_changed = pyqtSignal(list)    # List of selected shapes
    shapes_changed = pyqtSignal(list)       # Live shape collection
    shapes_committed = pyqtSignal(list)     # Collection written to the document
    drag_state_changed = pyqtSignal(object)
    crop_rect_changed = pyqtSignal(object)  # BoundingBox or None
    marquee_changed = pyqtSignal(object)    # BoundingBox or None
    lasso_changed = pyqtSignal(list)        # Lasso points captured so far

    def __init__(self, document: Document,
                 settings: Optional[EditorSettings] = None,
                 snap_to_grid: Optional[Callable[[Point], Point]] = None,
                 scheduler: Optional[Scheduler] = None):
        """
        Initialize selection manager.

        Args:
            document: Document holding the committed shapes
            settings: Editor settings (defaults are used if omitted)
            snap_to_grid: Snapping function for pointer input (built from
                settings if omitted)
            scheduler: Frame scheduler for coalesced pointer moves
                (QTimer-based if omitted)
        """
        super().__init__()

        self.document = document
        self.settings = settings or EditorSettings()
        self._snap = snap_to_grid or make_grid_snapper(self.settings)

        self._selected_ids: List[UUID] = []
        self._drag: DragState = IdleDrag()
        self._live: Optional[List[Shape]] = None
        self._mode = SelectionMode.MOVE

        # Crop mode
        self._crop_image_id: Optional[UUID] = None
        self._crop_rect: Optional[BoundingBox] = None

        self._coalescer = FrameCoalescer(
            self._apply_pointer_sample,
            schedule=scheduler,
            interval_ms=self.settings.frame_interval_ms
        )

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def shapes(self) -> List[Shape]:
        """Live shapes: the in-progress drag result, or the document's shapes."""
        if self._live is not None:
            return self._live
        return self.document.shapes

    @property
    def drag_state(self) -> DragState:
        return self._drag

    @property
    def is_dragging(self) -> bool:
        return not isinstance(self._drag, IdleDrag)

    @property
    def selected_ids(self) -> List[UUID]:
        return list(self._selected_ids)

    @property
    def is_cropping(self) -> bool:
        return self._crop_image_id is not None

    @property
    def crop_rect(self) -> Optional[BoundingBox]:
        return self._crop_rect

    @property
    def selection_mode(self) -> SelectionMode:
        return self._mode

    def set_selection_mode(self, mode: SelectionMode):
        """Switch what a canvas press does; an active drag is cancelled."""
        if mode == self._mode:
            return
        if self.is_dragging:
            self.cancel_drag()
        logger.debug("Selection mode %s -> %s", self._mode.value, mode.value)
        self._mode = mode

    def _set_drag(self, drag: DragState):
        if type(drag) is not type(self._drag):
            logger.debug("Drag state %s -> %s", type(self._drag).__name__, type(drag).__name__)
        self._drag = drag
        self.drag_state_changed.emit(drag)

    def _set_live(self, shapes: List[Shape]):
        self._live = shapes
        self.shapes_changed.emit(list(shapes))

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def get_selected_shapes(self) -> List[Shape]:
        """Selected top-level shapes in paint order."""
        selected = set(self._selected_ids)
        return [s for s in self.shapes if s.id in selected]

    def get_selection_bounds(self) -> Optional[BoundingBox]:
        """Bounding box of the current selection, or None when nothing is selected."""
        shapes = self.get_selected_shapes()
        if not shapes:
            return None
        return get_shapes_bounding_box(shapes)

    def set_selection(self, shape_ids: Iterable[UUID]):
        """Replace the selection with the given top-level shapes."""
        existing = {s.id for s in self.shapes}
        ids = []
        for shape_id in shape_ids:
            if shape_id in existing and shape_id not in ids:
                ids.append(shape_id)
        if ids == self._selected_ids:
            return
        self._selected_ids = ids
        self.selection_changed.emit(self.get_selected_shapes())

    def select_shape(self, shape_id: UUID, add_to_selection: bool = False):
        """Select a shape, optionally adding it to the current selection."""
        if add_to_selection:
            self.set_selection(self._selected_ids + [shape_id])
        else:
            self.set_selection([shape_id])

    def toggle_selection(self, shape_id: UUID):
        """Add a shape to the selection or remove it if already selected."""
        if shape_id in self._selected_ids:
            self.set_selection([i for i in self._selected_ids if i != shape_id])
        else:
            self.set_selection(self._selected_ids + [shape_id])

    def clear_selection(self):
        """Clear all selections."""
        self.set_selection([])

    def selection_handles(self) -> List[SelectionHandle]:
        """Handles for the current selection (crop handles while cropping)."""
        if self.is_cropping:
            image = find_shape(self.shapes, self._crop_image_id)
            if not isinstance(image, ImageShape) or self._crop_rect is None:
                return []
            return compute_crop_handles(image, self._crop_rect)
        return compute_selection_handles(
            self.get_selected_shapes(), self.settings.rotate_handle_offset
        )

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def pointer_down(self, point: Point, modifiers: Modifier = Modifier.NONE) -> DragState:
        """
        Handle a pointer press.

        Handles take priority over shape bodies, and a press on empty space
        starts a marquee. In crop mode only the crop handles respond. In the
        lasso and cut modes every press starts a lasso stroke.

        Returns:
            The resulting drag state
        """
        if self.is_dragging:
            logger.debug("Pointer down during %s, discarding it", type(self._drag).__name__)
            self.cancel_drag()

        if self.is_cropping:
            handle = find_handle_at(point, self.selection_handles(), self.settings.hit_radius)
            if handle is not None:
                self._start_crop_drag(handle)
            return self._drag

        shift = Modifier.SHIFT in modifiers
        if self._mode != SelectionMode.MOVE:
            # Cut strokes act on the current selection
            if self._mode == SelectionMode.LASSO and not shift:
                self.clear_selection()
            self._set_drag(LassoDrag(points=(point,), mode=self._mode))
            self.lasso_changed.emit([point])
            return self._drag

        handle = find_handle_at(point, self.selection_handles(), self.settings.hit_radius)
        if handle is not None:
            self._start_handle_drag(handle, point, modifiers)
            return self._drag

        hit = find_shape_at(point, self.shapes, self.settings.hit_tolerance)
        if hit is None:
            if not shift:
                self.clear_selection()
            self._set_drag(MarqueeDrag(start=point, current=point))
            self.marquee_changed.emit(self._drag.rect)
            return self._drag

        if shift:
            self.toggle_selection(hit.id)
        elif hit.id not in self._selected_ids:
            self.select_shape(hit.id)
        else:
            self._start_move(point)
        return self._drag

    def pointer_move(self, point: Point, modifiers: Modifier = Modifier.NONE):
        """
        Queue a pointer sample; it is applied on the next frame.

        Lasso strokes record every sample straight away so no part of the
        stroke is lost between frames.
        """
        if not self.is_dragging:
            return
        drag = self._drag
        if isinstance(drag, LassoDrag):
            self._extend_lasso(drag, point)
            return
        self._coalescer.submit((point, modifiers))

    def process_frame(self) -> bool:
        """Apply the pending pointer sample now. Returns True if one was applied."""
        return self._coalescer.flush()

    def pointer_up(self, point: Optional[Point] = None, modifiers: Modifier = Modifier.NONE):
        """
        Finish the active drag.

        Transforming drags commit their result to the document. A marquee or
        lasso selects the shapes it covers (shift toggles them in and out of
        the selection instead), and a cut stroke cuts paths.
        """
        if not self.is_dragging:
            return
        if point is not None:
            self.pointer_move(point, modifiers)
        self._coalescer.flush()

        drag = self._drag
        if isinstance(drag, MarqueeDrag):
            self._set_drag(IdleDrag())
            self.marquee_changed.emit(None)
            self._finish_marquee(drag, modifiers)
            return
        if isinstance(drag, LassoDrag):
            self._set_drag(IdleDrag())
            self.lasso_changed.emit([])
            self._finish_lasso(drag, modifiers)
            return

        if isinstance(drag, CropDrag):
            image = find_shape(self.shapes, drag.shape_id)
            if isinstance(image, ImageShape):
                self._live = replace_shapes_by_id(
                    self.shapes, {image.id: replace(image, crop=self._crop_rect)}
                )

        shapes = self._live if self._live is not None else self.document.shapes
        self._live = None
        self._set_drag(IdleDrag())
        self._commit(shapes)

    def cancel_drag(self):
        """Abort the active drag and restore the pre-drag shapes."""
        self._coalescer.cancel()
        if not self.is_dragging:
            return
        drag = self._drag
        if isinstance(drag, CropDrag):
            self._crop_rect = drag.original_rect
            self.crop_rect_changed.emit(self._crop_rect)
        elif isinstance(drag, MarqueeDrag):
            self.marquee_changed.emit(None)
        elif isinstance(drag, LassoDrag):
            self.lasso_changed.emit([])
        self._live = None
        self._set_drag(IdleDrag())
        self.shapes_changed.emit(list(self.document.shapes))

    # ------------------------------------------------------------------
    # Drag start
    # ------------------------------------------------------------------

    def _selected_originals(self) -> Optional[List[Shape]]:
        """Selected shapes, or None if any selected id no longer exists."""
        shapes = []
        for shape_id in self._selected_ids:
            shape = find_shape(self.shapes, shape_id)
            if shape is None:
                return None
            shapes.append(shape)
        return shapes

    def _abort(self, reason: str):
        logger.warning("Drag aborted: %s", reason)
        self._set_drag(IdleDrag())

    def _start_move(self, point: Point):
        originals = self._selected_originals()
        if not originals:
            self._abort("selected shape no longer exists")
            return
        self._live = list(self.document.shapes)
        self._set_drag(MoveDrag(
            shape_ids=tuple(s.id for s in originals),
            original_shapes=tuple(originals),
            initial_pointer_pos=self._snap(point),
            initial_selection_bbox=get_shapes_bounding_box(originals)
        ))

    def _start_handle_drag(self, handle: SelectionHandle, point: Point, modifiers: Modifier):
        originals = self._selected_originals()
        if not originals:
            self._abort("selected shape no longer exists")
            return

        if handle.kind == HandleKind.ROTATE:
            center = get_shapes_bounding_box(originals).center
            drag = RotateDrag(
                shape_ids=tuple(s.id for s in originals),
                center=center,
                original_shapes=tuple(originals),
                initial_angle=math.atan2(point.y - center.y, point.x - center.x)
            )
        elif handle.kind == HandleKind.RESIZE:
            shape = find_shape(self.shapes, handle.shape_id)
            if not isinstance(shape, BoxShape):
                self._abort(f"shape {handle.shape_id} no longer exists")
                return
            if modifiers & (Modifier.CTRL | Modifier.META):
                drag = SkewDrag(shape_id=shape.id, handle=handle.handle, original_shape=shape)
            else:
                drag = ResizeDrag(
                    shape_id=shape.id,
                    handle=handle.handle,
                    original_shape=shape,
                    initial_pointer_pos=self._snap(point)
                )
        elif handle.kind == HandleKind.SCALE:
            bounds = get_shapes_bounding_box(originals)
            ox, oy = handle_offset(opposite_handle(handle.handle), bounds.width, bounds.height)
            drag = ScaleDrag(
                shape_ids=tuple(s.id for s in originals),
                handle=handle.handle,
                pivot=Point(bounds.center.x + ox, bounds.center.y + oy),
                original_shapes=tuple(originals),
                initial_pointer_pos=self._snap(point),
                initial_selection_bbox=bounds
            )
        else:
            return

        self._live = list(self.document.shapes)
        self._set_drag(drag)

    def _start_crop_drag(self, handle: SelectionHandle):
        image = find_shape(self.shapes, self._crop_image_id)
        if not isinstance(image, ImageShape) or self._crop_rect is None:
            self._abort(f"image {self._crop_image_id} no longer exists")
            return
        self._live = list(self.document.shapes)
        self._set_drag(CropDrag(
            shape_id=image.id,
            handle=handle.handle,
            original_rect=self._crop_rect,
            original_image=image
        ))

    # ------------------------------------------------------------------
    # Drag update
    # ------------------------------------------------------------------

    def _apply_pointer_sample(self, sample):
        point, modifiers = sample
        drag = self._drag
        if isinstance(drag, MoveDrag):
            self._update_move(drag, point, modifiers)
        elif isinstance(drag, ResizeDrag):
            self._update_resize(drag, point, modifiers)
        elif isinstance(drag, ScaleDrag):
            self._update_scale(drag, point, modifiers)
        elif isinstance(drag, RotateDrag):
            self._update_rotate(drag, point, modifiers)
        elif isinstance(drag, SkewDrag):
            self._apply_updates({drag.shape_id: skew_shape(drag.original_shape, drag.handle, point)})
        elif isinstance(drag, CropDrag):
            self._crop_rect = transform_crop_rect(
                drag.original_rect, drag.original_image, drag.handle, point
            )
            self.crop_rect_changed.emit(self._crop_rect)
        elif isinstance(drag, MarqueeDrag):
            self._drag = replace(drag, current=point)
            self.marquee_changed.emit(self._drag.rect)

    def _extend_lasso(self, drag: LassoDrag, point: Point):
        if point == drag.points[-1]:
            return
        self._drag = replace(drag, points=drag.points + (point,))
        self.lasso_changed.emit(list(self._drag.points))

    def _apply_updates(self, updates: Dict[UUID, Shape]):
        self._set_live(replace_shapes_by_id(self.document.shapes, updates))

    def _update_move(self, drag: MoveDrag, point: Point, modifiers: Modifier):
        current = self._snap(point)
        dx = current.x - drag.initial_pointer_pos.x
        dy = current.y - drag.initial_pointer_pos.y

        axis_lock = resolve_axis_lock(
            drag.axis_lock, dx, dy,
            Modifier.SHIFT in modifiers,
            self.settings.axis_lock_switch_margin
        )
        if axis_lock != drag.axis_lock:
            logger.debug("Axis lock %s -> %s", drag.axis_lock, axis_lock)
            self._drag = replace(drag, axis_lock=axis_lock)
        dx, dy = apply_axis_lock(dx, dy, axis_lock)

        self._apply_updates({s.id: move_shape(s, dx, dy) for s in drag.original_shapes})

    def _update_resize(self, drag: ResizeDrag, point: Point, modifiers: Modifier):
        current = self._snap(point)
        start = handle_world_position(drag.original_shape, drag.handle)
        target = Point(
            start.x + current.x - drag.initial_pointer_pos.x,
            start.y + current.y - drag.initial_pointer_pos.y
        )
        # Images keep their aspect ratio unless shift is held
        keep_aspect = Modifier.SHIFT in modifiers
        if isinstance(drag.original_shape, ImageShape):
            keep_aspect = not keep_aspect

        resized = resize_shape(drag.original_shape, drag.handle, target, keep_aspect)
        self._apply_updates({drag.shape_id: resized})

    def _update_scale(self, drag: ScaleDrag, point: Point, modifiers: Modifier):
        current = self._snap(point)
        dx = current.x - drag.initial_pointer_pos.x
        dy = current.y - drag.initial_pointer_pos.y
        bounds = drag.initial_selection_bbox
        dir_x, dir_y = handle_direction(drag.handle)

        factor_x = 1.0
        factor_y = 1.0
        if dir_x and bounds.width > ZERO_EPSILON:
            factor_x = (bounds.width + dx * dir_x) / bounds.width
        if dir_y and bounds.height > ZERO_EPSILON:
            factor_y = (bounds.height + dy * dir_y) / bounds.height

        if Modifier.SHIFT in modifiers:
            if dir_x and dir_y:
                magnitude = max(abs(factor_x), abs(factor_y))
                factor_x = math.copysign(magnitude, factor_x)
                factor_y = math.copysign(magnitude, factor_y)
            elif dir_x:
                factor_y = abs(factor_x)
            else:
                factor_x = abs(factor_y)

        self._apply_updates({
            s.id: scale_shape(s, drag.pivot, factor_x, factor_y)
            for s in drag.original_shapes
        })

    def _update_rotate(self, drag: RotateDrag, point: Point, modifiers: Modifier):
        center = drag.center
        angle = math.atan2(point.y - center.y, point.x - center.x) - drag.initial_angle

        if Modifier.SHIFT in modifiers:
            step = self.settings.rotation_snap_step
            if Modifier.ALT in modifiers:
                step = self.settings.coarse_rotation_snap_step
            originals = drag.original_shapes
            if len(originals) == 1 and isinstance(originals[0], BoxShape):
                # Snap the resulting absolute rotation of a single shape
                base = originals[0].rotation
                angle = round((base + angle) / step) * step - base
            else:
                angle = round(angle / step) * step

        self._apply_updates({
            s.id: rotate_shape(s, center, angle) for s in drag.original_shapes
        })

    # ------------------------------------------------------------------
    # Region selection
    # ------------------------------------------------------------------

    def _selectable_shapes(self) -> List[Shape]:
        return [s for s in self.shapes if s.visible and not s.locked]

    def _apply_region_selection(self, shape_ids: List[UUID], toggle: bool):
        if not toggle:
            self.set_selection(shape_ids)
            return
        selected = list(self._selected_ids)
        for shape_id in shape_ids:
            if shape_id in selected:
                selected.remove(shape_id)
            else:
                selected.append(shape_id)
        self.set_selection(selected)

    def _finish_marquee(self, drag: MarqueeDrag, modifiers: Modifier):
        rect = drag.rect
        if rect.width <= MIN_REGION_EXTENT and rect.height <= MIN_REGION_EXTENT:
            return
        ids = [s.id for s in self._selectable_shapes() if is_shape_in_marquee(s, rect)]
        logger.debug("Marquee covers %d shape(s)", len(ids))
        self._apply_region_selection(ids, Modifier.SHIFT in modifiers)

    def _finish_lasso(self, drag: LassoDrag, modifiers: Modifier):
        points = list(drag.points)
        if polyline_length(points) <= MIN_REGION_EXTENT:
            return
        if drag.mode == SelectionMode.CUT:
            self.cut_with_lasso(points)
            return
        if len(points) < 3:
            return
        ids = [s.id for s in self._selectable_shapes() if is_shape_in_lasso(s, points)]
        logger.debug("Lasso encloses %d shape(s)", len(ids))
        self._apply_region_selection(ids, Modifier.SHIFT in modifiers)

    # ------------------------------------------------------------------
    # Crop mode
    # ------------------------------------------------------------------

    def begin_crop(self, shape_id: Optional[UUID] = None) -> bool:
        """
        Enter crop mode for an image.

        Args:
            shape_id: Image to crop (defaults to the single selected image)

        Returns:
            True if crop mode was entered
        """
        if self.is_dragging:
            return False
        if shape_id is None:
            selected = self.get_selected_shapes()
            if len(selected) != 1:
                return False
            shape_id = selected[0].id

        image = find_shape(self.shapes, shape_id)
        if not isinstance(image, ImageShape):
            return False

        self._crop_image_id = image.id
        self._crop_rect = image.crop or BoundingBox(0.0, 0.0, image.width, image.height)
        logger.debug("Cropping image %s", image.id)
        self.crop_rect_changed.emit(self._crop_rect)
        return True

    def end_crop(self, apply: bool = True):
        """Leave crop mode, writing the crop rectangle into the image if apply."""
        if not self.is_cropping:
            return
        if self.is_dragging:
            self.pointer_up()

        image = find_shape(self.shapes, self._crop_image_id)
        rect = self._crop_rect
        self._crop_image_id = None
        self._crop_rect = None
        self.crop_rect_changed.emit(None)

        if apply and isinstance(image, ImageShape) and rect != image.crop:
            self._commit(replace_shapes_by_id(self.document.shapes, {image.id: replace(image, crop=rect)}))

    # ------------------------------------------------------------------
    # Immediate operations
    # ------------------------------------------------------------------

    def _transform_selection(self, fn: Callable[[Shape, Point], Shape]) -> bool:
        if self.is_dragging:
            return False
        shapes = self.get_selected_shapes()
        if not shapes:
            return False
        center = get_shapes_bounding_box(shapes).center
        self._commit(replace_shapes_by_id(self.document.shapes, {s.id: fn(s, center) for s in shapes}))
        return True

    def mirror_horizontal(self) -> bool:
        """Mirror selected shapes horizontally about the selection centre."""
        return self._transform_selection(lambda s, c: flip_shape(s, c, Axis.X))

    def mirror_vertical(self) -> bool:
        """Mirror selected shapes vertically about the selection centre."""
        return self._transform_selection(lambda s, c: flip_shape(s, c, Axis.Y))

    def rotate_selection(self, angle: float) -> bool:
        """Rotate selected shapes by angle (radians) about the selection centre."""
        return self._transform_selection(lambda s, c: rotate_shape(s, c, angle))

    def cut_with_lasso(self, lasso: Sequence[Point]) -> List[Shape]:
        """
        Cut paths with a lasso stroke and commit the result.

        Only selected paths are cut when there is a selection, otherwise
        every unlocked path is.

        Returns:
            The committed shape list
        """
        if self.is_dragging:
            return list(self.shapes)

        if self._selected_ids:
            target_ids = list(self._selected_ids)
        else:
            target_ids = [s.id for s in self.document.shapes if not s.locked]

        shapes = cut_paths(lasso, self.document.shapes, target_ids)
        if len(shapes) != len(self.document.shapes) or any(
                a is not b for a, b in zip(shapes, self.document.shapes)):
            self._commit(shapes)
        return list(self.document.shapes)

    def _commit(self, shapes: List[Shape]):
        self.document.replace_shapes(shapes)
        logger.debug("Committed %d shape(s)", len(shapes))

        # Drop ids that no longer exist
        existing = {s.id for s in self.document.shapes}
        pruned = [i for i in self._selected_ids if i in existing]
        if pruned != self._selected_ids:
            self._selected_ids = pruned
            self.selection_changed.emit(self.get_selected_shapes())

        self.shapes_changed.emit(list(self.document.shapes))
        self.shapes_committed.emit(list(self.document.shapes))
