"""
Inkboard Document Model

The Document class is the root container for the committed shape collection.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional
from uuid import UUID, uuid4

from .shapes import Shape, Group, BoundingBox


def find_shape(shapes: Iterable[Shape], shape_id: UUID) -> Optional[Shape]:
    """Find a shape by id, searching group children recursively."""
    for shape in shapes:
        if shape.id == shape_id:
            return shape
        if isinstance(shape, Group):
            found = find_shape(shape.children, shape_id)
            if found is not None:
                return found
    return None


def replace_shapes_by_id(shapes: Iterable[Shape], updates: Dict[UUID, Shape]) -> List[Shape]:
    """
    Return a new list where every shape whose id is in updates is replaced.

    Groups are searched recursively. Subtrees without a replacement keep
    their identity.
    """
    result = []
    for shape in shapes:
        if shape.id in updates:
            result.append(updates[shape.id])
        elif isinstance(shape, Group):
            children = replace_shapes_by_id(shape.children, updates)
            if all(new is old for new, old in zip(children, shape.children)):
                result.append(shape)
            else:
                result.append(replace(shape, children=tuple(children)))
        else:
            result.append(shape)
    return result


@dataclass
class Document:
    """
    The root document containing the committed top-level shapes.

    Shapes are stored in paint order: later shapes are drawn on top.
    """
    id: UUID = field(default_factory=uuid4)
    name: str = "Untitled"
    width: float = 800.0
    height: float = 600.0
    shapes: List[Shape] = field(default_factory=list)

    def add_shape(self, shape: Shape) -> None:
        """Add a shape on top of the paint order."""
        self.shapes.append(shape)

    def remove_shape(self, shape_id: UUID) -> bool:
        """Remove a top-level shape by id."""
        for i, shape in enumerate(self.shapes):
            if shape.id == shape_id:
                del self.shapes[i]
                return True
        return False

    def get_shape_by_id(self, shape_id: UUID) -> Optional[Shape]:
        """Find a shape anywhere in the document, including inside groups."""
        return find_shape(self.shapes, shape_id)

    def update_shapes(self, updates: Dict[UUID, Shape]) -> None:
        """Replace shapes by id, recursing into groups."""
        if updates:
            self.shapes = replace_shapes_by_id(self.shapes, updates)

    def replace_shapes(self, shapes: Iterable[Shape]) -> None:
        """Replace the whole collection (used when a drag is committed)."""
        self.shapes = list(shapes)

    def get_design_bounds(self) -> Optional[BoundingBox]:
        """
        Calculate the bounding box of all visible shapes in the document.

        Returns:
            BoundingBox of all visible shapes, or None if no visible shapes
        """
        from ..graphics.bbox import get_shapes_bounding_box

        visible_shapes = [s for s in self.shapes if s.visible]
        if not visible_shapes:
            return None
        return get_shapes_bounding_box(visible_shapes)
