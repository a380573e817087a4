"""
Inkboard Core Shapes Module

Defines the fundamental value types: Point, BoundingBox, and all shape types.

Shapes are immutable. Every transform returns a new shape value built from
the original, so a drag can always be recomputed from its captured start
state plus the accumulated pointer delta.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Tuple
from uuid import UUID, uuid4
import math


# Skew coefficients are limited to this magnitude
MAX_SHEAR = 50.0

# Brush paths are closed when their endpoints coincide within this distance
CLOSED_PATH_TOLERANCE = 1e-6


def clamp_shear(value: float) -> float:
    """Clamp a skew coefficient to [-MAX_SHEAR, MAX_SHEAR]; non-finite becomes 0."""
    if not math.isfinite(value):
        return 0.0
    return max(-MAX_SHEAR, min(MAX_SHEAR, value))


@dataclass(frozen=True)
class Point:
    """A 2D point."""
    x: float
    y: float

    def __add__(self, other: 'Point') -> 'Point':
        return Point(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point') -> 'Point':
        return Point(self.x - other.x, self.y - other.y)

    def distance_to(self, other: 'Point') -> float:
        """Calculate Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def rotate(self, angle: float, center: 'Point' = None) -> 'Point':
        """Rotate point around center by angle (radians)."""
        if center is None:
            center = Point(0, 0)
        cos_a = math.cos(angle)
        sin_a = math.sin(angle)
        dx = self.x - center.x
        dy = self.y - center.y
        return Point(
            center.x + dx * cos_a - dy * sin_a,
            center.y + dx * sin_a + dy * cos_a
        )

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @classmethod
    def from_rect(cls, x: float, y: float, width: float, height: float) -> 'BoundingBox':
        """Build a box from a top-left corner and a size."""
        return cls(x, y, x + width, y + height)

    @classmethod
    def from_points(cls, points) -> 'BoundingBox':
        """Smallest box containing all points (a zero box at the origin if empty)."""
        points = list(points)
        if not points:
            return cls(0.0, 0.0, 0.0, 0.0)
        return cls(
            min_x=min(p.x for p in points),
            min_y=min(p.y for p in points),
            max_x=max(p.x for p in points),
            max_y=max(p.y for p in points)
        )

    @property
    def x(self) -> float:
        return self.min_x

    @property
    def y(self) -> float:
        return self.min_y

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def center(self) -> Point:
        return Point(
            (self.min_x + self.max_x) / 2,
            (self.min_y + self.max_y) / 2
        )

    def contains(self, point: Point) -> bool:
        """Check if point is inside bounding box."""
        return (self.min_x <= point.x <= self.max_x and
                self.min_y <= point.y <= self.max_y)

    def intersects(self, other: 'BoundingBox') -> bool:
        """Check if two bounding boxes overlap."""
        return not (self.max_x < other.min_x or
                    self.min_x > other.max_x or
                    self.max_y < other.min_y or
                    self.min_y > other.max_y)

    def union(self, other: 'BoundingBox') -> 'BoundingBox':
        """Smallest box containing both boxes."""
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y)
        )

    def expanded(self, margin: float) -> 'BoundingBox':
        """Grow the box by margin on every side."""
        return BoundingBox(
            self.min_x - margin, self.min_y - margin,
            self.max_x + margin, self.max_y + margin
        )


@dataclass(frozen=True)
class ShapeStyle:
    """Visual attributes carried through every transform untouched."""
    stroke_color: str = "#000000"
    fill_color: Optional[str] = None
    stroke_width: float = 1.0
    opacity: float = 1.0
    dash: Tuple[float, ...] = ()


@dataclass(frozen=True)
class Anchor:
    """A vector path anchor with its incoming and outgoing Bezier handles."""
    point: Point
    handle_in: Point
    handle_out: Point

    @classmethod
    def corner(cls, point: Point) -> 'Anchor':
        """Anchor with both handles collapsed onto the point (straight segments)."""
        return cls(point, point, point)


@dataclass(frozen=True, kw_only=True)
class Shape(ABC):
    """
    Abstract base class for all shapes.

    Every shape carries a unique id that survives every transform, a name,
    visibility and lock flags, and a pass-through style.
    """
    id: UUID = field(default_factory=uuid4)
    name: str = ""
    visible: bool = True
    locked: bool = False
    style: ShapeStyle = field(default_factory=ShapeStyle)

    @property
    @abstractmethod
    def kind(self) -> str:
        """Short type name used for logging and cursors."""
        pass


@dataclass(frozen=True, kw_only=True)
class BoxShape(Shape):
    """
    A shape described by a box plus rotation, scale and skew.

    (x, y) is the unrotated, unscaled top-left corner. Rotation (radians),
    scale and skew all apply about the box centre.
    """
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    rotation: float = 0.0
    scale_x: float = 1.0
    scale_y: float = 1.0
    skew_x: float = 0.0
    skew_y: float = 0.0

    def __post_init__(self):
        # Negative sizes are expressed through the scale sign instead
        object.__setattr__(self, 'width', abs(self.width))
        object.__setattr__(self, 'height', abs(self.height))
        object.__setattr__(self, 'skew_x', clamp_shear(self.skew_x))
        object.__setattr__(self, 'skew_y', clamp_shear(self.skew_y))

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)


@dataclass(frozen=True, kw_only=True)
class Rectangle(BoxShape):
    """Rectangle shape with optional rounded corners."""
    corner_radius: float = 0.0

    @property
    def kind(self) -> str:
        return "rectangle"


@dataclass(frozen=True, kw_only=True)
class Ellipse(BoxShape):
    """Ellipse inscribed in its box."""

    @property
    def kind(self) -> str:
        return "ellipse"


@dataclass(frozen=True, kw_only=True)
class ImageShape(BoxShape):
    """
    Placed raster image.

    ``crop`` is expressed in the image's local box frame: (0, 0) is the
    unrotated top-left corner and (width, height) the opposite corner.
    """
    source: str = ""
    crop: Optional[BoundingBox] = None

    @property
    def kind(self) -> str:
        return "image"


@dataclass(frozen=True, kw_only=True)
class Frame(BoxShape):
    """Rectangular frame that may clip its content when rendered."""
    clip_content: bool = True

    @property
    def kind(self) -> str:
        return "frame"


@dataclass(frozen=True, kw_only=True)
class TextShape(BoxShape):
    """Text block laid out inside its box."""
    text: str = ""
    font_family: str = "Arial"
    font_size: float = 12.0

    @property
    def kind(self) -> str:
        return "text"


@dataclass(frozen=True, kw_only=True)
class Polygon(BoxShape):
    """Regular polygon inscribed in its box, first vertex at the top."""
    sides: int = 5

    def __post_init__(self):
        super().__post_init__()
        object.__setattr__(self, 'sides', max(3, int(self.sides)))

    @property
    def kind(self) -> str:
        return "polygon"


@dataclass(frozen=True, kw_only=True)
class VectorPath(Shape):
    """Bezier path made of anchors in absolute canvas coordinates."""
    anchors: Tuple[Anchor, ...] = ()
    closed: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'anchors', tuple(self.anchors))

    @property
    def kind(self) -> str:
        return "path"

    @property
    def points(self) -> Tuple[Point, ...]:
        return tuple(a.point for a in self.anchors)


@dataclass(frozen=True, kw_only=True)
class BrushPath(Shape):
    """Freehand stroke made of raw sampled points."""
    points: Tuple[Point, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'points', tuple(self.points))

    @property
    def kind(self) -> str:
        return "brush"

    @property
    def closed(self) -> bool:
        """A stroke is closed when its first and last points coincide."""
        if len(self.points) < 3:
            return False
        return self.points[0].distance_to(self.points[-1]) <= CLOSED_PATH_TOLERANCE


@dataclass(frozen=True, kw_only=True)
class Group(Shape):
    """
    Ordered collection of child shapes.

    Children live in the same world space as the group; a group has no
    geometry of its own.
    """
    children: Tuple[Shape, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, 'children', tuple(self.children))

    @property
    def kind(self) -> str:
        return "group"
