"""
Affine matrices for box shapes.

A box shape's local-to-world matrix is ``T(c) . R . K . S . T(-c)`` where
``c`` is the box centre, ``R`` the rotation, ``K`` the shear
``[[1, skew_x], [skew_y, 1]]`` and ``S`` the scale.
"""

from typing import Iterable, List
import math

import numpy as np

from ..core.shapes import Point, BoxShape


def translation_matrix(dx: float, dy: float) -> np.ndarray:
    return np.array([
        [1.0, 0.0, dx],
        [0.0, 1.0, dy],
        [0.0, 0.0, 1.0]
    ])


def rotation_matrix(angle: float) -> np.ndarray:
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return np.array([
        [cos_a, -sin_a, 0.0],
        [sin_a, cos_a, 0.0],
        [0.0, 0.0, 1.0]
    ])


def shear_matrix(skew_x: float, skew_y: float) -> np.ndarray:
    return np.array([
        [1.0, skew_x, 0.0],
        [skew_y, 1.0, 0.0],
        [0.0, 0.0, 1.0]
    ])


def scale_matrix(scale_x: float, scale_y: float) -> np.ndarray:
    return np.array([
        [scale_x, 0.0, 0.0],
        [0.0, scale_y, 0.0],
        [0.0, 0.0, 1.0]
    ])


def shape_matrix(shape: BoxShape) -> np.ndarray:
    """Local-to-world matrix of a box shape (identity for anything else)."""
    if not isinstance(shape, BoxShape):
        return np.identity(3)
    c = shape.center
    return (
        translation_matrix(c.x, c.y)
        @ rotation_matrix(shape.rotation)
        @ shear_matrix(shape.skew_x, shape.skew_y)
        @ scale_matrix(shape.scale_x, shape.scale_y)
        @ translation_matrix(-c.x, -c.y)
    )


def is_plain_box(shape: BoxShape) -> bool:
    """True when the shape's matrix can only mirror it about its own centre."""
    return (shape.rotation == 0 and shape.skew_x == 0 and shape.skew_y == 0 and
            abs(shape.scale_x) == 1 and abs(shape.scale_y) == 1)


def transform_points(matrix: np.ndarray, points: Iterable[Point]) -> List[Point]:
    """Apply a 3x3 affine matrix to points."""
    points = list(points)
    if not points:
        return []
    coords = np.array([[p.x, p.y, 1.0] for p in points]).T
    mapped = matrix @ coords
    return [Point(float(x), float(y)) for x, y in zip(mapped[0], mapped[1])]
