"""
Editor settings and grid snapping.

Settings are persisted with QSettings under the "Inkboard" organisation.
"""

from dataclasses import dataclass, fields
from typing import Callable, Optional, Tuple
import logging
import math

from PyQt6.QtCore import QSettings

from .shapes import Point

logger = logging.getLogger(__name__)

SETTINGS_ORGANIZATION = "Inkboard"
SETTINGS_APPLICATION = "Inkboard"
SETTINGS_GROUP = "editor"


@dataclass
class EditorSettings:
    """Interaction settings for the selection and transform engine."""
    grid_spacing: float = 10.0                 # World units
    snap_to_grid: bool = True
    hit_radius: float = 8.0                    # Handle pick radius
    hit_tolerance: float = 3.0                 # Extra slack when picking strokes
    rotate_handle_offset: float = 20.0         # Distance of the rotation handle above the box
    axis_lock_switch_margin: float = 10.0      # Perpendicular excess needed to switch a locked axis
    rotation_snap_step: float = math.radians(15)
    coarse_rotation_snap_step: float = math.radians(45)
    frame_interval_ms: int = 16

    def validate(self) -> Tuple[bool, str]:
        """
        Validate settings.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if self.grid_spacing <= 0:
            return False, "Grid spacing must be positive"

        if self.hit_radius < 0 or self.hit_tolerance < 0:
            return False, "Hit radius and tolerance cannot be negative"

        if self.axis_lock_switch_margin < 0:
            return False, "Axis lock margin cannot be negative"

        if self.rotation_snap_step <= 0 or self.coarse_rotation_snap_step <= 0:
            return False, "Rotation snap steps must be positive"

        if self.frame_interval_ms < 0:
            return False, "Frame interval cannot be negative"

        return True, ""


def _open_settings(qsettings: Optional[QSettings]) -> QSettings:
    if qsettings is not None:
        return qsettings
    return QSettings(SETTINGS_ORGANIZATION, SETTINGS_APPLICATION)


def load_settings(qsettings: Optional[QSettings] = None) -> EditorSettings:
    """
    Load editor settings, falling back to defaults for missing or invalid values.

    Args:
        qsettings: Settings store to read (defaults to the application store)
    """
    store = _open_settings(qsettings)
    defaults = EditorSettings()
    values = {}

    store.beginGroup(SETTINGS_GROUP)
    try:
        for f in fields(EditorSettings):
            default = getattr(defaults, f.name)
            values[f.name] = store.value(f.name, default, type=type(default))
    finally:
        store.endGroup()

    settings = EditorSettings(**values)
    is_valid, error = settings.validate()
    if not is_valid:
        logger.warning("Ignoring stored editor settings: %s", error)
        return defaults
    return settings


def save_settings(settings: EditorSettings, qsettings: Optional[QSettings] = None) -> None:
    """Persist editor settings."""
    store = _open_settings(qsettings)
    store.beginGroup(SETTINGS_GROUP)
    try:
        for f in fields(EditorSettings):
            store.setValue(f.name, getattr(settings, f.name))
    finally:
        store.endGroup()
    store.sync()


def make_grid_snapper(settings: EditorSettings) -> Callable[[Point], Point]:
    """
    Build the snap_to_grid callable for the given settings.

    Returns the identity when snapping is disabled.
    """
    if not settings.snap_to_grid or settings.grid_spacing <= 0:
        return lambda point: point

    spacing = settings.grid_spacing

    def snap(point: Point) -> Point:
        """Snap point to grid."""
        x = round(point.x / spacing) * spacing
        y = round(point.y / spacing) * spacing
        return Point(x, y)

    return snap
