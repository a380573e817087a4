"""
Frame-coalesced pointer input.

Pointer devices report positions far more often than the canvas can be
redrawn. The coalescer keeps only the newest sample and applies it once
per frame.
"""

from typing import Any, Callable, Optional
import logging

from PyQt6.QtCore import QTimer

logger = logging.getLogger(__name__)

Scheduler = Callable[[Callable[[], None]], None]


class FrameCoalescer:
    """
    Single-slot buffer between pointer events and the frame tick.

    Each submitted sample overwrites the pending one. The first sample after
    a drain schedules exactly one callback through the scheduler.
    """

    def __init__(self, apply_fn: Callable[[Any], None],
                 schedule: Optional[Scheduler] = None,
                 interval_ms: int = 16):
        """
        Initialize the coalescer.

        Args:
            apply_fn: Called with the newest sample once per frame
            schedule: Registers a callback for the next frame (defaults to
                QTimer.singleShot with interval_ms)
            interval_ms: Frame interval used by the default scheduler
        """
        self._apply = apply_fn
        self._interval_ms = interval_ms
        self._schedule = schedule or self._schedule_with_timer
        self._pending: Any = None
        self._has_pending = False
        self._scheduled = False
        self._generation = 0

    def _schedule_with_timer(self, callback: Callable[[], None]) -> None:
        QTimer.singleShot(self._interval_ms, callback)

    @property
    def has_pending(self) -> bool:
        return self._has_pending

    def submit(self, sample: Any) -> None:
        """Store sample as the pending one and make sure a frame is scheduled."""
        self._pending = sample
        self._has_pending = True
        if not self._scheduled:
            self._scheduled = True
            generation = self._generation
            self._schedule(lambda: self._on_frame(generation))

    def _on_frame(self, generation: int) -> None:
        if generation != self._generation:
            # Cancelled or flushed since this frame was scheduled
            return
        self._scheduled = False
        self.flush()

    def flush(self) -> bool:
        """
        Apply the pending sample immediately.

        Returns:
            True if a sample was applied
        """
        self._generation += 1
        self._scheduled = False
        if not self._has_pending:
            return False
        sample = self._pending
        self._pending = None
        self._has_pending = False
        self._apply(sample)
        return True

    def cancel(self) -> None:
        """Drop the pending sample without applying it."""
        if self._has_pending:
            logger.debug("Dropping pending pointer sample")
        self._generation += 1
        self._scheduled = False
        self._pending = None
        self._has_pending = False
