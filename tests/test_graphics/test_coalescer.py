"""
Tests for frame-coalesced pointer input.
"""

import unittest

from inkboard.graphics.coalescer import FrameCoalescer


class ManualScheduler:
    """Collects frame callbacks so tests can run them explicitly."""

    def __init__(self):
        self.callbacks = []

    def __call__(self, callback):
        self.callbacks.append(callback)

    def run(self):
        callbacks, self.callbacks = self.callbacks, []
        for callback in callbacks:
            callback()


class TestFrameCoalescer(unittest.TestCase):
    """Test single-slot coalescing."""

    def setUp(self):
        self.applied = []
        self.scheduler = ManualScheduler()
        self.coalescer = FrameCoalescer(self.applied.append, schedule=self.scheduler)

    def test_only_latest_sample_applied(self):
        for i in range(5):
            self.coalescer.submit(i)
        self.assertEqual(len(self.scheduler.callbacks), 1)
        self.scheduler.run()
        self.assertEqual(self.applied, [4])

    def test_reschedules_after_frame(self):
        self.coalescer.submit(1)
        self.scheduler.run()
        self.coalescer.submit(2)
        self.assertEqual(len(self.scheduler.callbacks), 1)
        self.scheduler.run()
        self.assertEqual(self.applied, [1, 2])

    def test_flush_applies_immediately(self):
        self.coalescer.submit("a")
        self.assertTrue(self.coalescer.flush())
        self.assertEqual(self.applied, ["a"])
        # The frame scheduled earlier no longer applies anything
        self.scheduler.run()
        self.assertEqual(self.applied, ["a"])
        self.assertFalse(self.coalescer.flush())

    def test_cancel_drops_pending(self):
        self.coalescer.submit("a")
        self.coalescer.cancel()
        self.assertFalse(self.coalescer.has_pending)
        self.scheduler.run()
        self.assertEqual(self.applied, [])


if __name__ == '__main__':
    unittest.main()
