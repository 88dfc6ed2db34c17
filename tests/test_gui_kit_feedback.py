import unittest

from _fakes import ManualPlatform

from src.gui_kit.feedback import ToastQueue
from src.gui_kit.tokens import ToastVariant


class TestToastQueue(unittest.TestCase):
    def setUp(self):
        self.platform = ManualPlatform()
        self.queue = ToastQueue(self.platform, duration_ms=1000, max_toasts=3)
        self.changes = 0

        def _count() -> None:
            self.changes += 1

        self.queue.subscribe(_count)

    def test_add_returns_id_and_expires_after_duration(self):
        toast_id = self.queue.add(title="Saved", description="Employee created", variant="success")
        self.assertEqual(toast_id, "toast-1")
        toast = self.queue.toasts[0]
        self.assertEqual(toast.variant, ToastVariant.SUCCESS)
        self.assertEqual(toast.text, "Saved\nEmployee created")

        self.platform.advance(999)
        self.assertEqual(len(self.queue.toasts), 1)
        self.platform.advance(1)
        self.assertEqual(self.queue.toasts, ())
        self.assertEqual(self.changes, 2)

    def test_blank_toasts_are_not_queued(self):
        self.assertIsNone(self.queue.add(title="  ", description=None))
        self.assertEqual(self.queue.toasts, ())
        self.assertEqual(self.changes, 0)

    def test_oldest_toast_is_dropped_past_the_cap(self):
        for index in range(5):
            self.queue.add(description=f"message {index}")
        self.assertEqual([toast.description for toast in self.queue.toasts], ["message 2", "message 3", "message 4"])
        self.assertEqual(self.platform.pending_timers, 3)

    def test_manual_remove_cancels_expiry_timer(self):
        toast_id = self.queue.add(description="Dismiss me")
        self.assertTrue(self.queue.remove(toast_id))
        self.assertFalse(self.queue.remove(toast_id))
        self.assertEqual(self.platform.pending_timers, 0)

    def test_per_toast_duration_overrides_default(self):
        self.queue.add(description="short", duration_ms=300)
        self.queue.add(description="default")
        self.platform.advance(300)
        self.assertEqual([toast.description for toast in self.queue.toasts], ["default"])

    def test_clear_drops_everything(self):
        self.queue.add(description="a")
        self.queue.add(description="b")
        self.queue.clear()
        self.assertEqual(self.queue.toasts, ())
        self.assertEqual(self.platform.pending_timers, 0)

    def test_unknown_variant_is_rejected(self):
        with self.assertRaises(ValueError):
            self.queue.add(description="x", variant="fatal")


if __name__ == "__main__":
    unittest.main()
