import tkinter as tk
import unittest

from src.gui_kit.ui_dispatch import TkPlatform
from src.gui_kit.ui_dispatch import UIDispatcher
from src.gui_kit.ui_dispatch import safe_dispatch


class _FakeWidget:
    def __init__(self) -> None:
        self.alive = True
        self.raise_on_after = False

    def after(self, _ms: int, callback):
        if self.raise_on_after:
            raise tk.TclError("widget destroyed")
        callback()
        return None

    def winfo_exists(self) -> int:
        return 1 if self.alive else 0


class TestUIDispatch(unittest.TestCase):
    def test_safe_dispatch_skips_when_not_alive(self):
        calls: list[str] = []

        def after(_ms: int, callback):
            callback()
            return None

        ok = safe_dispatch(after, lambda: calls.append("ran"), is_alive=lambda: False)
        self.assertFalse(ok)
        self.assertEqual(calls, [])

    def test_safe_dispatch_returns_false_on_tcl_error(self):
        def bad_after(_ms: int, _callback):
            raise tk.TclError("widget destroyed")

        ok = safe_dispatch(bad_after, lambda: None)
        self.assertFalse(ok)

    def test_dispatcher_post_runs_when_widget_alive(self):
        widget = _FakeWidget()
        dispatcher = UIDispatcher.from_widget(widget)
        calls: list[int] = []

        self.assertTrue(dispatcher.post(lambda: calls.append(7)))
        self.assertEqual(calls, [7])

    def test_dispatcher_post_drops_when_widget_is_destroyed(self):
        widget = _FakeWidget()
        dispatcher = UIDispatcher.from_widget(widget)
        calls: list[int] = []

        widget.alive = False
        self.assertFalse(dispatcher.post(lambda: calls.append(9)))
        self.assertEqual(calls, [])


class _FakeToplevel:
    """Keeps the <ButtonPress> script as Tk does: one line per bound command."""

    def __init__(self, script: str = "") -> None:
        self.bindings: list[tuple[str, object]] = []
        self.script = script
        self.deleted: list[str] = []

    def bind(self, sequence: str, func=None, add=None):
        if func is None:
            return self.script
        if isinstance(func, str):
            self.script = func
            return ""
        self.bindings.append((sequence, func))
        funcid = f"bind{len(self.bindings)}_on_pointer_press"
        line = f'if {{"[{funcid} %W]" == "break"}} break\n'
        self.script = f"{self.script}\n{line}" if add and self.script else line
        return funcid

    def deletecommand(self, name: str) -> None:
        self.deleted.append(name)


class _FakeContainer(_FakeWidget):
    def __init__(self, path: str) -> None:
        super().__init__()
        self.path = path
        self.toplevel = _FakeToplevel()
        self.scheduled: dict[str, tuple[int, object]] = {}
        self.cancel_error: Exception | None = None

    def __str__(self) -> str:
        return self.path

    def after(self, ms: int, callback):
        handle = f"after#{len(self.scheduled)}"
        self.scheduled[handle] = (ms, callback)
        return handle

    def after_cancel(self, handle) -> None:
        if self.cancel_error is not None:
            raise self.cancel_error
        self.scheduled.pop(handle, None)

    def winfo_toplevel(self) -> _FakeToplevel:
        return self.toplevel


class _FakeEvent:
    def __init__(self, widget: str) -> None:
        self.widget = widget


class TestTkPlatform(unittest.TestCase):
    def setUp(self):
        self.container = _FakeContainer(".app.form.company")
        self.platform = TkPlatform(self.container)

    def test_schedule_after_clamps_negative_delay(self):
        handle = self.platform.schedule_after(-20, lambda: None)
        self.assertEqual(self.container.scheduled[handle][0], 0)
        self.platform.cancel_scheduled(handle)
        self.assertEqual(self.container.scheduled, {})

    def test_cancel_of_stale_handle_is_ignored(self):
        self.container.cancel_error = tk.TclError("bad handle")
        self.platform.cancel_scheduled("after#gone")

    def test_outside_click_listeners_share_one_binding(self):
        calls: list[str] = []
        remove_a = self.platform.add_outside_click_listener(lambda: calls.append("a"))
        self.platform.add_outside_click_listener(lambda: calls.append("b"))
        self.assertEqual(len(self.container.toplevel.bindings), 1)

        handler = self.container.toplevel.bindings[0][1]
        handler(_FakeEvent(".app.sidebar"))
        self.assertEqual(calls, ["a", "b"])

        remove_a()
        remove_a()
        handler(_FakeEvent(".app.sidebar"))
        self.assertEqual(calls, ["a", "b", "b"])

    def test_clicks_inside_container_are_not_outside(self):
        calls: list[str] = []
        self.platform.add_outside_click_listener(lambda: calls.append("outside"))
        handler = self.container.toplevel.bindings[0][1]

        handler(_FakeEvent(".app.form.company"))
        handler(_FakeEvent(".app.form.company.entry"))
        self.assertEqual(calls, [])
        handler(_FakeEvent(".app.form.company2"))
        self.assertEqual(calls, ["outside"])

    def test_destroyed_container_ignores_clicks(self):
        calls: list[str] = []
        self.platform.add_outside_click_listener(lambda: calls.append("outside"))
        self.container.alive = False
        self.container.toplevel.bindings[0][1](_FakeEvent(".elsewhere"))
        self.assertEqual(calls, [])

    def test_last_listener_removal_restores_toplevel_script(self):
        other_handler = 'if {"[99other %W]" == "break"} break\n'
        self.container.toplevel.script = other_handler

        remove_a = self.platform.add_outside_click_listener(lambda: None)
        remove_b = self.platform.add_outside_click_listener(lambda: None)
        self.assertIn("bind1_on_pointer_press", self.container.toplevel.script)

        remove_a()
        self.assertTrue(self.platform.bound, "one listener is still registered")
        remove_b()
        self.assertFalse(self.platform.bound)
        self.assertEqual(self.container.toplevel.script, other_handler)
        self.assertEqual(self.container.toplevel.deleted, ["bind1_on_pointer_press"])

    def test_repeated_add_remove_cycles_leave_no_binding(self):
        for _ in range(5):
            remove = self.platform.add_outside_click_listener(lambda: None)
            remove()
        self.assertEqual(self.container.toplevel.script, "")
        self.assertEqual(len(self.container.toplevel.deleted), 5)
        self.assertEqual(len(self.container.toplevel.bindings), 5)


if __name__ == "__main__":
    unittest.main()
