"""Tk event-loop helpers: safe cross-thread posting and the widget platform seam.

Widgets that need timers or outside-click detection depend on the small
``Platform`` surface below instead of calling ``after``/``bind`` directly, so
their state machines can be driven by a manual scheduler in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable
import logging
import tkinter as tk

__all__ = ["Platform", "TkPlatform", "UIDispatcher", "safe_dispatch"]

logger = logging.getLogger("ui_dispatch")


def _widget_alive(widget: object) -> bool:
    winfo_exists = getattr(widget, "winfo_exists", None)
    if not callable(winfo_exists):
        return False
    try:
        return bool(winfo_exists())
    except tk.TclError:
        return False


def safe_dispatch(
    after: Callable[[int, Callable[[], None]], object],
    callback: Callable[[], None],
    *,
    delay_ms: int = 0,
    is_alive: Callable[[], bool] | None = None,
) -> bool:
    if is_alive is not None and not bool(is_alive()):
        return False
    try:
        after(max(0, int(delay_ms)), callback)
    except tk.TclError:
        return False
    return True


@dataclass(frozen=True)
class UIDispatcher:
    """Posts callbacks onto the Tk loop, dropping them once the widget is gone."""

    after: Callable[[int, Callable[[], None]], object]
    is_alive: Callable[[], bool]

    @classmethod
    def from_widget(cls, widget: object) -> "UIDispatcher":
        after_cb = getattr(widget, "after", None)
        if not callable(after_cb):
            raise ValueError(
                "UI dispatcher requires widget.after callback support. "
                "Fix: pass a Tk widget with an after() method."
            )
        return cls(after=after_cb, is_alive=lambda: _widget_alive(widget))

    def post(self, callback: Callable[[], None], *, delay_ms: int = 0) -> bool:
        return safe_dispatch(
            self.after,
            callback,
            delay_ms=delay_ms,
            is_alive=self.is_alive,
        )


class Platform:
    """Timer and pointer services a headless widget model needs from its host."""

    def schedule_after(self, delay_ms: int, callback: Callable[[], None]) -> object:
        raise NotImplementedError

    def cancel_scheduled(self, handle: object) -> None:
        raise NotImplementedError

    def add_outside_click_listener(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Register callback for pointer presses outside the host; return a remover."""

        raise NotImplementedError


class TkPlatform(Platform):
    """Platform backed by a Tk container widget.

    Timers use ``after``/``after_cancel`` on the container. Outside clicks are
    detected with one ``<ButtonPress>`` binding on the toplevel, added with the
    first listener and taken out again with the last one. Other handlers bound
    to the same sequence are left in place.
    """

    def __init__(self, container: tk.Misc) -> None:
        self.container = container
        self._listeners: list[Callable[[], None]] = []
        self._bind_id: str | None = None
        self._toplevel: tk.Misc | None = None

    def schedule_after(self, delay_ms: int, callback: Callable[[], None]) -> object:
        # after(0) still runs on a later loop turn, never inline.
        return self.container.after(max(0, int(delay_ms)), callback)

    def cancel_scheduled(self, handle: object) -> None:
        try:
            self.container.after_cancel(handle)  # type: ignore[arg-type]
        except (tk.TclError, ValueError):
            logger.debug("after_cancel ignored for stale handle %r", handle)

    def add_outside_click_listener(self, callback: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(callback)
        if self._bind_id is None:
            self._toplevel = self.container.winfo_toplevel()
            self._bind_id = self._toplevel.bind("<ButtonPress>", self._on_pointer_press, add="+")

        def _remove() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)
            if not self._listeners:
                self._unbind()

        return _remove

    @property
    def bound(self) -> bool:
        return self._bind_id is not None

    def is_inside(self, widget: object) -> bool:
        container_path = str(self.container)
        widget_path = str(widget)
        return widget_path == container_path or widget_path.startswith(container_path + ".")

    def _unbind(self) -> None:
        bind_id, toplevel = self._bind_id, self._toplevel
        self._bind_id = None
        self._toplevel = None
        if bind_id is None or toplevel is None:
            return
        # Drop only our line from the sequence script; a bare unbind would
        # also remove handlers other widgets added with add="+".
        try:
            script = toplevel.bind("<ButtonPress>")
            kept = [line for line in str(script).split("\n") if line.strip() and bind_id not in line]
            toplevel.bind("<ButtonPress>", "".join(line + "\n" for line in kept))
        except tk.TclError:
            logger.debug("Toplevel already destroyed; skipping <ButtonPress> cleanup")
        try:
            toplevel.deletecommand(bind_id)
        except tk.TclError:
            logger.debug("Outside-click command %s already deleted", bind_id)

    def _on_pointer_press(self, event: tk.Event) -> None:
        if not _widget_alive(self.container):
            return
        if self.is_inside(event.widget):
            return
        for listener in list(self._listeners):
            listener()
