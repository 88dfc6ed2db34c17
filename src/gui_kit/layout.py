"""Shared screen composition helpers for Tkinter views."""

from collections.abc import Callable
from queue import Empty, Queue
from threading import Thread
import logging
import tkinter as tk
from tkinter import ttk

from src.gui_kit.ui_dispatch import UIDispatcher

__all__ = ["BaseScreen", "JobHandle", "run_threaded_job"]

logger = logging.getLogger("layout")

_POLL_MS = 25


class JobHandle:
    """Ticket for one background job; a cancelled ticket drops its callbacks."""

    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


def run_threaded_job(
    widget: tk.Misc,
    fn: Callable[[], object],
    on_ok: Callable[[object], None],
    on_err: Callable[[Exception], None] | None = None,
    *,
    on_error_hook: Callable[[Exception], None] | None = None,
) -> JobHandle:
    """Run fn on a worker thread; every callback runs on the Tk thread.

    The worker only computes and queues its outcome. ``on_error_hook`` sees
    each failure before ``on_err`` and is where shared reactions (such as
    signing out on an expired session) belong.
    """

    handle = JobHandle()
    dispatcher = UIDispatcher.from_widget(widget)
    queue: Queue[tuple[str, object]] = Queue(maxsize=1)
    Thread(target=_run_job, args=(queue, fn), daemon=True).start()

    def _poll() -> None:
        try:
            state, payload = queue.get_nowait()
        except Empty:
            dispatcher.post(_poll, delay_ms=_POLL_MS)
            return

        if handle.cancelled:
            logger.debug("Dropping result of cancelled job (%s)", state)
            return
        if state == "ok":
            on_ok(payload)
            return

        if on_error_hook is not None:
            on_error_hook(payload)  # type: ignore[arg-type]
        if on_err is not None:
            on_err(payload)  # type: ignore[arg-type]
        else:
            logger.warning("Background job failed: %s", payload)

    dispatcher.post(_poll, delay_ms=_POLL_MS)
    return handle


def _run_job(queue: Queue[tuple[str, object]], fn: Callable[[], object]) -> None:
    try:
        queue.put(("ok", fn()))
    except Exception as exc:  # pragma: no cover - exercised through callbacks
        queue.put(("err", exc))


class BaseScreen(ttk.Frame):
    """Base pattern for modular app screens."""

    def __init__(self, parent: tk.Widget, *, on_job_error: Callable[[Exception], None] | None = None) -> None:
        super().__init__(parent)
        self.status_var = tk.StringVar(value="Ready.")
        self.on_job_error = on_job_error
        self._busy_widgets: list[ttk.Progressbar] = []
        self._busy_count = 0

    def build(self) -> None:
        raise NotImplementedError("Screen subclasses should implement build().")

    def build_header(self, parent: ttk.Frame, *, title: str, subtitle: str | None = None) -> ttk.Frame:
        frame = ttk.Frame(parent)
        frame.pack(fill="x", pady=(0, 10))
        ttk.Label(frame, text=title, font=("Segoe UI", 16, "bold")).pack(side="left")
        if subtitle:
            ttk.Label(frame, text=subtitle).pack(side="left", padx=(10, 0))
        return frame

    def build_status_bar(self, parent: ttk.Frame, *, include_progress: bool = True) -> ttk.Frame:
        """Build a status line with optional indeterminate progress indicator."""

        frame = ttk.Frame(parent)
        frame.pack(fill="x", pady=(10, 0))

        ttk.Label(frame, textvariable=self.status_var).pack(side="left", anchor="w")
        if include_progress:
            progress = ttk.Progressbar(frame, mode="indeterminate", length=160)
            progress.pack(side="right")
            self._busy_widgets.append(progress)
        return frame

    def set_status(self, text: str) -> None:
        self.status_var.set(text)

    def set_busy(self, busy: bool) -> None:
        """Start/stop registered busy indicators; nested jobs keep them spinning."""

        self._busy_count = max(0, self._busy_count + (1 if busy else -1))
        for progress in self._busy_widgets:
            if self._busy_count:
                progress.start(10)
            else:
                progress.stop()

    def safe_threaded_job(
        self,
        fn: Callable[[], object],
        on_ok: Callable[[object], None],
        on_err: Callable[[Exception], None] | None = None,
    ) -> JobHandle:
        """Run work in a background thread and marshal result callbacks to Tk."""

        return run_threaded_job(self, fn, on_ok, on_err, on_error_hook=self.on_job_error)
