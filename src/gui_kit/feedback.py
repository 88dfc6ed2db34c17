"""Non-blocking toast notifications: a headless queue and its Tk renderer."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import itertools
import logging
import tkinter as tk
from tkinter import ttk

from src.gui_kit.tokens import ToastVariant
from src.gui_kit.tokens import toast_colors
from src.gui_kit.ui_dispatch import Platform
from src.gui_kit.ui_dispatch import TkPlatform

__all__ = ["Toast", "ToastCenter", "ToastQueue"]

logger = logging.getLogger("feedback")

DEFAULT_DURATION_MS = 10_000


@dataclass(frozen=True)
class Toast:
    id: str
    title: str | None
    description: str | None
    variant: ToastVariant = ToastVariant.DEFAULT

    @property
    def text(self) -> str:
        parts = [part for part in (self.title, self.description) if part]
        return "\n".join(parts)


class ToastQueue:
    """Ordered toasts that expire on their own after ``duration_ms``."""

    def __init__(
        self,
        platform: Platform,
        *,
        duration_ms: int = DEFAULT_DURATION_MS,
        max_toasts: int = 4,
    ) -> None:
        self._platform = platform
        self.duration_ms = max(250, int(duration_ms))
        self.max_toasts = max(1, int(max_toasts))
        self._toasts: list[Toast] = []
        self._timers: dict[str, object] = {}
        self._ids = itertools.count(1)
        self._listeners: list[Callable[[], None]] = []

    @property
    def toasts(self) -> tuple[Toast, ...]:
        return tuple(self._toasts)

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def add(
        self,
        *,
        title: str | None = None,
        description: str | None = None,
        variant: ToastVariant | str = ToastVariant.DEFAULT,
        duration_ms: int | None = None,
    ) -> str | None:
        clean_title = (title or "").strip() or None
        clean_description = (description or "").strip() or None
        if clean_title is None and clean_description is None:
            return None

        toast = Toast(
            id=f"toast-{next(self._ids)}",
            title=clean_title,
            description=clean_description,
            variant=ToastVariant(variant),
        )
        self._toasts.append(toast)
        timeout = self.duration_ms if duration_ms is None else max(250, int(duration_ms))
        self._timers[toast.id] = self._platform.schedule_after(timeout, lambda: self._expire(toast.id))
        logger.debug("Toast %s (%s): %s", toast.id, toast.variant.value, toast.text)

        while len(self._toasts) > self.max_toasts:
            self._drop(self._toasts[0].id)
        self._changed()
        return toast.id

    def remove(self, toast_id: str) -> bool:
        if not self._drop(toast_id):
            return False
        self._changed()
        return True

    def clear(self) -> None:
        for toast in list(self._toasts):
            self._drop(toast.id)
        self._changed()

    def _expire(self, toast_id: str) -> None:
        self._timers.pop(toast_id, None)
        self.remove(toast_id)

    def _drop(self, toast_id: str) -> bool:
        for index, toast in enumerate(self._toasts):
            if toast.id == toast_id:
                del self._toasts[index]
                handle = self._timers.pop(toast_id, None)
                if handle is not None:
                    self._platform.cancel_scheduled(handle)
                return True
        return False

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()


class ToastCenter(ttk.Frame):
    """Stacked toast cards floating in the top-right corner of the parent."""

    def __init__(
        self,
        parent: tk.Widget,
        *,
        default_duration_ms: int = DEFAULT_DURATION_MS,
        max_toasts: int = 4,
        platform: Platform | None = None,
    ) -> None:
        super().__init__(parent)
        self.queue = ToastQueue(
            platform or TkPlatform(self),
            duration_ms=default_duration_ms,
            max_toasts=max_toasts,
        )
        self._cards: dict[str, tk.Frame] = {}
        self.columnconfigure(0, weight=1)

        self.place(in_=parent, relx=1.0, x=-12, y=12, anchor="ne")
        self._unsubscribe = self.queue.subscribe(self._render)
        self.bind("<Destroy>", self._on_destroy, add="+")

    def show_toast(
        self,
        message: str,
        *,
        title: str | None = None,
        level: ToastVariant | str = ToastVariant.INFO,
        duration_ms: int | None = None,
    ) -> str | None:
        return self.queue.add(title=title, description=message, variant=level, duration_ms=duration_ms)

    def _on_destroy(self, event: tk.Event) -> None:
        if event.widget is not self:
            return
        self._unsubscribe()
        self.queue.clear()

    def _render(self) -> None:
        if not self.winfo_exists():
            return
        live_ids = {toast.id for toast in self.queue.toasts}
        for toast_id in list(self._cards):
            if toast_id not in live_ids:
                card = self._cards.pop(toast_id)
                try:
                    card.destroy()
                except tk.TclError:
                    continue

        for row, toast in enumerate(self.queue.toasts):
            card = self._cards.get(toast.id)
            if card is None:
                card = self._build_card(toast)
                self._cards[toast.id] = card
            card.grid(row=row, column=0, sticky="ew", pady=(0, 6))

    def _build_card(self, toast: Toast) -> tk.Frame:
        background, foreground = toast_colors(toast.variant)
        card = tk.Frame(self, bg=background, bd=1, relief="solid")
        card.columnconfigure(0, weight=1)
        tk.Label(
            card,
            text=toast.text,
            bg=background,
            fg=foreground,
            justify="left",
            anchor="w",
            wraplength=360,
            padx=8,
            pady=6,
        ).grid(row=0, column=0, sticky="ew")
        tk.Button(
            card,
            text="x",
            bg=background,
            fg=foreground,
            relief="flat",
            command=lambda toast_id=toast.id: self.queue.remove(toast_id),
        ).grid(row=0, column=1, sticky="ne", padx=(0, 4), pady=4)
        return card
