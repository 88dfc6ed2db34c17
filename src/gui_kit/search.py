"""Free-text filter field with debounced change notification."""

from __future__ import annotations

from collections.abc import Callable
import tkinter as tk
from tkinter import ttk

from src.gui_kit.debounce import Debouncer
from src.gui_kit.ui_dispatch import Platform
from src.gui_kit.ui_dispatch import TkPlatform

__all__ = ["SearchEntry"]


class SearchEntry(ttk.Frame):
    """Search control that reports the query once typing pauses, plus a clear action."""

    def __init__(
        self,
        parent: tk.Widget,
        *,
        on_change: Callable[[str], None],
        delay_ms: int = 300,
        platform: Platform | None = None,
    ) -> None:
        super().__init__(parent)
        self._debouncer: Debouncer[str] = Debouncer(platform or TkPlatform(self), delay_ms, on_change)
        self.query_var = tk.StringVar(value="")

        self.columnconfigure(0, weight=1)

        self.entry = ttk.Entry(self, textvariable=self.query_var)
        self.entry.grid(row=0, column=0, sticky="ew")
        self.clear_btn = ttk.Button(self, text="Clear", width=6, command=self.clear)
        self.clear_btn.grid(row=0, column=1, padx=(6, 0))

        self.query_var.trace_add("write", self._on_query_changed)
        self.bind("<Destroy>", self._on_destroy, add="+")

    @property
    def query(self) -> str:
        return self.query_var.get()

    def clear(self) -> None:
        self.query_var.set("")

    def focus(self) -> None:
        self.entry.focus_set()

    def _on_query_changed(self, *_args) -> None:
        self._debouncer.push(self.query_var.get().strip())

    def _on_destroy(self, event: tk.Event) -> None:
        if event.widget is self:
            self._debouncer.close()
