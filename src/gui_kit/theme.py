"""Theme state, its persisted store, and the palette projection applied to ttk."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
import logging
import tkinter as tk
from tkinter import ttk

from src.local_storage import LocalStorage

__all__ = [
    "DARK",
    "LIGHT",
    "Palette",
    "ThemeState",
    "ThemeStore",
    "apply",
    "apply_palette",
]

logger = logging.getLogger("theme")

LIGHT = "light"
DARK = "dark"
THEME_STORAGE_KEY = "theme-storage"


@dataclass(frozen=True)
class ThemeState:
    mode: str = LIGHT

    def __post_init__(self) -> None:
        if self.mode not in (LIGHT, DARK):
            raise ValueError(
                f"Theme / mode: '{self.mode}' is not a theme. Fix: use '{LIGHT}' or '{DARK}'."
            )


@dataclass(frozen=True)
class Palette:
    name: str
    background: str
    surface: str
    field: str
    border: str
    text: str
    muted: str
    accent: str
    accent_active: str


LIGHT_PALETTE = Palette(
    name=LIGHT,
    background="#f9fafb",
    surface="#ffffff",
    field="#ffffff",
    border="#d1d5db",
    text="#111827",
    muted="#6b7280",
    accent="#2563eb",
    accent_active="#1d4ed8",
)

DARK_PALETTE = Palette(
    name=DARK,
    background="#1e1f22",
    surface="#2a2d33",
    field="#2f3239",
    border="#3d414a",
    text="#f2f3f5",
    muted="#c8ccd4",
    accent="#6aa5ff",
    accent_active="#8db9ff",
)


def apply(state: ThemeState) -> Palette:
    """Project theme state to the palette every widget is styled from."""

    return DARK_PALETTE if state.mode == DARK else LIGHT_PALETTE


class ThemeStore:
    """Holds the current ThemeState and persists it to local storage."""

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage
        self._state = ThemeState()
        self._listeners: list[Callable[[ThemeState], None]] = []
        self._hydrated = False

    @property
    def state(self) -> ThemeState:
        return self._state

    @property
    def hydrated(self) -> bool:
        return self._hydrated

    def hydrate(self) -> ThemeState:
        raw = self._storage.get_item(THEME_STORAGE_KEY)
        if raw is not None:
            try:
                self._state = ThemeState(mode=raw.strip().lower())
            except ValueError as exc:
                logger.warning("Ignoring stored theme: %s", exc)
        self._hydrated = True
        self._notify()
        return self._state

    def set_mode(self, mode: str) -> ThemeState:
        state = ThemeState(mode=mode)
        if state == self._state:
            return state
        self._state = state
        self._storage.set_item(THEME_STORAGE_KEY, state.mode)
        self._notify()
        return state

    def toggle(self) -> ThemeState:
        return self.set_mode(LIGHT if self._state.mode == DARK else DARK)

    def subscribe(self, listener: Callable[[ThemeState], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)


def apply_palette(root: tk.Misc, palette: Palette, widget_root: tk.Misc | None = None) -> None:
    """Style ttk widgets and plain tk widgets under widget_root from palette."""

    style = ttk.Style(root)
    if "clam" in style.theme_names():
        style.theme_use("clam")

    style.configure(".", background=palette.background, foreground=palette.text)
    style.configure("TFrame", background=palette.background)
    style.configure("TLabel", background=palette.background, foreground=palette.text)
    style.configure(
        "TButton",
        background=palette.surface,
        foreground=palette.text,
        bordercolor=palette.border,
        lightcolor=palette.border,
        darkcolor=palette.border,
    )
    style.map(
        "TButton",
        background=[("active", palette.accent), ("pressed", palette.accent_active)],
        foreground=[("disabled", palette.muted)],
    )
    style.configure("TEntry", fieldbackground=palette.field, foreground=palette.text)
    style.configure(
        "TLabelframe",
        background=palette.background,
        foreground=palette.text,
        bordercolor=palette.border,
        lightcolor=palette.border,
        darkcolor=palette.border,
    )
    style.configure("TLabelframe.Label", background=palette.background, foreground=palette.text)

    toplevel = root.winfo_toplevel() if hasattr(root, "winfo_toplevel") else None
    if isinstance(toplevel, (tk.Tk, tk.Toplevel)):
        toplevel.configure(bg=palette.background)

    if widget_root is None:
        widget_root = root
    _apply_tk_widget_colors(widget_root, palette)


def _apply_tk_widget_colors(widget: tk.Misc, palette: Palette) -> None:
    for child in widget.winfo_children():
        if isinstance(child, tk.Listbox):
            child.configure(
                bg=palette.field,
                fg=palette.text,
                selectbackground=palette.accent,
                selectforeground=palette.background,
                highlightbackground=palette.border,
                highlightcolor=palette.accent,
                relief="flat",
            )
        elif isinstance(child, tk.Canvas):
            child.configure(bg=palette.background)

        _apply_tk_widget_colors(child, palette)
