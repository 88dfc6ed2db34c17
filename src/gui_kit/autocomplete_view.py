"""Tk rendering of the headless autocomplete model."""

from __future__ import annotations

from collections.abc import Callable, Sequence
import tkinter as tk
from tkinter import ttk

from src.gui_kit.autocomplete import DEFAULT_DEBOUNCE_MS
from src.gui_kit.autocomplete import AutocompleteModel
from src.gui_kit.autocomplete import AutocompleteOption
from src.gui_kit.autocomplete import AutocompleteState
from src.gui_kit.ui_dispatch import Platform
from src.gui_kit.ui_dispatch import TkPlatform

__all__ = ["AutocompleteView"]

_NAV_KEYS = ("<Down>", "<Up>", "<Return>", "<KP_Enter>", "<Escape>")


def _option_row(option: AutocompleteOption, *, selected: bool) -> str:
    mark = "✓ " if selected else "  "
    text = f"{mark}[{option.initials}] {option.label}"
    if option.subtitle:
        text = f"{text}  ({option.subtitle})"
    return text


class AutocompleteView(ttk.Frame):
    """Entry with a dropdown result list driven by ``AutocompleteModel``."""

    def __init__(
        self,
        parent: tk.Widget,
        *,
        on_select: Callable[[AutocompleteOption | None], None],
        on_search: Callable[[str], None] | None = None,
        value: str | None = None,
        options: Sequence[AutocompleteOption] = (),
        debounce_ms: int = DEFAULT_DEBOUNCE_MS,
        placeholder: str = "Search...",
        label: str | None = None,
        required: bool = False,
        empty_message: str = "No results found",
        disabled: bool = False,
        max_rows: int = 8,
        platform: Platform | None = None,
    ) -> None:
        super().__init__(parent)
        self.platform = platform or TkPlatform(self)
        self.model = AutocompleteModel(
            self.platform,
            on_select=on_select,
            on_search=on_search,
            value=value,
            options=options,
            debounce_ms=debounce_ms,
            placeholder=placeholder,
            label=label,
            required=required,
            empty_message=empty_message,
            disabled=disabled,
        )
        self._syncing_var = False
        self._max_rows = max(1, int(max_rows))
        self._rendered_rows: list[str] = []

        self.columnconfigure(0, weight=1)

        row = 0
        if label:
            caption = f"{label} *" if required else label
            ttk.Label(self, text=caption).grid(row=row, column=0, sticky="w", pady=(0, 2))
            row += 1

        field = ttk.Frame(self)
        field.grid(row=row, column=0, sticky="ew")
        field.columnconfigure(0, weight=1)
        row += 1

        self.query_var = tk.StringVar(value=self.model.text)
        self.entry = ttk.Entry(field, textvariable=self.query_var)
        self.entry.grid(row=0, column=0, sticky="ew")
        self.busy_label = ttk.Label(field, text="", width=2)
        self.busy_label.grid(row=0, column=1, padx=(4, 0))
        self.clear_btn = ttk.Button(field, text="x", width=2, command=self.model.clear, takefocus=False)
        self.clear_btn.grid(row=0, column=2, padx=(4, 0))

        self.dropdown = ttk.Frame(self, relief="solid", borderwidth=1)
        self.dropdown.grid(row=row, column=0, sticky="ew", pady=(2, 0))
        self.dropdown.columnconfigure(0, weight=1)
        row += 1

        self.listbox = tk.Listbox(self.dropdown, height=self._max_rows, activestyle="none", exportselection=False)
        self.listbox.grid(row=0, column=0, sticky="ew")
        self.message_label = ttk.Label(self.dropdown, text="", anchor="center")
        self.message_label.grid(row=1, column=0, sticky="ew", padx=8, pady=8)

        self.error_label = ttk.Label(self, text="", foreground="#ef4444")
        self.error_label.grid(row=row, column=0, sticky="w", pady=(2, 0))

        self.query_var.trace_add("write", self._on_query_changed)
        self.entry.bind("<FocusIn>", lambda _e: self.model.focus())
        for sequence in _NAV_KEYS:
            self.entry.bind(sequence, self._on_nav_key)
        self.listbox.bind("<ButtonRelease-1>", self._on_list_click)
        self.listbox.bind("<Motion>", self._on_list_motion)
        self.bind("<Destroy>", self._on_destroy, add="+")

        self._unsubscribe = self.model.subscribe(self._render)
        self.model.mount()
        self._render()

    # Caller-facing inputs mirror the model.

    def set_options(self, options: Sequence[AutocompleteOption]) -> None:
        self.model.set_options(options)

    def set_loading(self, is_loading: bool) -> None:
        self.model.set_loading(is_loading)

    def set_error(self, error: str | None) -> None:
        self.model.set_error(error)

    def set_value(self, selected_id: str | None, *, revision: int | None = None) -> bool:
        return self.model.set_value(selected_id, revision=revision)

    def set_disabled(self, disabled: bool) -> None:
        self.model.set_disabled(disabled)

    def _on_query_changed(self, *_args) -> None:
        if self._syncing_var:
            return
        self.model.input_changed(self.query_var.get())

    def _on_nav_key(self, event: tk.Event):
        if self.model.key_pressed(event.keysym):
            return "break"
        return None

    def _on_list_click(self, event: tk.Event) -> None:
        index = self.listbox.nearest(event.y)
        display = self.model.display_options
        if 0 <= index < len(display):
            self.model.select(display[index])

    def _on_list_motion(self, event: tk.Event) -> None:
        self.model.hover(self.listbox.nearest(event.y))

    def _on_destroy(self, event: tk.Event) -> None:
        if event.widget is not self:
            return
        self._unsubscribe()
        self.model.unmount()

    def _render(self) -> None:
        model = self.model
        if not self.winfo_exists():
            return

        if self.query_var.get() != model.text:
            self._syncing_var = True
            try:
                self.query_var.set(model.text)
            finally:
                self._syncing_var = False

        self.entry.configure(state="disabled" if model.disabled else "normal")
        self.busy_label.configure(text="..." if model.is_loading else "")
        if model.show_clear:
            self.clear_btn.grid()
        else:
            self.clear_btn.grid_remove()
        self.error_label.configure(text=model.error or "")

        state = model.state
        if state == AutocompleteState.CLOSED:
            self.dropdown.grid_remove()
        else:
            self.dropdown.grid()
            self._render_dropdown(state)

        self._sync_focus()

    def _render_dropdown(self, state: str) -> None:
        model = self.model
        display = model.display_options
        selected_id = model.selected_id
        rows = [_option_row(option, selected=option.id == selected_id) for option in display]
        if rows != self._rendered_rows:
            self.listbox.delete(0, "end")
            for text in rows:
                self.listbox.insert("end", text)
            self._rendered_rows = rows
        self.listbox.configure(height=max(1, min(len(rows), self._max_rows)))

        self.listbox.selection_clear(0, "end")
        if model.focused_index >= 0:
            self.listbox.selection_set(model.focused_index)
            self.listbox.see(model.focused_index)

        if state == AutocompleteState.OPEN_RESULTS:
            self.listbox.grid()
            self.message_label.grid_remove()
            return

        self.listbox.grid_remove()
        self.message_label.grid()
        if state == AutocompleteState.OPEN_LOADING:
            self.message_label.configure(text="Searching...")
        elif state == AutocompleteState.OPEN_EMPTY:
            self.message_label.configure(text=model.placeholder)
        else:
            self.message_label.configure(text=model.empty_message)

    def _sync_focus(self) -> None:
        try:
            focused = self.focus_get()
        except (KeyError, tk.TclError):
            focused = None
        if self.model.input_focused and focused is not self.entry:
            self.entry.focus_set()
        elif not self.model.input_focused and focused is self.entry:
            self.winfo_toplevel().focus_set()
