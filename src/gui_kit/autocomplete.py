"""Headless search-select (autocomplete) state machine.

The caller owns the option list and the authoritative selected id. The model
mirrors that selection for display, tracks the typed text, the open state and
the keyboard-focused row, and reports commits and debounced search terms back
through callbacks. It never touches Tk directly; timers and outside-click
detection come from the injected ``Platform``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
import logging

from src.gui_kit.debounce import Debouncer
from src.gui_kit.ui_dispatch import Platform

__all__ = [
    "AutocompleteModel",
    "AutocompleteOption",
    "AutocompleteState",
    "filter_options",
    "initials",
]

logger = logging.getLogger("autocomplete")

DEFAULT_DEBOUNCE_MS = 500

_KEY_ALIASES = {
    "ArrowDown": "down",
    "Down": "down",
    "KP_Down": "down",
    "ArrowUp": "up",
    "Up": "up",
    "KP_Up": "up",
    "Enter": "enter",
    "Return": "enter",
    "KP_Enter": "enter",
    "Escape": "escape",
}


@dataclass(frozen=True)
class AutocompleteOption:
    id: str
    label: str
    subtitle: str | None = None
    image_url: str | None = None

    @property
    def initials(self) -> str:
        return initials(self.label)


class AutocompleteState:
    CLOSED = "closed"
    OPEN_EMPTY = "open-empty"
    OPEN_LOADING = "open-loading"
    OPEN_RESULTS = "open-results"
    OPEN_NO_RESULTS = "open-no-results"


def initials(name: str) -> str:
    """Up to two upper-case initials for an avatar placeholder."""

    return "".join(part[0] for part in name.split() if part).upper()[:2]


def filter_options(options: Iterable[AutocompleteOption], term: str) -> tuple[AutocompleteOption, ...]:
    """Case-insensitive substring match on label, subtitle and id, order preserved."""

    items = tuple(options)
    if not term:
        return items
    needle = term.lower()
    return tuple(
        option
        for option in items
        if needle in option.label.lower()
        or (option.subtitle is not None and needle in option.subtitle.lower())
        or needle in option.id.lower()
    )


class AutocompleteModel:
    """Search-select state: typed text, open state, keyboard highlight and the mirrored selection."""

    def __init__(
        self,
        platform: Platform,
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
        is_loading: bool = False,
        error: str | None = None,
        disabled: bool = False,
    ) -> None:
        self._platform = platform
        self._on_select = on_select
        self._on_search = on_search
        self._debounce_ms = debounce_ms
        self.placeholder = placeholder
        self.label = label
        self.required = required
        self.empty_message = empty_message

        self._options: tuple[AutocompleteOption, ...] = tuple(options)
        self._is_loading = bool(is_loading)
        self._error = error or None
        self._disabled = bool(disabled)

        self._selected_id: str | None = value or None
        self._committed_label: str | None = None
        self._text = ""
        self._is_open = False
        self._focused_index = -1
        self._input_focused = False
        # Counts keystrokes; callers tag async selection syncs with it.
        self._revision = 0
        self._typed_since_sync = False

        self._listeners: list[Callable[[], None]] = []
        self._remove_outside_listener: Callable[[], None] | None = None
        self._debouncer: Debouncer[str] = Debouncer(platform, debounce_ms, self._on_debounced)
        self._mounted = False

        option = self._find(self._selected_id)
        if option is not None:
            self._committed_label = option.label
            self._text = option.label

    # -- derived state -------------------------------------------------

    @property
    def text(self) -> str:
        return self._text

    @property
    def options(self) -> tuple[AutocompleteOption, ...]:
        return self._options

    @property
    def selected_id(self) -> str | None:
        return self._selected_id

    @property
    def selected_option(self) -> AutocompleteOption | None:
        return self._find(self._selected_id)

    @property
    def is_open(self) -> bool:
        return self._is_open and not self._disabled

    @property
    def focused_index(self) -> int:
        return self._focused_index

    @property
    def focused_option(self) -> AutocompleteOption | None:
        display = self.display_options
        if 0 <= self._focused_index < len(display):
            return display[self._focused_index]
        return None

    @property
    def input_focused(self) -> bool:
        return self._input_focused

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def disabled(self) -> bool:
        return self._disabled

    @property
    def revision(self) -> int:
        return self._revision

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def search_pending(self) -> bool:
        return self._debouncer.pending

    @property
    def display_options(self) -> tuple[AutocompleteOption, ...]:
        if self._on_search is not None:
            return self._options
        return filter_options(self._options, self._text)

    @property
    def show_clear(self) -> bool:
        return self.selected_option is not None and not self._disabled

    @property
    def state(self) -> str:
        if not self.is_open:
            return AutocompleteState.CLOSED
        display = self.display_options
        if self._is_loading and not display:
            return AutocompleteState.OPEN_LOADING
        if display:
            return AutocompleteState.OPEN_RESULTS
        if not self._text:
            return AutocompleteState.OPEN_EMPTY
        return AutocompleteState.OPEN_NO_RESULTS

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    # -- lifecycle -----------------------------------------------------

    def mount(self) -> None:
        if self._mounted:
            return
        if self._debouncer.closed:
            self._debouncer = Debouncer(self._platform, self._debounce_ms, self._on_debounced)
        self._remove_outside_listener = self._platform.add_outside_click_listener(self.outside_click)
        self._mounted = True

    def unmount(self) -> None:
        """Cancel the pending search timer and detach the outside-click listener."""

        self._debouncer.close()
        if self._remove_outside_listener is not None:
            self._remove_outside_listener()
            self._remove_outside_listener = None
        self._mounted = False

    # -- caller inputs -------------------------------------------------

    def set_options(self, options: Iterable[AutocompleteOption]) -> None:
        self._options = tuple(options)
        if self._focused_index >= len(self.display_options):
            self._focused_index = -1
        # Options may arrive after the selected id; adopt the label once they do.
        if self._selected_id is not None and not self._typed_since_sync:
            option = self._find(self._selected_id)
            if option is not None and self._text != option.label:
                self._text = option.label
                self._committed_label = option.label
        self._changed()

    def set_loading(self, is_loading: bool) -> None:
        self._is_loading = bool(is_loading)
        self._changed()

    def set_error(self, error: str | None) -> None:
        self._error = error or None
        self._changed()

    def set_disabled(self, disabled: bool) -> None:
        self._disabled = bool(disabled)
        if self._disabled:
            self._close()
        self._changed()

    def set_value(self, selected_id: str | None, *, revision: int | None = None) -> bool:
        """Adopt an out-of-band selection change from the caller.

        ``revision`` is the value of ``self.revision`` when the caller started
        computing this selection. If the user has typed since then, the sync is
        stale and ignored. Returns True when the selection was applied.
        """

        if revision is not None and revision < self._revision:
            logger.debug(
                "Ignoring stale selection sync %r (revision %s < %s)",
                selected_id,
                revision,
                self._revision,
            )
            return False

        selected_id = selected_id or None
        if selected_id == self._selected_id:
            return True

        self._selected_id = selected_id
        self._typed_since_sync = False
        self._debouncer.cancel()
        option = self._find(selected_id)
        if option is not None:
            # Setting the label directly never reaches the debouncer, so no search fires.
            self._text = option.label
            self._committed_label = option.label
        else:
            if selected_id is not None:
                logger.debug("Selected id %r matches no option; showing no selection", selected_id)
            self._text = ""
            self._committed_label = None
        self._changed()
        return True

    # -- user events ---------------------------------------------------

    def focus(self) -> None:
        if self._disabled:
            return
        self._input_focused = True
        self._is_open = True
        self._changed()

    def input_changed(self, text: str) -> None:
        if self._disabled or text == self._text:
            return
        self._text = text
        self._revision += 1
        self._typed_since_sync = True
        self._is_open = True
        self._input_focused = True
        self._focused_index = -1
        if not text and self._selected_id is not None:
            self._selected_id = None
            self._committed_label = None
            self._on_select(None)
        self._debouncer.push(text)
        self._changed()

    def key_pressed(self, key: str) -> bool:
        """Handle a navigation key; True means the host should suppress its default."""

        if self._disabled:
            return False
        action = _KEY_ALIASES.get(key)
        if action is None:
            return False

        if action == "down":
            self._is_open = True
            count = len(self.display_options)
            if count:
                self._focused_index = min(self._focused_index + 1, count - 1)
            self._changed()
            return True
        if action == "up":
            self._focused_index = max(self._focused_index - 1, -1)
            self._changed()
            return True
        if action == "enter":
            option = self.focused_option
            if option is not None:
                self.select(option)
            return True

        self._close()
        self._input_focused = False
        self._changed()
        return False

    def hover(self, index: int) -> None:
        if 0 <= index < len(self.display_options) and index != self._focused_index:
            self._focused_index = index
            self._changed()

    def select(self, option: AutocompleteOption) -> None:
        if self._disabled:
            return
        self._debouncer.cancel()
        self._selected_id = option.id
        self._committed_label = option.label
        self._text = option.label
        self._typed_since_sync = False
        self._close()
        self._input_focused = False
        self._on_select(option)
        self._changed()

    def clear(self) -> None:
        if self._disabled:
            return
        self._debouncer.cancel()
        self._selected_id = None
        self._committed_label = None
        self._text = ""
        self._typed_since_sync = False
        self._focused_index = -1
        self._is_open = True
        self._input_focused = True
        self._on_select(None)
        self._changed()

    def outside_click(self) -> None:
        if not self._is_open:
            return
        self._debouncer.cancel()
        # Abandoned keystrokes revert to the committed label, or to empty.
        if self._selected_id is not None and self._committed_label is not None:
            self._text = self._committed_label
        else:
            self._text = ""
        self._typed_since_sync = False
        self._close()
        self._input_focused = False
        self._changed()

    # -- internals -----------------------------------------------------

    def _find(self, selected_id: str | None) -> AutocompleteOption | None:
        if selected_id is None:
            return None
        for option in self._options:
            if option.id == selected_id:
                return option
        return None

    def _close(self) -> None:
        self._is_open = False
        self._focused_index = -1

    def _on_debounced(self, term: str) -> None:
        if self._on_search is None or not term:
            return
        if term == self._committed_label:
            return
        self._on_search(term)

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener()
