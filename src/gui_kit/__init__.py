"""Public gui_kit API and machine-readable component catalog.

The catalog gives tools a stable way to discover reusable gui_kit components
without scraping module internals.
"""

from __future__ import annotations

from typing import TypedDict

from src.gui_kit.autocomplete import AutocompleteModel, AutocompleteOption, filter_options
from src.gui_kit.autocomplete_view import AutocompleteView
from src.gui_kit.debounce import Debouncer
from src.gui_kit.feedback import ToastCenter, ToastQueue
from src.gui_kit.layout import BaseScreen
from src.gui_kit.pagination import PaginationBar, page_window
from src.gui_kit.search import SearchEntry
from src.gui_kit.theme import ThemeStore
from src.gui_kit.ui_dispatch import TkPlatform


class GUIKitComponent(TypedDict):
    """Machine-readable descriptor for one public gui_kit component."""

    export: str
    module: str
    kind: str
    summary: str

__all__ = [
    "AutocompleteModel",
    "AutocompleteOption",
    "AutocompleteView",
    "BaseScreen",
    "Debouncer",
    "GUIKitComponent",
    "PaginationBar",
    "SearchEntry",
    "ThemeStore",
    "TkPlatform",
    "ToastCenter",
    "ToastQueue",
    "filter_options",
    "get_component_catalog",
    "page_window",
]

_COMPONENT_CATALOG: tuple[GUIKitComponent, ...] = (
    {
        "export": "AutocompleteModel",
        "module": "src.gui_kit.autocomplete",
        "kind": "headless_model",
        "summary": "Search-select state machine: open state, keyboard focus, commit and debounced search.",
    },
    {
        "export": "AutocompleteOption",
        "module": "src.gui_kit.autocomplete",
        "kind": "data_type",
        "summary": "Immutable option row with id, label, optional subtitle and image URL.",
    },
    {
        "export": "AutocompleteView",
        "module": "src.gui_kit.autocomplete_view",
        "kind": "input_widget",
        "summary": "Tk entry plus dropdown list rendering an AutocompleteModel.",
    },
    {
        "export": "BaseScreen",
        "module": "src.gui_kit.layout",
        "kind": "screen_base",
        "summary": "Base class with shared status/busy/thread helpers for screens.",
    },
    {
        "export": "Debouncer",
        "module": "src.gui_kit.debounce",
        "kind": "timing_helper",
        "summary": "Emits the latest pushed value after a quiet period; cancellable.",
    },
    {
        "export": "PaginationBar",
        "module": "src.gui_kit.pagination",
        "kind": "navigation_widget",
        "summary": "Previous/next and numbered page buttons with ellipsis gaps.",
    },
    {
        "export": "SearchEntry",
        "module": "src.gui_kit.search",
        "kind": "input_widget",
        "summary": "Debounced free-text filter field with a clear action.",
    },
    {
        "export": "ThemeStore",
        "module": "src.gui_kit.theme",
        "kind": "state_store",
        "summary": "Persisted light/dark theme state with change subscriptions.",
    },
    {
        "export": "TkPlatform",
        "module": "src.gui_kit.ui_dispatch",
        "kind": "platform_adapter",
        "summary": "Tk timers and outside-click detection behind the Platform interface.",
    },
    {
        "export": "ToastCenter",
        "module": "src.gui_kit.feedback",
        "kind": "feedback_widget",
        "summary": "Stacked, self-expiring toast cards in the top-right corner.",
    },
    {
        "export": "ToastQueue",
        "module": "src.gui_kit.feedback",
        "kind": "headless_model",
        "summary": "Ordered toast list with capped length and timed expiry.",
    },
    {
        "export": "filter_options",
        "module": "src.gui_kit.autocomplete",
        "kind": "search_helper",
        "summary": "Case-insensitive substring filter over option label, subtitle and id.",
    },
    {
        "export": "page_window",
        "module": "src.gui_kit.pagination",
        "kind": "navigation_helper",
        "summary": "Visible page numbers around the current page with first/last anchors.",
    },
)


def get_component_catalog() -> tuple[GUIKitComponent, ...]:
    """Return stable gui_kit component metadata for tools and docs."""

    return _COMPONENT_CATALOG


def _validate_component_catalog() -> None:
    required_keys = ("export", "module", "kind", "summary")
    for index, component in enumerate(_COMPONENT_CATALOG, start=1):
        for key in required_keys:
            value = component.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(
                    f"Invalid gui_kit catalog entry #{index}: field '{key}' is missing or blank. "
                    "Fix: provide a non-empty string for each catalog field."
                )

        export = component["export"]
        module = component["module"]
        if export not in __all__:
            raise ValueError(
                f"Invalid gui_kit catalog entry #{index}: export '{export}' is not listed in __all__. "
                "Fix: add the symbol to __all__ or correct the catalog entry."
            )

        if export not in globals():
            raise ValueError(
                f"Invalid gui_kit catalog entry #{index}: export '{export}' is not imported in src.gui_kit.__init__. "
                "Fix: import the symbol before validating the catalog."
            )

        if not module.startswith("src.gui_kit."):
            raise ValueError(
                f"Invalid gui_kit catalog entry #{index}: module '{module}' must start with 'src.gui_kit.'. "
                "Fix: point the entry to the canonical gui_kit module path."
            )


_validate_component_catalog()
