"""Page-number window and a compact pager bar."""

from __future__ import annotations

from collections.abc import Callable
import tkinter as tk
from tkinter import ttk

__all__ = ["ELLIPSIS", "PaginationBar", "page_window"]

ELLIPSIS = "..."


def page_window(current_page: int, total_pages: int, *, max_visible: int = 5) -> list[int | str]:
    """Visible page numbers around current_page, with first/last pages and gaps.

    >>> page_window(6, 10)
    [1, '...', 4, 5, 6, 7, 8, '...', 10]
    """

    total = max(0, int(total_pages))
    if total == 0:
        return []
    visible = max(1, int(max_visible))
    current = min(max(1, int(current_page)), total)

    start = max(1, current - visible // 2)
    end = min(total, start + visible - 1)
    if end - start < visible - 1:
        start = max(1, end - visible + 1)

    pages: list[int | str] = list(range(start, end + 1))
    if start > 1:
        head: list[int | str] = [1]
        if start > 2:
            head.append(ELLIPSIS)
        pages = head + pages
    if end < total:
        if end < total - 1:
            pages.append(ELLIPSIS)
        pages.append(total)
    return pages


class PaginationBar(ttk.Frame):
    """Previous/next buttons around a page_window of numbered buttons."""

    def __init__(
        self,
        parent: tk.Widget,
        *,
        on_page_change: Callable[[int], None],
        current_page: int = 1,
        total_pages: int = 1,
        max_visible: int = 5,
    ) -> None:
        super().__init__(parent)
        self._on_page_change = on_page_change
        self.current_page = current_page
        self.total_pages = total_pages
        self.max_visible = max_visible
        self.render()

    def set_pages(self, current_page: int, total_pages: int) -> None:
        self.current_page = current_page
        self.total_pages = total_pages
        self.render()

    def render(self) -> None:
        for child in self.winfo_children():
            child.destroy()
        if self.total_pages <= 1:
            return

        col = 0
        prev_btn = ttk.Button(self, text="<", width=3, command=lambda: self._go(self.current_page - 1))
        prev_btn.grid(row=0, column=col, padx=2)
        if self.current_page <= 1:
            prev_btn.configure(state="disabled")
        col += 1

        for page in page_window(self.current_page, self.total_pages, max_visible=self.max_visible):
            if page == ELLIPSIS:
                ttk.Label(self, text=ELLIPSIS).grid(row=0, column=col, padx=2)
            else:
                btn = ttk.Button(self, text=str(page), width=4, command=lambda p=page: self._go(p))
                btn.grid(row=0, column=col, padx=2)
                if page == self.current_page:
                    btn.state(["pressed"])
            col += 1

        next_btn = ttk.Button(self, text=">", width=3, command=lambda: self._go(self.current_page + 1))
        next_btn.grid(row=0, column=col, padx=2)
        if self.current_page >= self.total_pages:
            next_btn.configure(state="disabled")

    def _go(self, page: int) -> None:
        if page < 1 or page > self.total_pages or page == self.current_page:
            return
        self.current_page = page
        self.render()
        self._on_page_change(page)
