from __future__ import annotations

import logging
import tkinter as tk
from collections.abc import Mapping
from tkinter import ttk
from typing import TYPE_CHECKING, Any

from src.api_client import get_error_message
from src.config import AppConfig
from src.gui_kit.layout import BaseScreen
from src.gui_kit.layout import JobHandle
from src.gui_kit.pagination import PaginationBar
from src.gui_kit.search import SearchEntry
from src.gui_kit.tokens import RecordStatus
from src.gui_kit.tokens import ToastVariant
from src.gui_kit.tokens import status_color

if TYPE_CHECKING:
    from src.gui_home import App

logger = logging.getLogger("gui_companies")

PAGE_SIZE = 12
COLUMNS = ("name", "code", "status", "description")


def estimate_total_pages(current_page: int, page_length: int, limit: int = PAGE_SIZE) -> int:
    """The list endpoint returns no total; a full page means another may follow."""

    current = max(1, int(current_page))
    if page_length >= limit:
        return current + 1
    return current


def company_row(company: Mapping[str, Any]) -> tuple[str, str, str, str]:
    return (
        str(company.get("name") or ""),
        str(company.get("code") or ""),
        str(company.get("status") or ""),
        str(company.get("description") or ""),
    )


class CompanyDirectoryScreen(BaseScreen):
    """Paged, searchable company list."""

    def __init__(self, parent: tk.Widget, app: "App", cfg: AppConfig) -> None:
        super().__init__(parent, on_job_error=app.api.handle_error)
        self.app = app
        self.cfg = cfg
        self.current_page = 1
        self.search_term = ""
        self._job: JobHandle | None = None
        self.build()

    def build(self) -> None:
        self.build_header(self, title="Companies")

        toolbar = ttk.Frame(self)
        toolbar.pack(fill="x", pady=(0, 6))
        toolbar.columnconfigure(1, weight=1)
        ttk.Label(toolbar, text="Search").grid(row=0, column=0, padx=(0, 6))
        self.search_entry = SearchEntry(toolbar, on_change=self._on_search_changed, delay_ms=300)
        self.search_entry.grid(row=0, column=1, sticky="ew")
        ttk.Button(toolbar, text="Refresh", command=self.refresh).grid(row=0, column=2, padx=(6, 0))

        self.tree = ttk.Treeview(self, columns=COLUMNS, show="headings", height=12)
        for column in COLUMNS:
            self.tree.heading(column, text=column.title())
            self.tree.column(column, width=260 if column == "description" else 140, anchor="w")
        for status in RecordStatus:
            self.tree.tag_configure(status.value, foreground=status_color(status))
        self.tree.pack(fill="both", expand=True)

        self.pager = PaginationBar(self, on_page_change=self._on_page_change)
        self.pager.pack(pady=(6, 0))

        self.build_status_bar(self)

    def refresh(self) -> None:
        if self._job is not None:
            self._job.cancel()
            self.set_busy(False)
        page = self.current_page
        term = self.search_term
        self.set_busy(True)
        self.set_status("Loading companies...")
        self._job = self.safe_threaded_job(
            lambda: self.app.companies_api.search_companies(search_term=term or None, page=page, limit=PAGE_SIZE),
            on_ok=self._on_loaded,
            on_err=self._on_load_failed,
        )

    def _on_search_changed(self, term: str) -> None:
        if term == self.search_term:
            return
        self.search_term = term
        self.current_page = 1
        self.refresh()

    def _on_page_change(self, page: int) -> None:
        self.current_page = page
        self.refresh()

    def _on_loaded(self, result: Any) -> None:
        self._job = None
        self.set_busy(False)
        companies = [row for row in (result.response or []) if isinstance(row, Mapping)]
        self.tree.delete(*self.tree.get_children())
        seen: set[str] = set()
        for company in companies:
            company_id = company.get("id")
            if company_id is None or str(company_id) in seen:
                logger.warning("Skipping company row with missing or duplicate id: %r", company_id)
                continue
            seen.add(str(company_id))
            status = str(company.get("status") or "")
            tags = (status,) if status in {member.value for member in RecordStatus} else ()
            self.tree.insert("", "end", iid=str(company_id), values=company_row(company), tags=tags)
        self.pager.set_pages(self.current_page, estimate_total_pages(self.current_page, len(companies)))
        self.set_status(f"Page {self.current_page}: {len(seen)} companies.")

    def _on_load_failed(self, exc: Exception) -> None:
        self._job = None
        self.set_busy(False)
        logger.warning("Failed to load companies: %s", exc)
        self.set_status("Failed to load companies.")
        self.app.toasts.show_toast(get_error_message(exc), title="Error", level=ToastVariant.ERROR)
