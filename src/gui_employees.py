from __future__ import annotations

import logging
import tkinter as tk
from collections.abc import Mapping
from datetime import date
from tkinter import ttk
from typing import TYPE_CHECKING, Any

from src.api_client import get_error_message
from src.config import AppConfig
from src.gui_kit.autocomplete import AutocompleteOption
from src.gui_kit.autocomplete_view import AutocompleteView
from src.gui_kit.layout import BaseScreen
from src.gui_kit.layout import JobHandle
from src.gui_kit.tokens import ToastVariant
from src.hr_api import company_to_option
from src.hr_api import employee_display_name

if TYPE_CHECKING:
    from src.gui_home import App

logger = logging.getLogger("gui_employees")

# (payload key, label, required)
EMPLOYEE_FIELDS: tuple[tuple[str, str, bool], ...] = (
    ("employeeId", "Employee ID", True),
    ("firstName", "First name", True),
    ("lastName", "Last name", True),
    ("userEmail", "Personal email", True),
    ("userCompEmail", "Company email", True),
    ("phoneNumber", "Phone", False),
    ("jobTitle", "Job title", True),
    ("department", "Department", True),
    ("hireDate", "Hire date (YYYY-MM-DD)", True),
)


def missing_required_fields(values: Mapping[str, str], company_id: str | None) -> list[str]:
    missing = [label for key, label, required in EMPLOYEE_FIELDS if required and not values.get(key, "").strip()]
    if not company_id:
        missing.insert(0, "Company")
    return missing


class NewEmployeeScreen(BaseScreen):
    """Create-employee form; owns the company option list and selection."""

    def __init__(self, parent: tk.Widget, app: "App", cfg: AppConfig) -> None:
        super().__init__(parent, on_job_error=app.api.handle_error)
        self.app = app
        self.cfg = cfg
        self.company_id: str | None = None
        self.field_vars: dict[str, tk.StringVar] = {}
        self._latest_company_term = ""
        self._search_job: JobHandle | None = None
        self.build()

    def build(self) -> None:
        self.build_header(self, title="Add Employee", subtitle="Create a new employee record")

        form = ttk.Frame(self)
        form.pack(fill="both", expand=True)
        form.columnconfigure(1, weight=1)

        self.company_autocomplete = AutocompleteView(
            form,
            on_select=self._on_company_select,
            on_search=self._on_company_search,
            debounce_ms=self.cfg.search_debounce_ms,
            placeholder="Search companies...",
            label="Company",
            required=True,
            empty_message="No companies found",
        )
        self.company_autocomplete.grid(row=0, column=0, columnspan=2, sticky="ew", pady=(0, 8))

        for row, (key, label, required) in enumerate(EMPLOYEE_FIELDS, start=1):
            caption = f"{label} *" if required else label
            ttk.Label(form, text=caption).grid(row=row, column=0, sticky="w", padx=(0, 8), pady=2)
            var = tk.StringVar(value="")
            ttk.Entry(form, textvariable=var).grid(row=row, column=1, sticky="ew", pady=2)
            self.field_vars[key] = var
        self.field_vars["hireDate"].set(date.today().isoformat())

        actions = ttk.Frame(self)
        actions.pack(fill="x", pady=(8, 0))
        self.save_btn = ttk.Button(actions, text="Create employee", command=self._save)
        self.save_btn.pack(side="right")

        self.build_status_bar(self)

    # Company search: the autocomplete reports debounced terms, we own the results.

    def _on_company_search(self, term: str) -> None:
        self._latest_company_term = term
        if self._search_job is not None:
            self._search_job.cancel()
            self._search_job = None
            self.set_busy(False)

        autocomplete = self.company_autocomplete
        if len(term) < self.cfg.company_search_min_chars:
            autocomplete.set_loading(False)
            autocomplete.set_options([])
            return

        autocomplete.set_loading(True)
        autocomplete.set_error(None)
        self.set_busy(True)
        self._search_job = self.safe_threaded_job(
            lambda: self.app.companies_api.search_company_options(term, limit=self.cfg.company_search_limit),
            on_ok=lambda options: self._apply_company_results(term, options),  # type: ignore[arg-type]
            on_err=lambda exc: self._on_company_search_failed(term, exc),
        )

    def _apply_company_results(self, term: str, options: list[AutocompleteOption]) -> None:
        self._search_job = None
        self.set_busy(False)
        if term != self._latest_company_term:
            return
        self.company_autocomplete.set_loading(False)
        self.company_autocomplete.set_options(options)
        self.set_status(f"{len(options)} companies match '{term}'.")

    def _on_company_search_failed(self, term: str, exc: Exception) -> None:
        self._search_job = None
        self.set_busy(False)
        if term != self._latest_company_term:
            return
        logger.warning("Company search for %r failed: %s", term, exc)
        self.company_autocomplete.set_loading(False)
        self.company_autocomplete.set_options([])
        self.company_autocomplete.set_error(get_error_message(exc))

    def _on_company_select(self, option: AutocompleteOption | None) -> None:
        self.company_id = option.id if option is not None else None
        if option is not None:
            self.company_autocomplete.set_error(None)

    # Prefill with the signed-in employee's company, unless the user typed first.

    def prefill_company(self) -> None:
        if not self.app.session.is_authenticated:
            return
        revision = self.company_autocomplete.model.revision

        def fetch() -> tuple[AutocompleteOption, str] | None:
            employee = self.app.employees_api.get_current_employee().response
            if not isinstance(employee, Mapping) or not employee.get("companyId"):
                return None
            company = self.app.companies_api.get_company(str(employee["companyId"])).response
            if not isinstance(company, Mapping):
                return None
            return company_to_option(company), employee_display_name(employee)

        self.safe_threaded_job(
            fetch,
            on_ok=lambda found: self._apply_prefill(found, revision),  # type: ignore[arg-type]
            on_err=lambda exc: logger.info("Company prefill skipped: %s", exc),
        )

    def _apply_prefill(self, found: tuple[AutocompleteOption, str] | None, revision: int) -> None:
        autocomplete = self.company_autocomplete
        if found is None or autocomplete.model.revision != revision:
            return
        option, employee_name = found
        autocomplete.set_options([option])
        if autocomplete.set_value(option.id, revision=revision):
            self.company_id = option.id
            if employee_name:
                self.set_status(f"Company prefilled from {employee_name}'s profile.")

    # Save

    def form_values(self) -> dict[str, str]:
        return {key: var.get().strip() for key, var in self.field_vars.items()}

    def _save(self) -> None:
        values = self.form_values()
        missing = missing_required_fields(values, self.company_id)
        if missing:
            self.app.toasts.show_toast(
                f"Add Employee / Required fields: {', '.join(missing)} missing. Fix: fill them in and retry.",
                title="Missing information",
                level=ToastVariant.ERROR,
            )
            return

        payload: dict[str, Any] = dict(values)
        payload["companyId"] = self.company_id
        self.save_btn.configure(state="disabled")
        self.set_busy(True)
        self.set_status("Creating employee...")
        self.safe_threaded_job(
            lambda: self.app.employees_api.create_employee(payload),
            on_ok=self._on_saved,
            on_err=self._on_save_failed,
        )

    def _on_saved(self, _result: object) -> None:
        self.set_busy(False)
        self.save_btn.configure(state="normal")
        self.set_status("Employee created.")
        self.app.toasts.show_toast("Employee created successfully", title="Success", level=ToastVariant.SUCCESS)
        self.reset_form()

    def _on_save_failed(self, exc: Exception) -> None:
        self.set_busy(False)
        self.save_btn.configure(state="normal")
        message = get_error_message(exc)
        self.set_status(f"Create failed: {message}")
        self.app.toasts.show_toast(message, title="Error", level=ToastVariant.ERROR)

    def reset_form(self) -> None:
        for key, var in self.field_vars.items():
            var.set(date.today().isoformat() if key == "hireDate" else "")
        self.company_id = None
        self.company_autocomplete.set_value(None)
