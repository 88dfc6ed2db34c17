from __future__ import annotations

import logging
import tkinter as tk
from collections.abc import Mapping
from tkinter import ttk

import httpx

from src.api_client import ApiClient
from src.api_client import ApiResponse
from src.config import AppConfig
from src.gui_auth import ChangePasswordScreen
from src.gui_auth import LoginScreen
from src.gui_companies import CompanyDirectoryScreen
from src.gui_employees import NewEmployeeScreen
from src.gui_kit.feedback import ToastCenter
from src.gui_kit.layout import run_threaded_job
from src.gui_kit.theme import DARK
from src.gui_kit.theme import ThemeState
from src.gui_kit.theme import ThemeStore
from src.gui_kit.theme import apply as apply_theme
from src.gui_kit.theme import apply_palette
from src.gui_kit.tokens import ToastVariant
from src.hr_api import AuthApi
from src.hr_api import CompaniesApi
from src.hr_api import EmployeesApi
from src.local_storage import LocalStorage
from src.session_store import SessionState
from src.session_store import SessionStore
from src.session_store import apply as apply_session

logger = logging.getLogger("gui_home")

LOGIN_VIEW = "login"
CHANGE_PASSWORD_VIEW = "change_password"
MAIN_VIEW = "main"


class App:
    """Application shell: stores, API wiring, and the view shown for the session.

    Signed out shows the login screen, a forced password change shows the
    change-password screen, and a signed-in session shows the screen notebook.
    """

    def __init__(
        self,
        root: tk.Tk,
        cfg: AppConfig,
        *,
        storage: LocalStorage | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.root = root
        self.cfg = cfg
        self.root.title("HR Console")
        self.root.geometry("980x720")

        self.storage = storage or LocalStorage(cfg.storage_path)
        self.theme = ThemeStore(self.storage)
        self.session = SessionStore(self.storage)
        self.theme.hydrate()
        self.session.hydrate()

        self.api = ApiClient.from_config(cfg, self.session, transport=transport, on_unauthorized=self._on_unauthorized)
        self.auth_api = AuthApi(self.api)
        self.companies_api = CompaniesApi(self.api)
        self.employees_api = EmployeesApi(self.api)

        self.container = ttk.Frame(self.root, padding=12)
        self.container.pack(fill="both", expand=True)
        self._build_top_bar()

        self.body = ttk.Frame(self.container)
        self.body.pack(fill="both", expand=True)
        self.toasts = ToastCenter(
            self.container,
            default_duration_ms=cfg.toast_duration_ms,
            max_toasts=cfg.max_toasts,
        )
        self.login_screen = LoginScreen(self.body, self)
        self.password_screen = ChangePasswordScreen(self.body, self)
        self.notebook = ttk.Notebook(self.body)
        self.screens: dict[str, ttk.Frame] = {
            "new_employee": NewEmployeeScreen(self.notebook, self, cfg),
            "companies": CompanyDirectoryScreen(self.notebook, self, cfg),
        }
        self.notebook.add(self.screens["new_employee"], text="Add Employee")
        self.notebook.add(self.screens["companies"], text="Companies")
        self.views: dict[str, ttk.Frame] = {
            LOGIN_VIEW: self.login_screen,
            CHANGE_PASSWORD_VIEW: self.password_screen,
            MAIN_VIEW: self.notebook,
        }
        self.current_view = ""
        self._main_loaded = False
        self.toasts.lift()

        self._unsubscribe_theme = self.theme.subscribe(self._on_theme_changed)
        self._unsubscribe_session = self.session.subscribe(self._on_session_changed)
        self._on_theme_changed(self.theme.state)
        self._on_session_changed(self.session.state)
        self._refresh_stored_session()
        self.root.protocol("WM_DELETE_WINDOW", self.close)

    def _build_top_bar(self) -> None:
        bar = ttk.Frame(self.container)
        bar.pack(fill="x", pady=(0, 8))
        ttk.Label(bar, text="HR Console", font=("Segoe UI", 12, "bold")).pack(side="left")

        self.sign_out_btn = ttk.Button(bar, text="Sign out", command=self.sign_out)
        self.sign_out_btn.pack(side="right")
        self.theme_btn = ttk.Button(bar, text="", command=self.theme.toggle)
        self.theme_btn.pack(side="right", padx=(0, 6))
        self.change_password_btn = ttk.Button(bar, text="Change password", command=self.open_change_password)
        self.change_password_btn.pack(side="right", padx=(0, 6))
        self.role_label = ttk.Label(bar, text="")
        self.role_label.pack(side="right", padx=(0, 12))
        self.session_var = tk.StringVar(value="")
        ttk.Label(bar, textvariable=self.session_var).pack(side="right", padx=(0, 6))

    def _on_theme_changed(self, state: ThemeState) -> None:
        apply_palette(self.root, apply_theme(state))
        self.theme_btn.configure(text="Light mode" if state.mode == DARK else "Dark mode")

    def _on_session_changed(self, state: SessionState) -> None:
        view = apply_session(state)
        self.session_var.set(view.display_name)
        self.role_label.configure(text=view.role_label, foreground=view.role_color)
        self.sign_out_btn.configure(state="normal" if view.is_authenticated else "disabled")
        can_change = view.is_authenticated and not view.must_change_password
        self.change_password_btn.configure(state="normal" if can_change else "disabled")

        if not view.is_authenticated:
            self._main_loaded = False
            self._show(LOGIN_VIEW)
        elif view.must_change_password:
            self._main_loaded = False
            if self.current_view != CHANGE_PASSWORD_VIEW or not self.password_screen.forced:
                self.password_screen.open(forced=True)
            self._show(CHANGE_PASSWORD_VIEW)
        elif self.current_view == CHANGE_PASSWORD_VIEW and not self.password_screen.forced:
            # A voluntary change stays open across token refreshes.
            return
        else:
            self.show_main()

    def _show(self, name: str) -> None:
        if name == self.current_view:
            return
        for frame in self.views.values():
            frame.pack_forget()
        self.views[name].pack(fill="both", expand=True)
        self.current_view = name
        logger.debug("Showing %s view", name)

    def show_main(self) -> None:
        self._show(MAIN_VIEW)
        if self._main_loaded:
            return
        self._main_loaded = True
        self.screens["companies"].refresh()  # type: ignore[attr-defined]
        self.screens["new_employee"].prefill_company()  # type: ignore[attr-defined]

    def open_change_password(self) -> None:
        if not self.session.is_authenticated:
            return
        self.password_screen.open(forced=False)
        self._show(CHANGE_PASSWORD_VIEW)

    def _refresh_stored_session(self) -> None:
        refresh_token = self.session.state.refresh_token
        if not self.session.is_authenticated or not refresh_token:
            return
        run_threaded_job(
            self.root,
            lambda: self.auth_api.refresh_token(refresh_token),
            on_ok=self._on_tokens_refreshed,  # type: ignore[arg-type]
            on_err=lambda exc: logger.info("Stored session refresh skipped: %s", exc),
            on_error_hook=self.api.handle_error,
        )

    def _on_tokens_refreshed(self, result: ApiResponse) -> None:
        data = result.response if isinstance(result.response, Mapping) else {}
        access_token = str(data.get("accessToken") or "")
        if not access_token or not self.session.is_authenticated:
            return
        self.session.set_tokens(access_token, refresh_token=str(data.get("refreshToken") or "") or None)

    def _on_unauthorized(self) -> None:
        self.toasts.show_toast(
            "Your session has expired. Please sign in again.",
            title="Signed out",
            level=ToastVariant.WARNING,
        )

    def sign_out(self) -> None:
        self.session.logout()
        self.toasts.show_toast("You have been signed out.", level=ToastVariant.INFO)

    def close(self) -> None:
        self._unsubscribe_theme()
        self._unsubscribe_session()
        self.api.close()
        self.root.destroy()
