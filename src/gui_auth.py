from __future__ import annotations

import logging
import re
import tkinter as tk
from collections.abc import Mapping
from dataclasses import dataclass, field
from tkinter import ttk
from typing import TYPE_CHECKING, Any

from src.api_client import ApiError
from src.api_client import ApiResponse
from src.api_client import get_error_message
from src.gui_kit.layout import BaseScreen
from src.gui_kit.tokens import ToastVariant
from src.password_strength import evaluate_password

if TYPE_CHECKING:
    from src.gui_home import App

logger = logging.getLogger("gui_auth")

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_LOGIN_PASSWORD = 6
# Shown on the strength meter but not enforced on submit.
OPTIONAL_REQUIREMENTS = frozenset({"One special character"})
ACCOUNT_CREATED_MARKER = "User account created"

_MET_COLOR = "#16a34a"
_UNMET_COLOR = "#9ca3af"
_ERROR_COLOR = "#ef4444"


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    refresh_token: str | None = None
    user: Mapping[str, Any] = field(default_factory=dict)

    @property
    def must_change_password(self) -> bool:
        return bool(self.user.get("mustChangePassword"))


def login_result(result: ApiResponse) -> LoginResult:
    """Pull tokens and user out of a login response; raises ValueError when no token came back."""

    data = result.response if isinstance(result.response, Mapping) else {}
    token = str(data.get("accessToken") or "").strip()
    if not token:
        raise ValueError("Login / Response: access token missing. Fix: check the auth service response.")
    user = data.get("user")
    return LoginResult(
        access_token=token,
        refresh_token=str(data.get("refreshToken") or "") or None,
        user=dict(user) if isinstance(user, Mapping) else {},
    )


def validate_login(email: str, password: str) -> list[str]:
    errors: list[str] = []
    if not _EMAIL_RE.match(email.strip()):
        errors.append("Invalid email address")
    if len(password) < MIN_LOGIN_PASSWORD:
        errors.append(f"Password must be at least {MIN_LOGIN_PASSWORD} characters")
    return errors


def validate_password_change(current: str, new: str, confirm: str) -> list[str]:
    errors: list[str] = []
    if not current:
        errors.append("Current password is required")
    strength = evaluate_password(new)
    for requirement in strength.requirements:
        if not requirement.met and requirement.text not in OPTIONAL_REQUIREMENTS:
            errors.append(f"New password needs: {requirement.text.lower()}")
    if not confirm:
        errors.append("Please confirm your password")
    elif new != confirm:
        errors.append("Passwords do not match")
    return errors


def is_account_created_notice(exc: Exception) -> bool:
    """A 401 from login that tells the user their account was just provisioned."""

    if not isinstance(exc, ApiError) or not exc.is_unauthorized or exc.header is None:
        return False
    return ACCOUNT_CREATED_MARKER in (exc.header.response_message or "")


class LoginScreen(BaseScreen):
    """Email and password sign-in; shown whenever the session is signed out."""

    def __init__(self, parent: tk.Widget, app: "App") -> None:
        super().__init__(parent, on_job_error=app.api.handle_error)
        self.app = app
        self.email_var = tk.StringVar(value="")
        self.password_var = tk.StringVar(value="")
        self.error_var = tk.StringVar(value="")
        self.build()

    def build(self) -> None:
        self.build_header(self, title="Sign in", subtitle="Use your HR Console account")

        form = ttk.Frame(self)
        form.pack(fill="x")
        form.columnconfigure(1, weight=1)
        ttk.Label(form, text="Email").grid(row=0, column=0, sticky="w", padx=(0, 8), pady=2)
        self.email_entry = ttk.Entry(form, textvariable=self.email_var)
        self.email_entry.grid(row=0, column=1, sticky="ew", pady=2)
        ttk.Label(form, text="Password").grid(row=1, column=0, sticky="w", padx=(0, 8), pady=2)
        password_entry = ttk.Entry(form, textvariable=self.password_var, show="*")
        password_entry.grid(row=1, column=1, sticky="ew", pady=2)
        password_entry.bind("<Return>", lambda _event: self.submit())

        ttk.Label(self, textvariable=self.error_var, foreground=_ERROR_COLOR).pack(anchor="w", pady=(6, 0))
        self.submit_btn = ttk.Button(self, text="Sign in", command=self.submit)
        self.submit_btn.pack(anchor="e", pady=(6, 0))

        self.build_status_bar(self)

    def submit(self) -> None:
        email = self.email_var.get().strip()
        password = self.password_var.get()
        errors = validate_login(email, password)
        if errors:
            self.error_var.set("\n".join(errors))
            return

        self.error_var.set("")
        self.submit_btn.configure(state="disabled")
        self.set_busy(True)
        self.set_status("Signing in...")
        self.safe_threaded_job(
            lambda: login_result(self.app.auth_api.login(email, password)),
            on_ok=self._on_signed_in,  # type: ignore[arg-type]
            on_err=self._on_sign_in_failed,
        )

    def _on_signed_in(self, result: LoginResult) -> None:
        self.set_busy(False)
        self.submit_btn.configure(state="normal")
        self.password_var.set("")
        self.set_status("Ready.")
        if result.must_change_password:
            self.app.toasts.show_toast(
                "You must change your password to continue",
                title="Password Change Required",
                level=ToastVariant.DEFAULT,
            )
        else:
            self.app.toasts.show_toast("Logged in successfully", title="Success", level=ToastVariant.SUCCESS)
        self.app.session.login(result.access_token, refresh_token=result.refresh_token, user=result.user)

    def _on_sign_in_failed(self, exc: Exception) -> None:
        self.set_busy(False)
        self.submit_btn.configure(state="normal")
        self.set_status("Ready.")
        message = get_error_message(exc)
        if is_account_created_notice(exc):
            self.app.toasts.show_toast(message, title="Account Created", level=ToastVariant.SUCCESS)
            return
        logger.info("Sign-in failed: %s", message)
        self.error_var.set(message)


class ChangePasswordScreen(BaseScreen):
    """Change the signed-in user's password.

    A forced change (the account carries ``mustChangePassword``) hides Cancel
    and signs in again with the new password once the change succeeds.
    """

    def __init__(self, parent: tk.Widget, app: "App") -> None:
        super().__init__(parent, on_job_error=app.api.handle_error)
        self.app = app
        self.forced = False
        self.title_var = tk.StringVar(value="Change Password")
        self.subtitle_var = tk.StringVar(value="")
        self.current_var = tk.StringVar(value="")
        self.new_var = tk.StringVar(value="")
        self.confirm_var = tk.StringVar(value="")
        self.strength_var = tk.StringVar(value="")
        self.error_var = tk.StringVar(value="")
        self.requirement_labels: list[ttk.Label] = []
        self.build()
        self.new_var.trace_add("write", lambda *_args: self._update_strength())
        self._update_strength()

    def build(self) -> None:
        header = ttk.Frame(self)
        header.pack(fill="x", pady=(0, 10))
        ttk.Label(header, textvariable=self.title_var, font=("Segoe UI", 16, "bold")).pack(anchor="w")
        ttk.Label(header, textvariable=self.subtitle_var).pack(anchor="w")

        form = ttk.Frame(self)
        form.pack(fill="x")
        form.columnconfigure(1, weight=1)
        rows = (
            ("Current password", self.current_var),
            ("New password", self.new_var),
            ("Confirm new password", self.confirm_var),
        )
        for row, (caption, var) in enumerate(rows):
            ttk.Label(form, text=caption).grid(row=row, column=0, sticky="w", padx=(0, 8), pady=2)
            ttk.Entry(form, textvariable=var, show="*").grid(row=row, column=1, sticky="ew", pady=2)

        meter = ttk.Frame(self)
        meter.pack(fill="x", pady=(6, 0))
        ttk.Label(meter, textvariable=self.strength_var).pack(anchor="w")
        for requirement in evaluate_password("").requirements:
            label = ttk.Label(meter, text=requirement.text)
            label.pack(anchor="w")
            self.requirement_labels.append(label)

        ttk.Label(self, textvariable=self.error_var, foreground=_ERROR_COLOR).pack(anchor="w", pady=(6, 0))
        actions = ttk.Frame(self)
        actions.pack(fill="x", pady=(6, 0))
        self.submit_btn = ttk.Button(actions, text="Change password", command=self.submit)
        self.submit_btn.pack(side="right")
        self.cancel_btn = ttk.Button(actions, text="Cancel", command=self.app.show_main)

        self.build_status_bar(self)

    def open(self, *, forced: bool) -> None:
        self.forced = forced
        for var in (self.current_var, self.new_var, self.confirm_var, self.error_var):
            var.set("")
        if forced:
            self.title_var.set("Change Required Password")
            self.subtitle_var.set("You must change your password to continue")
            self.cancel_btn.pack_forget()
        else:
            self.title_var.set("Change Password")
            self.subtitle_var.set("Enter your current password and choose a new one")
            self.cancel_btn.pack(side="right", padx=(0, 6))
        self.set_status("Ready.")

    def _update_strength(self) -> None:
        password = self.new_var.get()
        strength = evaluate_password(password)
        self.strength_var.set(f"Strength: {strength.label}" if password else "")
        for label, requirement in zip(self.requirement_labels, strength.requirements):
            marker = "+" if requirement.met else "-"
            label.configure(
                text=f"{marker} {requirement.text}",
                foreground=_MET_COLOR if requirement.met else _UNMET_COLOR,
            )

    def submit(self) -> None:
        current = self.current_var.get()
        new = self.new_var.get()
        errors = validate_password_change(current, new, self.confirm_var.get())
        if errors:
            self.error_var.set("\n".join(errors))
            return

        self.error_var.set("")
        self.submit_btn.configure(state="disabled")
        self.set_busy(True)
        self.set_status("Changing password...")
        self.safe_threaded_job(
            lambda: self.app.auth_api.change_password(current, new),
            on_ok=lambda _result: self._on_changed(new),
            on_err=self._on_change_failed,
        )

    def _on_changed(self, new_password: str) -> None:
        self.set_busy(False)
        self.submit_btn.configure(state="normal")
        self.set_status("Password changed.")
        self.app.toasts.show_toast("Password changed successfully", title="Success", level=ToastVariant.SUCCESS)
        if not self.forced:
            self.app.show_main()
            return

        email = str(self.app.session.state.user.get("email") or "")
        if not email:
            self._on_sign_in_again_failed(
                ValueError("Change password / Re-login: signed-in user has no email. Fix: sign in with the new password.")
            )
            return
        self.set_busy(True)
        self.safe_threaded_job(
            lambda: login_result(self.app.auth_api.login(email, new_password)),
            on_ok=self._on_signed_in_again,  # type: ignore[arg-type]
            on_err=self._on_sign_in_again_failed,
        )

    def _on_signed_in_again(self, result: LoginResult) -> None:
        self.set_busy(False)
        self.app.toasts.show_toast("Logged in with new password", title="Success", level=ToastVariant.SUCCESS)
        self.app.session.login(result.access_token, refresh_token=result.refresh_token, user=result.user)

    def _on_sign_in_again_failed(self, exc: Exception) -> None:
        self.set_busy(False)
        logger.info("Re-login after password change failed: %s", exc)
        self.app.toasts.show_toast("Please login with your new password", title="Info", level=ToastVariant.DEFAULT)
        self.app.session.logout()

    def _on_change_failed(self, exc: Exception) -> None:
        self.set_busy(False)
        self.submit_btn.configure(state="normal")
        message = get_error_message(exc)
        self.set_status(f"Change failed: {message}")
        self.app.toasts.show_toast(message, title="Error", level=ToastVariant.ERROR)
