from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from src.gui_kit.tokens import UserRole
from src.gui_kit.tokens import role_color
from src.gui_kit.tokens import role_label
from src.local_storage import LocalStorage

logger = logging.getLogger("session_store")

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"
USER_KEY = "auth-user"


@dataclass(frozen=True)
class SessionState:
    access_token: str | None = None
    refresh_token: str | None = None
    user: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_authenticated(self) -> bool:
        return bool(self.access_token)


@dataclass(frozen=True)
class SessionView:
    """What the shell shows for a session: pure projection of SessionState."""

    is_authenticated: bool
    display_name: str
    role_label: str
    must_change_password: bool
    role_color: str = ""


def apply(state: SessionState) -> SessionView:
    if not state.is_authenticated:
        return SessionView(False, "Signed out", "", False)

    user = state.user or {}
    email = str(user.get("email") or "").strip()
    display_name = email or "Signed in"

    raw_role = user.get("role")
    label = ""
    color = ""
    if raw_role:
        try:
            role = UserRole(str(raw_role))
            label = role_label(role)
            color = role_color(role)
        except ValueError:
            logger.warning("Unknown user role %r in session", raw_role)
    return SessionView(
        is_authenticated=True,
        display_name=display_name,
        role_label=label,
        must_change_password=bool(user.get("mustChangePassword")),
        role_color=color,
    )


class SessionStore:
    """Auth tokens and signed-in user, persisted to local storage.

    Inject one instance wherever the session is needed; the API client reads
    the bearer token from it. Mutate it from the Tk thread only.
    """

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage
        self._state = SessionState()
        self._listeners: list[Callable[[SessionState], None]] = []
        self._hydrated = False

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def hydrated(self) -> bool:
        return self._hydrated

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def access_token(self) -> str | None:
        return self._state.access_token

    def hydrate(self) -> SessionState:
        user: dict[str, Any] = {}
        raw_user = self._storage.get_item(USER_KEY)
        if raw_user:
            try:
                loaded = json.loads(raw_user)
            except json.JSONDecodeError as exc:
                logger.warning("Ignoring stored user profile: %s", exc)
            else:
                if isinstance(loaded, dict):
                    user = loaded
        self._state = SessionState(
            access_token=self._storage.get_item(ACCESS_TOKEN_KEY) or None,
            refresh_token=self._storage.get_item(REFRESH_TOKEN_KEY) or None,
            user=user,
        )
        self._hydrated = True
        self._notify()
        return self._state

    def login(
        self,
        access_token: str,
        *,
        refresh_token: str | None = None,
        user: Mapping[str, Any] | None = None,
    ) -> SessionState:
        token = str(access_token).strip()
        if not token:
            raise ValueError("Session / access token: token is empty. Fix: pass the token returned by login.")
        self._state = SessionState(access_token=token, refresh_token=refresh_token or None, user=dict(user or {}))
        self._storage.set_item(ACCESS_TOKEN_KEY, token)
        if refresh_token:
            self._storage.set_item(REFRESH_TOKEN_KEY, refresh_token)
        else:
            self._storage.remove_item(REFRESH_TOKEN_KEY)
        self._storage.set_item(USER_KEY, json.dumps(dict(user or {})))
        self._notify()
        return self._state

    def set_tokens(self, access_token: str, *, refresh_token: str | None = None) -> SessionState:
        """Swap in refreshed tokens; the signed-in user is kept."""

        self._state = SessionState(
            access_token=access_token or None,
            refresh_token=refresh_token or self._state.refresh_token,
            user=self._state.user,
        )
        if access_token:
            self._storage.set_item(ACCESS_TOKEN_KEY, access_token)
        else:
            self._storage.remove_item(ACCESS_TOKEN_KEY)
        if refresh_token:
            self._storage.set_item(REFRESH_TOKEN_KEY, refresh_token)
        self._notify()
        return self._state

    def logout(self) -> SessionState:
        self._state = SessionState()
        for key in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY, USER_KEY):
            self._storage.remove_item(key)
        self._notify()
        return self._state

    def subscribe(self, listener: Callable[[SessionState], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)
