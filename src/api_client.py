from __future__ import annotations

import json
import logging
import shlex
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx

from src.config import AppConfig
from src.session_store import SessionStore

logger = logging.getLogger("api_client")

AUTH_PATH_MARKERS = ("/login", "/signup", "/forgot-password", "/reset-password")
DEFAULT_ERROR_MESSAGE = "An unexpected error occurred"


@dataclass(frozen=True)
class ApiHeader:
    response_code: int
    response_message: str
    response_detail: str


@dataclass(frozen=True)
class ApiResponse:
    """Backend JSON envelope: {"header": {...}, "response": ...}."""

    header: ApiHeader
    response: Any
    status_code: int = 200


class ApiError(Exception):
    """Non-2xx response or transport failure from the HR backend."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        reason: str | None = None,
        header: ApiHeader | None = None,
        method: str | None = None,
        path: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason
        self.header = header
        self.method = method
        self.path = path
        # Set for a 401 outside the auth endpoints: the stored token is no longer valid.
        self.session_expired = False

    @property
    def is_network_error(self) -> bool:
        return self.status_code is None

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


def _parse_header(payload: Any) -> ApiHeader | None:
    if not isinstance(payload, Mapping):
        return None
    header = payload.get("header")
    if not isinstance(header, Mapping):
        return None
    try:
        code = int(header.get("responseCode") or 0)
    except (TypeError, ValueError):
        code = 0
    return ApiHeader(
        response_code=code,
        response_message=str(header.get("responseMessage") or ""),
        response_detail=str(header.get("responseDetail") or ""),
    )


def get_error_message(error: object) -> str:
    """User-facing text for any failure raised while talking to the backend."""

    if isinstance(error, ApiError):
        if error.header is not None:
            if error.header.response_message:
                return error.header.response_message
            if error.header.response_detail:
                return error.header.response_detail
        if error.reason:
            return error.reason
        text = str(error).strip()
        return text or DEFAULT_ERROR_MESSAGE
    if isinstance(error, Exception):
        return str(error).strip() or DEFAULT_ERROR_MESSAGE
    if isinstance(error, str):
        return error
    return DEFAULT_ERROR_MESSAGE


def to_curl(request: httpx.Request) -> str:
    parts = ["curl", "-X", request.method, shlex.quote(str(request.url))]
    for key, value in request.headers.items():
        if key.lower() in {"content-length", "host", "accept-encoding", "connection"}:
            continue
        parts.extend(["-H", shlex.quote(f"{key}: {value}")])
    body = request.content
    if body and request.method not in {"GET", "DELETE"}:
        parts.extend(["-d", shlex.quote(body.decode("utf-8", errors="replace"))])
    return " ".join(parts)


class ApiClient:
    """Thin JSON client for the HR backend.

    Adds the bearer token from the injected session, unwraps the response
    envelope, and turns every non-2xx response into ApiError. A 401 outside
    the auth endpoints marks the error ``session_expired``; ``handle_error``
    then signs the session out and calls ``on_unauthorized``.
    """

    def __init__(
        self,
        session: SessionStore,
        *,
        base_url: str = AppConfig.api_base_url,
        timeout_s: float = AppConfig.api_timeout_s,
        log_enabled: bool = False,
        transport: httpx.BaseTransport | None = None,
        on_unauthorized: Callable[[], None] | None = None,
    ) -> None:
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.log_enabled = log_enabled
        self.on_unauthorized = on_unauthorized
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout_s,
            headers={"Content-Type": "application/json", "Accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_config(cls, cfg: AppConfig, session: SessionStore, **kwargs: Any) -> "ApiClient":
        return cls(
            session,
            base_url=cfg.api_base_url,
            timeout_s=cfg.api_timeout_s,
            log_enabled=cfg.api_log_enabled,
            **kwargs,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ApiClient":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def get(self, path: str, *, params: Mapping[str, Any] | None = None) -> ApiResponse:
        return self.request("GET", path, params=params)

    def post(self, path: str, data: Any = None) -> ApiResponse:
        return self.request("POST", path, json_body=data)

    def put(self, path: str, data: Any = None) -> ApiResponse:
        return self.request("PUT", path, json_body=data)

    def delete(self, path: str) -> ApiResponse:
        return self.request("DELETE", path)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
    ) -> ApiResponse:
        headers: dict[str, str] = {}
        token = self.session.access_token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        clean_params = None
        if params:
            clean_params = {key: value for key, value in params.items() if value not in (None, "")}

        request = self._client.build_request(
            method,
            path,
            params=clean_params,
            json=json_body,
            headers=headers,
        )
        try:
            response = self._client.send(request)
        except httpx.TransportError as exc:
            logger.warning(
                "Network error: cannot reach API server at %s (%s). Make sure it is running.",
                request.url,
                exc,
            )
            raise ApiError(str(exc) or "Network Error", method=method, path=path) from exc

        payload = self._decode(response)
        header = _parse_header(payload)

        if response.is_success:
            if self.log_enabled:
                logger.debug(
                    "API response %s %s -> %s\n%s",
                    method,
                    path,
                    response.status_code,
                    to_curl(request),
                )
            return ApiResponse(
                header=header or ApiHeader(response.status_code, response.reason_phrase, ""),
                response=payload.get("response") if isinstance(payload, Mapping) else payload,
                status_code=response.status_code,
            )

        if self.log_enabled:
            logger.debug(
                "API error %s %s -> %s\n%s\n%s",
                method,
                path,
                response.status_code,
                to_curl(request),
                json.dumps(payload, indent=2, default=str) if payload is not None else response.text,
            )

        error = ApiError(
            header.response_message if header and header.response_message else response.reason_phrase,
            status_code=response.status_code,
            reason=response.reason_phrase,
            header=header,
            method=method,
            path=path,
        )
        if error.is_unauthorized and not any(marker in path for marker in AUTH_PATH_MARKERS):
            error.session_expired = True
        raise error

    def handle_error(self, error: Exception) -> bool:
        """React to a failed call on the UI thread; True when it ended the session.

        Requests run on worker threads and only raise. The session is cleared
        here so the store and its storage file are touched from one thread.
        """

        if not isinstance(error, ApiError) or not error.session_expired:
            return False
        if not self.session.is_authenticated:
            return False
        logger.info("Unauthorized response for %s %s; signing out", error.method, error.path)
        self.session.logout()
        if self.on_unauthorized is not None:
            self.on_unauthorized()
        return True

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            logger.debug("Non-JSON response body for %s", response.request.url)
            return None
