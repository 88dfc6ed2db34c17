from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

ENV_PREFIX = "HR_CONSOLE_"
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _config_error(field: str, issue: str, hint: str) -> str:
    return f"Config / {field}: {issue}. Fix: {hint}."


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(_config_error(name, f"'{raw}' is not a boolean", "use true/false or 1/0"))


def _parse_int(name: str, raw: str, *, minimum: int) -> int:
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ValueError(_config_error(name, f"'{raw}' is not an integer", "enter a whole number")) from exc
    if value < minimum:
        raise ValueError(_config_error(name, f"value {value} must be >= {minimum}", f"use {minimum} or more"))
    return value


def _parse_float(name: str, raw: str) -> float:
    try:
        value = float(raw.strip())
    except ValueError as exc:
        raise ValueError(_config_error(name, f"'{raw}' is not numeric", "enter a number of seconds")) from exc
    if value <= 0:
        raise ValueError(_config_error(name, f"value {value} must be > 0", "enter a positive number of seconds"))
    return value


@dataclass(frozen=True)
class AppConfig:
    debug: bool = False
    log_level: str = "INFO"
    api_base_url: str = "http://localhost:9400"
    api_timeout_s: float = 15.0
    api_log_enabled: bool = False
    storage_path: str = "hr_console_storage.json"
    search_debounce_ms: int = 500
    company_search_min_chars: int = 2
    company_search_limit: int = 20
    toast_duration_ms: int = 10_000
    max_toasts: int = 4

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """Build a config from HR_CONSOLE_* variables, falling back to defaults."""

        env = os.environ if environ is None else environ
        defaults = cls()
        raw = {
            key[len(ENV_PREFIX):].lower(): value
            for key, value in env.items()
            if key.startswith(ENV_PREFIX)
        }
        values: dict[str, object] = {}

        if "debug" in raw:
            values["debug"] = _parse_bool("debug", raw["debug"])
        if "log_level" in raw:
            level = raw["log_level"].strip().upper()
            if level not in _LOG_LEVELS:
                raise ValueError(
                    _config_error(
                        "log_level",
                        f"'{raw['log_level']}' is not a logging level",
                        "use DEBUG, INFO, WARNING or ERROR",
                    )
                )
            values["log_level"] = level
        if "api_base_url" in raw:
            url = raw["api_base_url"].strip().rstrip("/")
            if not url.startswith(("http://", "https://")):
                raise ValueError(
                    _config_error(
                        "api_base_url",
                        f"'{raw['api_base_url']}' is not an http(s) URL",
                        "start the URL with http:// or https://",
                    )
                )
            values["api_base_url"] = url
        if "api_timeout_s" in raw:
            values["api_timeout_s"] = _parse_float("api_timeout_s", raw["api_timeout_s"])
        if "api_log_enabled" in raw:
            values["api_log_enabled"] = _parse_bool("api_log_enabled", raw["api_log_enabled"])
        if "storage_path" in raw:
            values["storage_path"] = raw["storage_path"].strip() or defaults.storage_path
        for name, minimum in (
            ("search_debounce_ms", 0),
            ("company_search_min_chars", 0),
            ("company_search_limit", 1),
            ("toast_duration_ms", 250),
            ("max_toasts", 1),
        ):
            if name in raw:
                values[name] = _parse_int(name, raw[name], minimum=minimum)

        return cls(**values)  # type: ignore[arg-type]
