from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger("local_storage")


def _storage_error(path: Path, issue: str, hint: str) -> str:
    return f"Local storage / {path}: {issue}. Fix: {hint}."


class LocalStorage:
    """String key/value store persisted as a single JSON object file.

    Reads go through an in-memory copy loaded on first use. Every write
    replaces the whole file atomically so a crash never leaves half a document.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._items: dict[str, str] | None = None

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[str(key)] = str(value)
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)

    def clear(self) -> None:
        self._items = {}
        self._save(self._items)

    def keys(self) -> list[str]:
        return sorted(self._load())

    def reload(self) -> None:
        self._items = None

    def _load(self) -> dict[str, str]:
        if self._items is not None:
            return self._items
        self._items = {}
        if not self.path.exists():
            return self._items
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable storage file %s: %s", self.path, exc)
            return self._items
        if not isinstance(raw, dict):
            logger.warning("Ignoring storage file %s: top-level JSON value is not an object", self.path)
            return self._items
        self._items = {str(key): str(value) for key, value in raw.items() if value is not None}
        return self._items

    def _save(self, items: dict[str, str]) -> None:
        directory = self.path.parent if str(self.path.parent) else Path(".")
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(items, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            raise ValueError(
                _storage_error(self.path, f"could not be written ({exc})", "choose a writable storage_path")
            ) from exc
