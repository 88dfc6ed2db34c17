"""Latest-value debounce over a platform scheduler."""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

from src.gui_kit.ui_dispatch import Platform

__all__ = ["Debouncer"]

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Emit the last pushed value once input has been quiet for ``delay_ms``.

    Every push cancels the pending timer, so intermediate values are dropped.
    A delay of zero still goes through the scheduler and is delivered on a
    later turn. After ``close()`` nothing is ever emitted.
    """

    def __init__(self, platform: Platform, delay_ms: int, on_emit: Callable[[T], None]) -> None:
        self._platform = platform
        self._delay_ms = max(0, int(delay_ms))
        self._on_emit = on_emit
        self._pending_handle: object | None = None
        self._pending_value: T | None = None
        self._generation = 0
        self._closed = False

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    @property
    def pending(self) -> bool:
        return self._pending_handle is not None

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, value: T) -> None:
        if self._closed:
            return
        self.cancel()
        self._pending_value = value
        generation = self._generation
        self._pending_handle = self._platform.schedule_after(
            self._delay_ms,
            lambda: self._emit_now(generation),
        )

    def cancel(self) -> None:
        # Bumping the generation also neutralizes a timer the host failed to cancel.
        self._generation += 1
        if self._pending_handle is not None:
            self._platform.cancel_scheduled(self._pending_handle)
        self._pending_handle = None
        self._pending_value = None

    def close(self) -> None:
        self.cancel()
        self._closed = True

    def _emit_now(self, generation: int) -> None:
        if self._closed or generation != self._generation or self._pending_handle is None:
            return
        value = self._pending_value
        self._pending_handle = None
        self._pending_value = None
        self._on_emit(value)  # type: ignore[arg-type]
