"""Cancelable debounce timer on the asyncio event loop."""

from __future__ import annotations

import asyncio
from typing import Any, Callable


class Debouncer:
    """Delays calls to *fn* until input pauses for *delay_ms*.

    Each call cancels the pending one, so only the last call of a burst
    runs. Without a running event loop calls run immediately.
    """

    def __init__(self, fn: Callable[..., Any], delay_ms: int) -> None:
        self._fn = fn
        self._delay_ms = delay_ms
        self._handle: asyncio.TimerHandle | None = None

    @property
    def delay_ms(self) -> int:
        return self._delay_ms

    def set_delay(self, delay_ms: int) -> None:
        """Change the delay; a pending call is cancelled."""
        self.cancel()
        self._delay_ms = delay_ms

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def __call__(self, *args: Any) -> None:
        self.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._fn(*args)
            return
        self._handle = loop.call_later(self._delay_ms / 1000, self._fire, args)

    def _fire(self, args: tuple[Any, ...]) -> None:
        self._handle = None
        self._fn(*args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
