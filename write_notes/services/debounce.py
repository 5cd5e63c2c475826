# write_notes/services/debounce.py

from __future__ import annotations

import asyncio
from typing import Callable, Optional


class Debouncer:
    """
    Single-shot timer on the running event loop.
    schedule() restarts the countdown; only the last callback fires.
    """

    def __init__(self, delay_ms: int):
        self.delay_ms = int(delay_ms)
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, callback: Callable[[], None]) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()

        def _fire() -> None:
            self._handle = None
            callback()

        self._handle = loop.call_later(self.delay_ms / 1000.0, _fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
