"""Trailing-edge debouncing on top of the asyncio timer wheel."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """Call ``fn`` once input has been idle for ``wait`` seconds.

    Every call cancels the pending timer before scheduling a new one, so only
    the arguments of the last call inside a quiet window reach ``fn``.
    """

    def __init__(self, fn: Callable[..., Any], wait: float) -> None:
        self.fn = fn
        self.wait = wait
        self._handle: Optional[asyncio.TimerHandle] = None

    def __call__(self, *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.wait, self._fire, args)

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple) -> None:
        self._handle = None
        logger.debug("debounce fired args=%r", args)
        self.fn(*args)
