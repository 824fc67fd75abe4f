"""
Debouncer

Fires a callback only after a quiet period: every ``trigger`` cancels the
armed timer and re-arms it with the latest arguments.
"""

import asyncio
from collections.abc import Callable
from typing import Any


class Debouncer:
    """
    Cancel-and-rearm timer on the running event loop.

    Usage:
        debounced = Debouncer(0.25, resolver.show)
        debounced.trigger("recursion", context)
    """

    def __init__(self, delay: float, callback: Callable[..., Any]):
        if delay < 0:
            raise ValueError("delay must be >= 0")
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def trigger(self, *args, **kwargs) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, args, kwargs)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, args: tuple, kwargs: dict) -> None:
        self._handle = None
        self._callback(*args, **kwargs)
