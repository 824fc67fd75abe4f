"""
Throttled Presentation Updater

Accumulates streamed text and hands snapshots to an observer at a bounded
rate. The observer receives ``(text, final)``:

- the first token is emitted immediately;
- a token arriving less than ``interval`` after the last emission arms one
  deferred flush, and every token until then is coalesced into it;
- ``finish()`` emits the complete text unconditionally with ``final=True``;
  ``finish(final=False)`` flushes it as a non-final snapshot.

Every snapshot is a prefix of the final text. Throttling only bounds the
update frequency; it never changes content or order.
"""

import asyncio
import math
import time
from collections.abc import Callable

from spanlens.core.logging import get_logger

logger = get_logger(__name__)

DEFAULT_UPDATE_INTERVAL = 0.1


class ThrottledUpdater:
    """
    Bounded-frequency snapshot emitter.

    Args:
        on_emit: Called with (accumulated_text, final)
        interval: Minimum seconds between non-final emissions
        clock: Monotonic clock, seconds
    """

    def __init__(
        self,
        on_emit: Callable[[str, bool], None],
        interval: float = DEFAULT_UPDATE_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self._on_emit = on_emit
        self.interval = interval
        self._clock = clock
        self._parts: list[str] = []
        self._last_emit_at = -math.inf
        self._last_emitted: str | None = None
        self._pending: asyncio.TimerHandle | None = None
        self._closed = False
        self.emit_count = 0

    @property
    def text(self) -> str:
        """Everything accumulated so far."""
        return "".join(self._parts)

    @property
    def closed(self) -> bool:
        return self._closed

    def push(self, token: str) -> None:
        """Accumulate a token and emit or schedule a snapshot."""
        if self._closed:
            return
        self._parts.append(token)

        elapsed = self._clock() - self._last_emit_at
        if elapsed >= self.interval:
            self._cancel_pending()
            self._emit(final=False)
        elif self._pending is None:
            loop = asyncio.get_running_loop()
            self._pending = loop.call_later(self.interval - elapsed, self._flush)

    def finish(self, final: bool = True) -> str:
        """
        Emit the complete text unconditionally and close the updater.

        Pass ``final=False`` when the stream ended in error: the observer still
        receives everything accumulated, but as a non-final snapshot.
        """
        if self._closed:
            return self.text
        self._cancel_pending()
        self._closed = True
        self._emit(final=final)
        return self.text

    def cancel(self) -> None:
        """Drop any pending snapshot without emitting."""
        self._cancel_pending()
        self._closed = True

    def _flush(self) -> None:
        self._pending = None
        if self._closed:
            return
        if self.text != self._last_emitted:
            self._emit(final=False)

    def _emit(self, final: bool) -> None:
        snapshot = self.text
        self._last_emit_at = self._clock()
        self._last_emitted = snapshot
        self.emit_count += 1
        self._on_emit(snapshot, final)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
