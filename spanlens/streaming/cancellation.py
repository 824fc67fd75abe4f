"""
Request Lifecycle Manager - Educational Documentation
=====================================================

WHAT IS A SLOT?
---------------
A slot is a logical single-occupancy position for an in-flight operation:
"the current chat turn", "the current span lookup". Starting a new operation
in a slot supersedes whatever was running there.

THE THREE RULES:
----------------
1. ``begin()`` cancels the slot's current token (if any), bumps the slot's
   generation, and hands out a fresh token.
2. Every piece of I/O for the operation is bound to that token. Cancelling
   the token runs its ``on_cancel`` callbacks, which abort the underlying
   task/connection promptly.
3. Every continuation checks ``slot.is_current(token)`` before it mutates
   shared state. A token from an older generation is inert even if a
   callback for it still fires after bytes already in flight arrive.

Cancellation is NOT an error: it produces no user-visible signal, it only
stops further state mutation.

No locks are needed. Everything runs on one event loop and each slot has
exactly one writer at a time: the holder of the current token.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from spanlens.core.config.constants import Stage
from spanlens.core.logging import get_logger

logger = get_logger(__name__)


class CancellationToken:
    """
    Cooperative cancellation handle for one in-flight operation.

    Attributes:
        slot: Name of the slot that issued the token
        generation: Slot generation at issue time
    """

    def __init__(self, slot: str = "", generation: int = 0):
        self.slot = slot
        self.generation = generation
        self._cancelled = False
        self._callbacks: list[Callable[[], Any]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Cancel the operation. Idempotent."""
        if self._cancelled:
            return
        self._cancelled = True

        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.warning(
                    "Cancellation callback failed",
                    stage=Stage.LIFECYCLE.value,
                    slot=self.slot,
                    error=str(e),
                )

    def on_cancel(self, callback: Callable[[], Any]) -> None:
        """
        Register a callback that aborts the underlying resource.

        Runs immediately when the token is already cancelled.
        """
        if self._cancelled:
            callback()
            return
        self._callbacks.append(callback)

    def bind_task(self, task: asyncio.Task) -> asyncio.Task:
        """Cancel ``task`` when this token is cancelled."""
        self.on_cancel(task.cancel)
        return task

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "live"
        return f"CancellationToken(slot='{self.slot}', generation={self.generation}, {state})"


class RequestSlot:
    """
    One single-occupancy slot with a generation counter.

    Usage:
        slot = RequestSlot("lookup")
        token = slot.begin()
        ...
        if slot.is_current(token):
            state.data = result
    """

    def __init__(self, name: str):
        self.name = name
        self.generation = 0
        self._token: CancellationToken | None = None

    @property
    def current(self) -> CancellationToken | None:
        """The live token, or None when the slot is idle."""
        if self._token is not None and self._token.cancelled:
            return None
        return self._token

    @property
    def busy(self) -> bool:
        return self.current is not None

    def begin(self) -> CancellationToken:
        """Supersede the current operation and issue a fresh token."""
        previous = self._token
        if previous is not None and not previous.cancelled:
            logger.debug(
                "Superseding in-flight operation",
                stage=Stage.LIFECYCLE.value,
                slot=self.name,
                generation=previous.generation,
            )
            previous.cancel()

        self.generation += 1
        self._token = CancellationToken(self.name, self.generation)
        return self._token

    def cancel(self) -> None:
        """Cancel the current operation, leaving the slot idle."""
        if self._token is not None:
            self._token.cancel()
        self._token = None

    def release(self, token: CancellationToken) -> None:
        """Mark ``token``'s operation finished if it is still the current one."""
        if self._token is token:
            self._token = None

    def is_current(self, token: CancellationToken) -> bool:
        """True if ``token`` may still mutate state owned by this slot."""
        return (
            not token.cancelled
            and token.generation == self.generation
            and self._token is token
        )

    def start(
        self, operation: Callable[[CancellationToken], Awaitable[Any]]
    ) -> tuple[CancellationToken, asyncio.Task]:
        """
        Begin a new operation and run it as a task bound to the new token.

        The returned task is cancelled when the token is cancelled.
        """
        token = self.begin()
        task = asyncio.get_running_loop().create_task(operation(token))
        token.bind_task(task)
        return token, task


class RequestLifecycleManager:
    """
    Owns all slots for one client (chat turn, lookup, ...).

    Slots are created on first use.
    """

    def __init__(self):
        self._slots: dict[str, RequestSlot] = {}

    def slot(self, name: str) -> RequestSlot:
        if name not in self._slots:
            self._slots[name] = RequestSlot(name)
        return self._slots[name]

    def begin(self, name: str) -> CancellationToken:
        return self.slot(name).begin()

    def cancel(self, name: str) -> None:
        if name in self._slots:
            self._slots[name].cancel()

    def is_current(self, name: str, token: CancellationToken) -> bool:
        return self.slot(name).is_current(token)

    def cancel_all(self) -> None:
        for slot in self._slots.values():
            slot.cancel()

    def get_stats(self) -> dict[str, Any]:
        return {
            name: {"generation": slot.generation, "busy": slot.busy}
            for name, slot in self._slots.items()
        }
