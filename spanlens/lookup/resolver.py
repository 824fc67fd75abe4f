"""
Cascading Resolver - Educational Documentation
==============================================

WHAT IS THE CASCADE?
--------------------
A selected span is explained by three sources tried in a fixed order:

    dictionary  ->  encyclopedia  ->  assistant

The starting point depends on the span:

    "recursion"              one word   -> dictionary
    "tail call optimization" 2+ words   -> encyclopedia

When the active source's fetch ends in an error (not found or request
failed), the resolver moves ``active_tab`` to the next source and fetches
it. The assistant is terminal: its failure is shown to the user. The
cascade only moves forward, so no source is fetched twice by one cascade.

MANUAL TAB SWITCHES:
--------------------
Switching to a source that already holds data, is loading, or holds an
error does nothing beyond changing the tab. Switching to an untouched
source fetches that source only; a manual fetch does not cascade. If the
cascade later reaches a source whose manual fetch is still loading, it adopts
that fetch, and a failure continues the cascade from there.

ONE WRITER AT A TIME:
---------------------
Each ``show`` begins a new operation on the ``lookup`` slot. Beginning it
cancels the previous token, which cancels every task bound to it (the
source fetches and the assistant stream). Tasks that were already past
their last suspension point still check ``slot.is_current(token)`` before
touching the popover state, so a superseded lookup can never write into
the current one.

The lookup token stays live while the popover is visible so that manual
tab switches can fetch under it. ``hide`` cancels it.
"""

import asyncio
from collections import Counter
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from spanlens.core.config.constants import (
    ASSISTANT_FAILED,
    CASCADE_ORDER,
    DICTIONARY_NOT_FOUND,
    ENCYCLOPEDIA_NOT_FOUND,
    ERROR_SPAN_REQUIRED,
    ERROR_SPAN_TOO_LONG,
    SLOT_LOOKUP,
    LookupSource,
    Stage,
)
from spanlens.core.config.settings import get_settings
from spanlens.core.exceptions import InvalidInputError, SourceNotFoundError, SpanlensError
from spanlens.core.logging import get_logger, log_stage
from spanlens.lookup.models import LookupRequest, PopoverState, Position
from spanlens.lookup.sources.base import AssistantSource, DictionarySource, EncyclopediaSource
from spanlens.streaming.cancellation import CancellationToken, RequestLifecycleManager
from spanlens.streaming.throttle import ThrottledUpdater

logger = get_logger(__name__)

_FALLBACK_ERRORS = {
    LookupSource.DICTIONARY: DICTIONARY_NOT_FOUND,
    LookupSource.ENCYCLOPEDIA: ENCYCLOPEDIA_NOT_FOUND,
    LookupSource.ASSISTANT: ASSISTANT_FAILED,
}


def initial_source(request: LookupRequest) -> LookupSource:
    """Single-word spans start at the dictionary, longer ones at the encyclopedia."""
    if request.word_count == 1:
        return LookupSource.DICTIONARY
    return LookupSource.ENCYCLOPEDIA


class CascadingResolver:
    """
    Popover state machine for one client.

    Args:
        dictionary: Dictionary collaborator
        encyclopedia: Encyclopedia collaborator
        assistant: Streaming assistant collaborator
        lifecycle: Shared lifecycle manager (a private one when omitted)
        on_change: Called with the popover state after every applied mutation
        update_interval: Throttle interval for assistant snapshots
        max_span_length: Upper bound on the trimmed span length

    Attributes:
        state: Current PopoverState
        fetch_counts: Fetches issued per source since construction
        fetch_history: Sources in the order their fetches were issued
    """

    def __init__(
        self,
        dictionary: DictionarySource,
        encyclopedia: EncyclopediaSource,
        assistant: AssistantSource,
        lifecycle: RequestLifecycleManager | None = None,
        on_change: Callable[[PopoverState], Any] | None = None,
        update_interval: float | None = None,
        max_span_length: int | None = None,
    ):
        settings = get_settings()
        self.dictionary = dictionary
        self.encyclopedia = encyclopedia
        self.assistant = assistant
        self.lifecycle = lifecycle or RequestLifecycleManager()
        self.on_change = on_change
        self.update_interval = (
            update_interval
            if update_interval is not None
            else settings.client.STREAM_UPDATE_INTERVAL
        )
        self.max_span_length = max_span_length or settings.lookup.MAX_SPAN_LENGTH

        self.state = PopoverState()
        self.fetch_counts: Counter[LookupSource] = Counter()
        self.fetch_history: list[LookupSource] = []
        self._slot = self.lifecycle.slot(SLOT_LOOKUP)
        self._token: CancellationToken | None = None
        self._updater: ThrottledUpdater | None = None
        self._tasks: set[asyncio.Task] = set()
        self._cascading: set[LookupSource] = set()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def show(
        self,
        span_text: str,
        context: str = "",
        position: Position | dict | None = None,
    ) -> LookupRequest:
        """
        Start a new lookup, superseding the previous one.

        Must be called from a running event loop.

        Raises:
            InvalidInputError: The span is blank or longer than max_span_length
        """
        request = self._build_request(span_text, context, position)

        self._token = self._slot.begin()
        self._drop_updater()

        self._cascading.clear()
        self.state.reset_sources()
        self.state.visible = True
        self.state.request = request
        self.state.active_tab = initial_source(request)
        self._notify()

        log_stage(
            logger,
            Stage.CASCADE,
            "Lookup started",
            generation=self._token.generation,
            word_count=request.word_count,
            initial_source=self.state.active_tab.value,
        )
        self._fetch(self.state.active_tab, self._token, cascade=True)
        return request

    def switch_tab(self, source: LookupSource | str) -> bool:
        """
        Make ``source`` the active tab, fetching it if it has no state.

        Returns:
            True if a fetch was issued
        """
        source = LookupSource(source)
        if not self.state.visible or self._token is None:
            return False

        self.state.active_tab = source
        self._notify()

        if self.state.source(source).is_cached:
            logger.debug("Tab switch served from cache", source=source.value)
            return False

        self._fetch(source, self._token, cascade=False)
        return True

    def hide(self) -> None:
        """Dismiss the popover: cancel the lookup and clear all source state."""
        self._slot.cancel()
        self._token = None
        self._drop_updater()

        self.state.visible = False
        self.state.request = None
        self._cascading.clear()
        self.state.active_tab = LookupSource.DICTIONARY
        self.state.reset_sources()
        self._notify()
        log_stage(logger, Stage.CASCADE, "Lookup dismissed", level="debug")

    async def wait_idle(self) -> None:
        """Wait until no fetch task (including cascaded ones) is running."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    def _build_request(self, span_text, context, position) -> LookupRequest:
        try:
            request = LookupRequest(span_text=span_text, context=context or "", position=position)
        except PydanticValidationError as e:
            raise InvalidInputError(ERROR_SPAN_REQUIRED) from e
        if len(request.span_text) > self.max_span_length:
            raise InvalidInputError(
                ERROR_SPAN_TOO_LONG,
                details={"length": len(request.span_text), "max": self.max_span_length},
            )
        return request

    def _fetch(self, source: LookupSource, token: CancellationToken, cascade: bool) -> None:
        if cascade:
            self._cascading.add(source)
        self.fetch_counts[source] += 1
        self.fetch_history.append(source)
        self.state.source(source).start()
        self._notify()

        log_stage(
            logger,
            Stage.CASCADE,
            "Fetching source",
            level="debug",
            source=source.value,
            cascade=cascade,
            generation=token.generation,
        )

        task = asyncio.get_running_loop().create_task(
            self._run(source, self.state.request, token)
        )
        token.bind_task(task)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(
        self,
        source: LookupSource,
        request: LookupRequest,
        token: CancellationToken,
    ) -> None:
        try:
            if source is LookupSource.ASSISTANT:
                await self._stream_assistant(request, token)
                return

            if source is LookupSource.DICTIONARY:
                result = await self.dictionary.lookup(request.dictionary_key)
            else:
                result = await self.encyclopedia.summarize(request.encyclopedia_key)
            if result is None:
                raise SourceNotFoundError(_FALLBACK_ERRORS[source])
        except Exception as e:
            self._on_failure(source, token, e)
            return

        if not self._slot.is_current(token):
            return
        self.state.source(source).succeed(result)
        self._notify()
        log_stage(logger, Stage.CASCADE, "Source resolved", source=source.value)

    async def _stream_assistant(self, request: LookupRequest, token: CancellationToken) -> None:
        def apply(text: str, final: bool) -> None:
            if not self._slot.is_current(token):
                return
            state = self.state.source(LookupSource.ASSISTANT)
            if final:
                state.succeed(text)
            else:
                state.stream(text)
            self._notify()

        updater = ThrottledUpdater(apply, interval=self.update_interval)
        self._updater = updater
        try:
            async for fragment in self.assistant.explain(request.span_text, request.context):
                if not self._slot.is_current(token):
                    updater.cancel()
                    return
                updater.push(fragment)
            updater.finish()
        except Exception:
            updater.finish(final=False)
            raise
        finally:
            if self._updater is updater:
                self._updater = None
            updater.cancel()

    def _on_failure(self, source: LookupSource, token: CancellationToken, error: Exception) -> None:
        if not self._slot.is_current(token):
            return
        cascade = source in self._cascading

        if isinstance(error, SpanlensError):
            message = error.message
        else:
            message = str(error) or _FALLBACK_ERRORS[source]

        self.state.source(source).fail(message)
        self._notify()
        log_stage(
            logger,
            Stage.CASCADE,
            "Source failed",
            level="info",
            source=source.value,
            error_type=type(error).__name__,
            error=message,
            cascade=cascade,
        )

        if cascade:
            self._advance(source, token)

    def _advance(self, failed: LookupSource, token: CancellationToken) -> None:
        """Move the tab forward from ``failed``; never back to an earlier source."""
        remaining = CASCADE_ORDER[CASCADE_ORDER.index(failed) + 1:]
        for source in remaining:
            self.state.active_tab = source
            state = self.state.source(source)
            if state.is_empty:
                self._notify()
                self._fetch(source, token, cascade=True)
                return
            # Already fetched manually: show it, skipping past a failed non-terminal source.
            if state.error is None or source is CASCADE_ORDER[-1]:
                if state.loading:
                    # The cascade adopts the in-flight fetch; its failure continues the chain.
                    self._cascading.add(source)
                self._notify()
                return

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _drop_updater(self) -> None:
        if self._updater is not None:
            self._updater.cancel()
            self._updater = None

    def _notify(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change(self.state)
        except Exception as e:
            logger.warning("Popover listener failed", stage=Stage.CASCADE.value, error=str(e))

    def get_stats(self) -> dict[str, Any]:
        return {
            "visible": self.state.visible,
            "active_tab": self.state.active_tab.value,
            "in_flight": self.in_flight,
            "fetch_counts": {source.value: count for source, count in self.fetch_counts.items()},
        }
