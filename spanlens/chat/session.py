"""
Chat Session - Educational Documentation
========================================

ONE TURN AT A TIME:
-------------------
``send_message`` runs a turn on the ``chat`` slot:

1. Supersede any turn still streaming; its placeholder is finalized with
   whatever text it had reached.
2. Append the user message and an empty assistant placeholder.
3. Stream tokens from the relay into a ThrottledUpdater; each snapshot is
   written into the placeholder.
4. On ``Done`` (or end of stream) write the complete text and finalize.
5. On an error frame or HTTP failure record ``error`` and remove the
   placeholder.

Steps 3 to 5 run in a task bound to the turn's cancellation token, and
every write first checks that the token is still current for the slot.

Sending blank text sends nothing: it cancels the in-flight turn and clears
transient state (loading flag and error).
"""

import asyncio
from collections.abc import Callable
from typing import Any

from spanlens.chat.manager import ChatManager
from spanlens.chat.models import Message
from spanlens.core.config.constants import SLOT_CHAT, Stage
from spanlens.core.config.settings import get_settings
from spanlens.core.exceptions import ProviderAPIError, SpanlensError
from spanlens.core.logging import get_logger, log_stage
from spanlens.streaming.cancellation import CancellationToken, RequestLifecycleManager
from spanlens.streaming.frames import Done, Error, Token
from spanlens.streaming.relay_client import RelayClient
from spanlens.streaming.throttle import ThrottledUpdater

logger = get_logger(__name__)


class ChatSession:
    """
    Conversation state driven by the relay's chat stream.

    Args:
        client: Relay client used for ``POST /api/chat``
        lifecycle: Shared lifecycle manager (a private one when omitted)
        manager: Optional ChatManager kept in sync with the message list
        on_change: Called with the session after every applied mutation
        update_interval: Throttle interval for placeholder snapshots
    """

    def __init__(
        self,
        client: RelayClient,
        lifecycle: RequestLifecycleManager | None = None,
        manager: ChatManager | None = None,
        on_change: Callable[["ChatSession"], Any] | None = None,
        update_interval: float | None = None,
    ):
        self.client = client
        self.lifecycle = lifecycle or RequestLifecycleManager()
        self.manager = manager
        self.on_change = on_change
        self.update_interval = (
            update_interval
            if update_interval is not None
            else get_settings().client.STREAM_UPDATE_INTERVAL
        )

        self.messages: list[Message] = []
        self.is_loading = False
        self.error: str | None = None

        self._slot = self.lifecycle.slot(SLOT_CHAT)
        self._placeholder: Message | None = None
        self._updater: ThrottledUpdater | None = None

    async def send_message(self, text: str) -> Message | None:
        """
        Send ``text`` and stream the reply.

        Returns:
            The completed assistant message, or None when nothing was sent,
            the turn failed, or it was superseded
        """
        if not text or not text.strip():
            self.cancel()
            return None

        self._abandon_turn()
        token = self._slot.begin()

        placeholder = Message.placeholder()
        self.messages.append(Message.user(text))
        self.messages.append(placeholder)
        self._placeholder = placeholder
        self.is_loading = True
        self.error = None
        self._sync_manager()
        self._notify()

        log_stage(logger, Stage.CHAT, "Chat turn started", generation=token.generation)

        task = asyncio.get_running_loop().create_task(self._run_turn(text, token, placeholder))
        token.bind_task(task)
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            if self._slot.is_current(token):
                self.cancel()
            raise

        if task.cancelled():
            return None
        task.result()
        if placeholder.complete and placeholder in self.messages:
            return placeholder
        return None

    def cancel(self) -> None:
        """Abort the in-flight turn and clear transient state."""
        self._abandon_turn()
        self._slot.cancel()
        self.is_loading = False
        self.error = None
        self._notify()

    def clear_error(self) -> None:
        self.error = None
        self._notify()

    def reset_messages(self) -> None:
        self.cancel()
        self.messages = []

    def load_messages(self, messages: list[Message]) -> None:
        self.cancel()
        self.messages = list(messages)

    # ------------------------------------------------------------------

    async def _run_turn(self, text: str, token: CancellationToken, placeholder: Message) -> None:
        def apply(snapshot: str, final: bool) -> None:
            if not self._slot.is_current(token):
                return
            if final:
                placeholder.finalize(snapshot)
            else:
                placeholder.set_text(snapshot)
            self._notify()

        updater = ThrottledUpdater(apply, interval=self.update_interval)
        self._updater = updater
        try:
            async for event in self.client.stream_chat(text, token):
                if not self._slot.is_current(token):
                    return
                if isinstance(event, Token):
                    updater.push(event.text)
                elif isinstance(event, Error):
                    raise ProviderAPIError(event.message)
                elif isinstance(event, Done):
                    break
            updater.finish()
        except Exception as e:
            updater.finish(final=False)
            self._fail_turn(token, placeholder, e)
            return
        finally:
            updater.cancel()
            if self._updater is updater:
                self._updater = None

        if not self._slot.is_current(token):
            return
        self._end_turn(token)
        log_stage(
            logger, Stage.CHAT, "Chat turn complete", chars=len(placeholder.text)
        )

    def _fail_turn(self, token: CancellationToken, placeholder: Message, error: Exception) -> None:
        if not self._slot.is_current(token):
            return
        message = error.message if isinstance(error, SpanlensError) else str(error)
        self.error = message or "Unknown error"
        if placeholder in self.messages:
            self.messages.remove(placeholder)
        log_stage(
            logger,
            Stage.CHAT,
            "Chat turn failed",
            level="warning",
            error_type=type(error).__name__,
            error=self.error,
        )
        self._end_turn(token)

    def _end_turn(self, token: CancellationToken) -> None:
        self.is_loading = False
        self._placeholder = None
        self._slot.release(token)
        self._sync_manager()
        self._notify()

    def _abandon_turn(self) -> None:
        """Stop the running turn's updates and freeze its placeholder as it stands."""
        if self._updater is not None:
            self._updater.cancel()
            self._updater = None
        if self._placeholder is not None and not self._placeholder.complete:
            self._placeholder.finalize()
        self._placeholder = None

    def _sync_manager(self) -> None:
        if self.manager is not None:
            self.manager.save_chat(self.messages)

    def _notify(self) -> None:
        if self.on_change is None:
            return
        try:
            self.on_change(self)
        except Exception as e:
            logger.warning("Chat listener failed", stage=Stage.CHAT.value, error=str(e))
