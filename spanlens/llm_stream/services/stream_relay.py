"""
Stream Relay Service - Educational Documentation
================================================

WHAT DOES THE RELAY DO?
-----------------------
The relay receives ONE validated request, opens exactly ONE upstream
streaming call, and turns every upstream token into one frame:

    data: {"token":"<token>"}\\n\\n

It then ends the stream with exactly one terminal frame:

    data: [DONE]\\n\\n              upstream finished normally
    data: {"error":"<msg>"}\\n\\n   upstream failed at any point

Never both. The relay does not retry, merge or split tokens.

WHY AN ASYNC GENERATOR?
-----------------------
FastAPI's StreamingResponse pulls frames from the generator one at a time.
The upstream call is lazy: nothing is opened until the first frame is
requested, so a request that fails validation never reaches the provider.

CLIENT DISCONNECTS:
-------------------
If the client goes away, Starlette stops iterating and closes this
generator. ``aclosing`` then closes the upstream generator so the provider
connection is released promptly. GeneratorExit and CancelledError are not
``Exception`` subclasses, so they never produce an error frame.
"""

from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import aclosing

from spanlens.core.config.constants import Stage
from spanlens.core.exceptions import SpanlensError
from spanlens.core.logging.logger import get_logger, log_stage
from spanlens.llm_stream.prompts import explanation_messages
from spanlens.llm_stream.providers.base_provider import BaseProvider
from spanlens.streaming.frames import DONE_FRAME, encode_error, encode_token

logger = get_logger(__name__)


class StreamRelay:
    """
    Frames a provider's token stream for the text event stream endpoints.

    Args:
        provider: Token-stream provider used for both endpoints
        model: Optional model override (defaults to the provider's default)
    """

    def __init__(self, provider: BaseProvider, model: str | None = None):
        self._provider = provider
        self._model = model
        self._active_streams = 0

    @property
    def provider(self) -> BaseProvider:
        return self._provider

    @property
    def active_streams(self) -> int:
        return self._active_streams

    def relay_chat(self, message: str, thread_id: str | None = None) -> AsyncGenerator[str, None]:
        """Frames for a chat turn: the message is the prompt."""
        upstream = self._provider.stream(query=message, model=self._model, thread_id=thread_id)
        return self.relay(upstream, thread_id=thread_id)

    def relay_explanation(
        self, span_text: str, context: str, thread_id: str | None = None
    ) -> AsyncGenerator[str, None]:
        """Frames for a span explanation."""
        system_prompt, prompt = explanation_messages(span_text, context)
        upstream = self._provider.stream(
            query=prompt, model=self._model, thread_id=thread_id, system_prompt=system_prompt
        )
        return self.relay(upstream, thread_id=thread_id)

    async def relay(
        self, upstream: AsyncIterator, thread_id: str | None = None
    ) -> AsyncGenerator[str, None]:
        """
        Frame an upstream iterator of tokens.

        The upstream may yield plain strings or ``StreamChunk`` objects.
        Empty fragments carry no token and produce no frame.
        """
        self._active_streams += 1
        token_count = 0
        try:
            try:
                async with aclosing(upstream) as tokens:
                    async for item in tokens:
                        text = item if isinstance(item, str) else item.content
                        if not text:
                            continue
                        token_count += 1
                        yield encode_token(text)
            except Exception as e:
                message = self._error_message(e)
                log_stage(
                    logger,
                    Stage.STREAM_TERMINATION,
                    "Upstream failed, framing error",
                    level="warning",
                    thread_id=thread_id,
                    error_type=type(e).__name__,
                    error=message,
                    token_count=token_count,
                )
                yield encode_error(message)
                return

            log_stage(
                logger,
                Stage.STREAM_TERMINATION,
                "Upstream complete",
                thread_id=thread_id,
                token_count=token_count,
            )
            yield DONE_FRAME
        finally:
            self._active_streams -= 1

    @staticmethod
    def _error_message(error: Exception) -> str:
        if isinstance(error, SpanlensError):
            return error.message
        return str(error) or "Unknown error"

    def get_stats(self) -> dict:
        return {"provider": self._provider.name, "active_streams": self._active_streams}
