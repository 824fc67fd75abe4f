"""
Relay Client

httpx-based client for the relay's streaming endpoints. Requests are POSTed
as JSON; the response body is fed through the frame decoder and surfaced as
``Token`` / ``Error`` / ``Done`` events.

Each stream is bound to a cancellation token. Cancelling the token stops
the iteration at the next fragment boundary and the ``async with`` block
closes the underlying connection. Callers that need prompt abort run the
consumer in a task bound to the token (``CancellationToken.bind_task``).
"""

from collections.abc import AsyncIterator
from typing import Any

import httpx

from spanlens.core.config.constants import ROUTE_CHAT, ROUTE_EXPLAIN, SSE_FIELD_ERROR, Stage
from spanlens.core.config.settings import get_settings
from spanlens.core.exceptions import RelayHTTPError
from spanlens.core.logging import get_logger, log_stage
from spanlens.streaming.cancellation import CancellationToken
from spanlens.streaming.frame_decoder import FrameDecoder
from spanlens.streaming.frames import StreamEvent

logger = get_logger(__name__)


class RelayClient:
    """
    Client for ``POST {base}/api/chat`` and ``POST {base}/api/explain``.

    Args:
        base_url: Relay root URL (defaults to RELAY_BASE_URL)
        api_base_path: Route prefix (defaults to API_BASE_PATH)
        client: Optional preconfigured ``httpx.AsyncClient`` (tests inject one
            with an ASGI or mock transport)
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_base_path: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = 60.0,
    ):
        settings = get_settings()
        self.base_url = base_url or settings.client.RELAY_BASE_URL
        self.api_base_path = (
            api_base_path if api_base_path is not None else settings.app.API_BASE_PATH
        )
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "RelayClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def stream(
        self, path: str, payload: dict[str, Any], token: CancellationToken | None = None
    ) -> AsyncIterator[StreamEvent]:
        """
        POST ``payload`` to ``path`` and yield decoded events.

        Raises:
            RelayHTTPError: The relay answered with a non-2xx status
            httpx.HTTPError: Transport failure
        """
        url = f"{self.api_base_path}{path}"
        decoder = FrameDecoder()

        async with self._client.stream("POST", url, json=payload) as response:
            if response.status_code >= 400:
                await response.aread()
                raise self._http_error(response)

            async for fragment in response.aiter_bytes():
                if token is not None and token.cancelled:
                    log_stage(logger, Stage.LIFECYCLE, "Relay stream abandoned", level="debug", path=path)
                    return
                for event in decoder.feed(fragment):
                    yield event
                if decoder.finished:
                    return

            for event in decoder.close():
                yield event

    def stream_chat(
        self, message: str, token: CancellationToken | None = None
    ) -> AsyncIterator[StreamEvent]:
        return self.stream(ROUTE_CHAT, {"message": message}, token)

    def stream_explanation(
        self, span_text: str, context: str, token: CancellationToken | None = None
    ) -> AsyncIterator[StreamEvent]:
        return self.stream(ROUTE_EXPLAIN, {"spanText": span_text, "context": context}, token)

    @staticmethod
    def _http_error(response: httpx.Response) -> RelayHTTPError:
        message = f"HTTP error! status: {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get(SSE_FIELD_ERROR), str):
            message = body[SSE_FIELD_ERROR]
        return RelayHTTPError(message, details={"status_code": response.status_code})
