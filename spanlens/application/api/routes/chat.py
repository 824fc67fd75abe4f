"""
Streaming Routes - Educational Documentation
============================================

ENDPOINTS:
----------
    POST /api/chat      {"message"}              -> text/event-stream
    POST /api/explain   {"spanText", "context"}  -> text/event-stream

Both routes are POST only. Starlette's router answers any other method with
405 before the handler runs, so the body is never read for them (the
application turns that into ``{"error": "Method not allowed"}``).

REQUEST FLOW:
-------------
1. Read the raw body and decode it with orjson. A body that is not JSON is
   treated like an empty one.
2. Validate with the request model. Failure raises InvalidInputError, which
   the application renders as 400 ``{"error": "<message>"}``. No upstream
   call has been made at this point.
3. Hand the relay's frame generator to a StreamingResponse. The upstream
   call opens when Starlette pulls the first frame.

RESPONSE HEADERS:
-----------------
- Cache-Control: no-cache     streams are per request
- Connection: keep-alive      keep proxies from closing the stream early
- X-Accel-Buffering: no       NGINX must not buffer frames
- X-Thread-ID                 correlation id for logs and support
"""

from typing import Any

import orjson
from fastapi import APIRouter, Request, status
from fastapi.responses import StreamingResponse

from spanlens.application.api.dependencies import SettingsDep, StreamRelayDep, ThreadIdDep
from spanlens.application.api.models.streaming import ChatRequestModel, ExplainRequestModel
from spanlens.core.config.constants import (
    HEADER_THREAD_ID,
    ROUTE_CHAT,
    ROUTE_EXPLAIN,
    SSE_MEDIA_TYPE,
    Stage,
)
from spanlens.core.logging import get_logger, log_stage

router = APIRouter(tags=["Streaming"])
logger = get_logger(__name__)

_STREAM_RESPONSES = {
    200: {"description": "Token stream", "content": {SSE_MEDIA_TYPE: {}}},
    400: {"description": "Missing or invalid field"},
    405: {"description": "Method not allowed"},
}


async def read_json_body(request: Request) -> Any:
    """Decoded JSON body, or None when the body is empty or not JSON."""
    raw = await request.body()
    if not raw:
        return None
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        logger.debug("Request body is not JSON", path=request.url.path, size=len(raw))
        return None


def event_stream(frames, thread_id: str) -> StreamingResponse:
    return StreamingResponse(
        frames,
        media_type=SSE_MEDIA_TYPE,
        headers={
            HEADER_THREAD_ID: thread_id,
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post(ROUTE_CHAT, status_code=status.HTTP_200_OK, responses=_STREAM_RESPONSES)
async def chat(request: Request, relay: StreamRelayDep, thread_id: ThreadIdDep):
    """Stream the assistant's reply to one chat message."""
    body = ChatRequestModel.from_payload(await read_json_body(request))

    log_stage(
        logger,
        Stage.REQUEST_VALIDATION,
        "chat_request_received",
        thread_id=thread_id,
        message_length=len(body.message),
    )
    return event_stream(relay.relay_chat(body.message, thread_id=thread_id), thread_id)


@router.post(ROUTE_EXPLAIN, status_code=status.HTTP_200_OK, responses=_STREAM_RESPONSES)
async def explain(
    request: Request, relay: StreamRelayDep, settings: SettingsDep, thread_id: ThreadIdDep
):
    """Stream an explanation of a selected span in its context."""
    body = ExplainRequestModel.from_payload(
        await read_json_body(request), max_span_length=settings.lookup.MAX_SPAN_LENGTH
    )

    log_stage(
        logger,
        Stage.REQUEST_VALIDATION,
        "explain_request_received",
        thread_id=thread_id,
        span_length=len(body.span_text),
        context_length=len(body.context),
    )
    return event_stream(
        relay.relay_explanation(body.span_text, body.context, thread_id=thread_id), thread_id
    )
