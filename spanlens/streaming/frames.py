"""
Wire Frames

The relay speaks a minimal text event stream. Each frame is a single
``data:`` line followed by a blank line:

    data: {"token":"<fragment>"}\\n\\n     zero or more, in order
    data: [DONE]\\n\\n                     success terminal
    data: {"error":"<message>"}\\n\\n      failure terminal

The server encodes with the helpers below; the client decodes with
``spanlens.streaming.frame_decoder``. The event classes are shared by both.
"""

from dataclasses import dataclass

import orjson

from spanlens.core.config.constants import (
    SSE_DATA_PREFIX,
    SSE_DONE_SENTINEL,
    SSE_FIELD_ERROR,
    SSE_FIELD_TOKEN,
    SSE_FRAME_TERMINATOR,
)


@dataclass(frozen=True)
class Token:
    """A text fragment, exactly as the upstream produced it."""

    text: str


@dataclass(frozen=True)
class Error:
    """Failure terminal. No event follows it."""

    message: str


@dataclass(frozen=True)
class Done:
    """Success terminal. No event follows it."""


StreamEvent = Token | Error | Done

DONE_FRAME = f"{SSE_DATA_PREFIX}{SSE_DONE_SENTINEL}{SSE_FRAME_TERMINATOR}"


def encode_record(record: dict) -> str:
    """Encode a JSON record as one frame."""
    return f"{SSE_DATA_PREFIX}{orjson.dumps(record).decode('utf-8')}{SSE_FRAME_TERMINATOR}"


def encode_token(token: str) -> str:
    return encode_record({SSE_FIELD_TOKEN: token})


def encode_error(message: str) -> str:
    return encode_record({SSE_FIELD_ERROR: message})


def encode_event(event: StreamEvent) -> str:
    """Encode any event; mainly useful for building test streams."""
    if isinstance(event, Token):
        return encode_token(event.text)
    if isinstance(event, Error):
        return encode_error(event.message)
    return DONE_FRAME


def is_terminal(event: StreamEvent) -> bool:
    return isinstance(event, (Error, Done))
