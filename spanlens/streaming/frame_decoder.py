"""
Frame Decoder - Educational Documentation
=========================================

WHY A DECODER?
--------------
Network reads do not respect frame boundaries. A single read can carry half
a frame, three frames, or the tail of one frame and the head of the next:

    read 1: 'data: {"to'
    read 2: 'ken":"Hello"}\\n\\ndata: ['
    read 3: 'DONE]\\n\\n'

The decoder keeps ONE carry-over buffer. Each fragment is appended to it,
the buffer is split on newlines, and every segment except the last is a
complete line. The last segment (possibly empty, possibly a partial frame)
becomes the new carry-over. Only complete lines are ever parsed, so the
decoded event sequence is independent of how the bytes were fragmented.

LINE HANDLING:
--------------
- Lines that do not start with ``data: `` are ignored (blank separators,
  comments, other SSE fields).
- ``[DONE]`` yields ``Done`` and ends the sequence.
- A JSON record with ``token`` yields ``Token``.
- A JSON record with ``error`` yields ``Error`` and ends the sequence.
- A complete line whose payload does not parse is discarded silently; an
  incomplete frame is never parsed because it is still in the carry-over.
"""

import codecs
from collections.abc import AsyncIterable, AsyncIterator

import orjson

from spanlens.core.config.constants import (
    SSE_DATA_PREFIX,
    SSE_DONE_SENTINEL,
    SSE_FIELD_ERROR,
    SSE_FIELD_TOKEN,
    Stage,
)
from spanlens.core.logging import get_logger
from spanlens.streaming.frames import Done, Error, StreamEvent, Token

logger = get_logger(__name__)


class FrameDecoder:
    """
    Incremental decoder from raw fragments to stream events.

    Usage:
        decoder = FrameDecoder()
        for fragment in fragments:
            for event in decoder.feed(fragment):
                handle(event)
        for event in decoder.close():
            handle(event)
    """

    def __init__(self):
        self._buffer = ""
        self._utf8 = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._finished = False
        self.discarded = 0

    @property
    def finished(self) -> bool:
        """True once a terminal event has been produced."""
        return self._finished

    def feed(self, fragment: str | bytes) -> list[StreamEvent]:
        """Append a fragment and return the events it completed."""
        if self._finished:
            return []

        if isinstance(fragment, (bytes, bytearray)):
            fragment = self._utf8.decode(fragment)

        self._buffer += fragment
        lines = self._buffer.split("\n")
        self._buffer = lines.pop()

        return self._process_lines(lines)

    def close(self) -> list[StreamEvent]:
        """
        Signal end of input.

        Any bytes still held by the UTF-8 decoder and the carry-over segment
        are treated as a final complete line.
        """
        if self._finished:
            return []

        tail = self._buffer + self._utf8.decode(b"", final=True)
        self._buffer = ""
        if not tail:
            return []
        return self._process_lines([tail])

    def _process_lines(self, lines: list[str]) -> list[StreamEvent]:
        events: list[StreamEvent] = []
        for line in lines:
            event = self._parse_line(line)
            if event is None:
                continue
            events.append(event)
            if isinstance(event, (Done, Error)):
                self._finished = True
                self._buffer = ""
                break
        return events

    def _parse_line(self, line: str) -> StreamEvent | None:
        if line.endswith("\r"):
            line = line[:-1]
        if not line.startswith(SSE_DATA_PREFIX):
            return None

        payload = line[len(SSE_DATA_PREFIX):]
        if payload == SSE_DONE_SENTINEL:
            return Done()

        try:
            record = orjson.loads(payload)
        except orjson.JSONDecodeError:
            return self._discard(payload)

        if not isinstance(record, dict):
            return self._discard(payload)

        token = record.get(SSE_FIELD_TOKEN)
        if isinstance(token, str):
            return Token(token)

        if SSE_FIELD_ERROR in record:
            error = record[SSE_FIELD_ERROR]
            return Error(error if isinstance(error, str) else str(error))

        return self._discard(payload)

    def _discard(self, payload: str) -> None:
        self.discarded += 1
        logger.debug(
            "Discarded malformed frame",
            stage=Stage.FRAME_DECODING.value,
            payload_length=len(payload),
        )
        return None


async def decode_frames(fragments: AsyncIterable[str | bytes]) -> AsyncIterator[StreamEvent]:
    """
    Lazily decode an async stream of fragments.

    The sequence ends after the first terminal event or when the input is
    exhausted, whichever comes first. Remaining input is not consumed.
    """
    decoder = FrameDecoder()
    async for fragment in fragments:
        for event in decoder.feed(fragment):
            yield event
        if decoder.finished:
            return

    for event in decoder.close():
        yield event
