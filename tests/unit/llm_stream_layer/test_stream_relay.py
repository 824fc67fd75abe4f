"""
Unit Tests for the Stream Relay

Tests framing of upstream token streams: one frame per token, exactly one
terminal frame, and upstream cleanup.
"""

import pytest

from spanlens.core.exceptions import ProviderAPIError
from spanlens.llm_stream.services.stream_relay import StreamRelay
from spanlens.streaming.frame_decoder import FrameDecoder
from spanlens.streaming.frames import DONE_FRAME, Done, Error, Token
from tests.test_fixtures.provider_factory import ProviderTestFactory


async def _collect(frames):
    return [frame async for frame in frames]


def _decode(frames):
    decoder = FrameDecoder()
    events = []
    for frame in frames:
        events.extend(decoder.feed(frame))
    events.extend(decoder.close())
    return events


@pytest.mark.unit
class TestRelayFraming:
    async def test_one_frame_per_token_then_done(self, stream_relay):
        frames = await _collect(stream_relay.relay_chat("hi"))

        assert frames == [
            'data: {"token":"Hello"}\n\n',
            'data: {"token":" world"}\n\n',
            'data: {"token":"!"}\n\n',
            DONE_FRAME,
        ]

    async def test_tokens_are_not_merged_or_split(self):
        tokens = ["a", "b c", "\n", "ünïcode", '"quoted"']
        relay = StreamRelay(ProviderTestFactory.success_provider(tokens=tokens))

        events = _decode(await _collect(relay.relay_chat("hi")))

        assert events == [Token(t) for t in tokens] + [Done()]

    async def test_failure_yields_single_error_frame(self, failing_provider):
        relay = StreamRelay(failing_provider)

        frames = await _collect(relay.relay_chat("hi"))

        assert frames == ['data: {"token":"Partial"}\n\n', 'data: {"error":"upstream exploded"}\n\n']
        assert DONE_FRAME not in frames

    async def test_failure_before_first_token(self):
        relay = StreamRelay(ProviderTestFactory.failing_provider(error=RuntimeError("boom")))

        events = _decode(await _collect(relay.relay_chat("hi")))

        assert events == [Error("boom")]

    async def test_empty_error_message_has_fallback(self):
        relay = StreamRelay(ProviderTestFactory.failing_provider(error=RuntimeError()))

        events = _decode(await _collect(relay.relay_chat("hi")))

        assert events == [Error("Unknown error")]

    async def test_empty_chunks_produce_no_frames(self):
        relay = StreamRelay(ProviderTestFactory.empty_response_provider())

        assert await _collect(relay.relay_chat("hi")) == [DONE_FRAME]

    async def test_relay_accepts_plain_strings(self, stream_relay):
        async def upstream():
            yield "x"
            yield ""
            yield "y"

        events = _decode(await _collect(stream_relay.relay(upstream())))

        assert events == [Token("x"), Token("y"), Done()]


@pytest.mark.unit
class TestRelayExplanation:
    async def test_explanation_prompt_reaches_provider(self, scripted_provider, stream_relay):
        await _collect(stream_relay.relay_explanation("recursion", "a function calling itself"))

        call = scripted_provider.calls[0]
        assert call["query"] == (
            'Explain this term: "recursion"\n\nContext: a function calling itself'
        )
        assert call["system_prompt"]


@pytest.mark.unit
class TestRelayLifecycle:
    async def test_upstream_not_opened_until_iterated(self, scripted_provider, stream_relay):
        frames = stream_relay.relay_chat("hi")

        assert scripted_provider.calls == []
        await frames.aclose()
        assert scripted_provider.calls == []

    async def test_consumer_close_closes_upstream(self):
        provider = ProviderTestFactory.success_provider(tokens=["a", "b", "c"])
        relay = StreamRelay(provider)

        frames = relay.relay_chat("hi")
        first = await frames.__anext__()
        await frames.aclose()

        assert first == 'data: {"token":"a"}\n\n'
        assert provider.closed
        assert relay.active_streams == 0

    async def test_active_stream_count(self, stream_relay):
        frames = stream_relay.relay_chat("hi")
        await frames.__anext__()

        assert stream_relay.active_streams == 1
        await _collect(frames)
        assert stream_relay.active_streams == 0
        assert stream_relay.get_stats() == {"provider": "test", "active_streams": 0}

    async def test_provider_error_message_used(self):
        relay = StreamRelay(
            ProviderTestFactory.failing_provider(error=ProviderAPIError("xai rate limit exceeded"))
        )

        frames = await _collect(relay.relay_chat("hi"))

        assert frames == ['data: {"error":"xai rate limit exceeded"}\n\n']
