"""
End-to-End Tests

The client-side components talk to the real FastAPI application through
``httpx.ASGITransport``; only the upstream provider is scripted.
"""

import httpx
import pytest

from spanlens.chat.session import ChatSession
from spanlens.core.config.constants import LookupSource
from spanlens.core.exceptions import RelayHTTPError
from spanlens.lookup.resolver import CascadingResolver
from spanlens.lookup.sources import RelayAssistantSource
from spanlens.streaming.frames import Done, Error, Token
from spanlens.streaming.relay_client import RelayClient
from tests.test_fixtures.source_factory import SourceTestFactory


@pytest.fixture
async def relay_client(relay_app):
    http_client = httpx.AsyncClient(
        transport=httpx.ASGITransport(app=relay_app), base_url="http://relay"
    )
    yield RelayClient(api_base_path="/api", client=http_client)
    await http_client.aclose()


@pytest.mark.integration
class TestRelayRoundTrip:
    async def test_chat_events(self, relay_client):
        events = [event async for event in relay_client.stream_chat("hi")]

        assert events == [Token("Hello"), Token(" world"), Token("!"), Done()]

    async def test_upstream_failure_surfaces_as_error_event(self, relay_app, relay_client, failing_provider):
        from spanlens.llm_stream.services.stream_relay import StreamRelay

        relay_app.state.stream_relay = StreamRelay(failing_provider)

        events = [event async for event in relay_client.stream_chat("hi")]

        assert events == [Token("Partial"), Error("upstream exploded")]

    async def test_validation_failure_raises_http_error(self, relay_client, scripted_provider):
        with pytest.raises(RelayHTTPError) as exc_info:
            async for _ in relay_client.stream_explanation("   ", "ctx"):
                pass

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "spanText and context required"
        assert scripted_provider.calls == []


@pytest.mark.integration
class TestChatSessionEndToEnd:
    async def test_turn_completes(self, relay_client):
        session = ChatSession(relay_client, update_interval=0.1)

        reply = await session.send_message("hi")

        assert reply.text == "Hello world!"
        assert not session.is_loading


@pytest.mark.integration
class TestLookupEndToEnd:
    async def test_cascade_reaches_relay_assistant(self, relay_client, scripted_provider):
        resolver = CascadingResolver(
            SourceTestFactory.dictionary_not_found(),
            SourceTestFactory.encyclopedia_not_found(),
            RelayAssistantSource(relay_client),
        )

        resolver.show("recursion", "a function calling itself")
        await resolver.wait_idle()

        assert resolver.state.active_tab is LookupSource.ASSISTANT
        assert resolver.state.source(LookupSource.ASSISTANT).data == "Hello world!"
        assert scripted_provider.calls[0]["query"].startswith('Explain this term: "recursion"')
