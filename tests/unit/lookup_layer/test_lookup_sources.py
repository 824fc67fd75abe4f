"""
Unit Tests for Lookup Sources

HTTP-backed sources run against ``httpx.MockTransport``; assistant sources
run against a mocked relay stream and a scripted provider.
"""

import httpx
import pytest

from spanlens.core.config.constants import EXPLAIN_SYSTEM_PROMPT
from spanlens.core.exceptions import ProviderAPIError, SourceUnavailableError
from spanlens.lookup.sources import (
    FreeDictionarySource,
    ProviderAssistantSource,
    RelayAssistantSource,
    WikipediaSource,
)
from spanlens.streaming.frames import DONE_FRAME, encode_error, encode_token
from spanlens.streaming.relay_client import RelayClient
from tests.test_fixtures.provider_factory import ProviderTestFactory
from tests.test_fixtures.transport_factory import (
    failing_transport,
    json_transport,
    stream_transport,
)

DICTIONARY_URL = "https://api.dictionaryapi.dev"
WIKIPEDIA_URL = "https://en.wikipedia.org"

RECURSION_ENTRY = {
    "word": "recursion",
    "phonetic": "/rɪˈkɜːʃən/",
    "meanings": [
        {
            "partOfSpeech": "noun",
            "definitions": [
                {"definition": "The act of recurring.", "synonyms": []},
                {"definition": "A procedure that calls itself.", "example": "See recursion."},
            ],
        }
    ],
    "sourceUrls": ["https://en.wiktionary.org/wiki/recursion"],
}

RECURSION_SUMMARY = {
    "type": "standard",
    "title": "Recursion",
    "extract": "Recursion occurs when the definition of a concept depends on itself.",
    "content_urls": {"desktop": {"page": "https://en.wikipedia.org/wiki/Recursion"}},
    "thumbnail": {"source": "https://upload.wikimedia.org/r.png", "width": 320, "height": 240},
}


def _dictionary(transport) -> FreeDictionarySource:
    return FreeDictionarySource(
        client=httpx.AsyncClient(transport=transport, base_url=DICTIONARY_URL)
    )


def _wikipedia(transport) -> WikipediaSource:
    return WikipediaSource(client=httpx.AsyncClient(transport=transport, base_url=WIKIPEDIA_URL))


@pytest.mark.unit
class TestFreeDictionarySource:
    async def test_entries_parsed(self):
        transport, recorder = json_transport(
            {"/api/v2/entries/en/recursion": (200, [RECURSION_ENTRY])}
        )

        entries = await _dictionary(transport).lookup("recursion")

        assert recorder.requests[0].method == "GET"
        assert entries[0].word == "recursion"
        meaning = entries[0].meanings[0]
        assert meaning.part_of_speech == "noun"
        assert meaning.definitions[1].example == "See recursion."

    async def test_unknown_word_is_none(self):
        transport, _ = json_transport(
            {"/api/v2/entries/en/qwzx": (404, {"title": "No Definitions Found"})}
        )

        assert await _dictionary(transport).lookup("qwzx") is None

    async def test_empty_list_is_none(self):
        transport, _ = json_transport({"/api/v2/entries/en/recursion": (200, [])})

        assert await _dictionary(transport).lookup("recursion") is None

    async def test_server_error_raises(self):
        transport, _ = json_transport({"/api/v2/entries/en/recursion": (503, {})})

        with pytest.raises(SourceUnavailableError, match="status 503"):
            await _dictionary(transport).lookup("recursion")

    async def test_unexpected_payload_raises(self):
        transport, _ = json_transport({"/api/v2/entries/en/recursion": (200, {"word": 1})})

        with pytest.raises(SourceUnavailableError):
            await _dictionary(transport).lookup("recursion")

    async def test_transport_failure_raises(self):
        with pytest.raises(SourceUnavailableError, match="request failed"):
            await _dictionary(failing_transport()).lookup("recursion")

    def test_default_base_url_from_settings(self):
        source = FreeDictionarySource()
        assert source.base_url == DICTIONARY_URL


@pytest.mark.unit
class TestWikipediaSource:
    async def test_summary_parsed(self):
        transport, _ = json_transport(
            {"/api/rest_v1/page/summary/Recursion": (200, RECURSION_SUMMARY)}
        )

        summary = await _wikipedia(transport).summarize("Recursion")

        assert summary.title == "Recursion"
        assert summary.extract.startswith("Recursion occurs")
        assert summary.page_url == "https://en.wikipedia.org/wiki/Recursion"
        assert summary.thumbnail.width == 320

    async def test_phrase_is_percent_encoded(self):
        transport, recorder = json_transport({})

        await _wikipedia(transport).summarize(" tail call ")

        assert recorder.requests[0].url.raw_path == b"/api/rest_v1/page/summary/tail%20call"

    async def test_missing_article_is_none(self):
        transport, _ = json_transport({})

        assert await _wikipedia(transport).summarize("Qwzx") is None

    async def test_page_url_fallback_and_no_thumbnail(self):
        body = {"title": "Recursion", "extract": "...", "thumbnail": {"width": 1}}
        transport, _ = json_transport({"/api/rest_v1/page/summary/Recursion": (200, body)})

        summary = await _wikipedia(transport).summarize("Recursion")

        assert summary.page_url == "https://en.wikipedia.org/wiki/Recursion"
        assert summary.thumbnail is None

    async def test_untitled_payload_raises(self):
        transport, _ = json_transport({"/api/rest_v1/page/summary/Recursion": (200, {})})

        with pytest.raises(SourceUnavailableError):
            await _wikipedia(transport).summarize("Recursion")


@pytest.mark.unit
class TestAssistantSources:
    async def test_relay_source_yields_tokens(self):
        transport, recorder = stream_transport(
            [encode_token("Self "), encode_token("reference."), DONE_FRAME]
        )
        client = RelayClient(
            api_base_path="/api",
            client=httpx.AsyncClient(transport=transport, base_url="http://relay"),
        )

        fragments = [f async for f in RelayAssistantSource(client).explain("recursion", "ctx")]

        assert fragments == ["Self ", "reference."]
        assert recorder.json_bodies == [{"spanText": "recursion", "context": "ctx"}]

    async def test_relay_source_raises_on_error_frame(self):
        transport, _ = stream_transport([encode_token("Self "), encode_error("upstream failed")])
        client = RelayClient(
            api_base_path="/api",
            client=httpx.AsyncClient(transport=transport, base_url="http://relay"),
        )

        fragments = []
        with pytest.raises(ProviderAPIError, match="upstream failed"):
            async for fragment in RelayAssistantSource(client).explain("recursion", "ctx"):
                fragments.append(fragment)

        assert fragments == ["Self "]

    async def test_provider_source_uses_explanation_prompt(self):
        provider = ProviderTestFactory.success_provider(tokens=["Self ", "", "reference."])

        fragments = [
            f async for f in ProviderAssistantSource(provider).explain("recursion", "ctx")
        ]

        assert fragments == ["Self ", "reference."]
        assert provider.calls[0]["system_prompt"] == EXPLAIN_SYSTEM_PROMPT
        assert provider.calls[0]["query"].startswith('Explain this term: "recursion"')
