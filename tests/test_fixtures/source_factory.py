"""
Lookup Source Test Factory

In-memory dictionary, encyclopedia and assistant sources. Each records the
keys it was asked for and can be held on an ``asyncio.Event`` so tests
control when a fetch resolves.
"""

import asyncio

from spanlens.core.exceptions import SourceUnavailableError
from spanlens.lookup.models import DictionaryEntry, EncyclopediaSummary, Meaning
from spanlens.lookup.sources.base import AssistantSource, DictionarySource, EncyclopediaSource

_MISSING = object()


def dictionary_entry(word: str = "recursion") -> DictionaryEntry:
    return DictionaryEntry(
        word=word,
        phonetic="/rɪˈkɜːʃən/",
        meanings=[
            Meaning(
                part_of_speech="noun",
                definitions=[{"definition": "The repeated application of a procedure."}],
            )
        ],
    )


def encyclopedia_summary(title: str = "Recursion") -> EncyclopediaSummary:
    return EncyclopediaSummary(
        title=title,
        extract=f"{title} occurs when the definition of a concept depends on itself.",
        page_url=f"https://en.wikipedia.org/wiki/{title}",
    )


class _Gated:
    def __init__(self, result=_MISSING, gate: asyncio.Event | None = None):
        self.result = result
        self.gate = gate
        self.keys: list[str] = []

    async def _resolve(self, key: str, default):
        self.keys.append(key)
        if self.gate is not None:
            await self.gate.wait()
        result = default if self.result is _MISSING else self.result
        if isinstance(result, BaseException):
            raise result
        return result


class StubDictionary(_Gated, DictionarySource):
    """Returns one entry by default; ``result=None`` means not found."""

    async def lookup(self, word):
        return await self._resolve(word, [dictionary_entry(word)])


class StubEncyclopedia(_Gated, EncyclopediaSource):
    """Returns a summary by default; ``result=None`` means not found."""

    async def summarize(self, phrase):
        return await self._resolve(phrase, encyclopedia_summary(phrase))


class StubAssistant(AssistantSource):
    """Streams ``tokens``, then raises ``error`` if given."""

    def __init__(
        self,
        tokens: list[str] | None = None,
        error: Exception | None = None,
        gate: asyncio.Event | None = None,
    ):
        self.tokens = tokens if tokens is not None else ["A ", "short ", "explanation."]
        self.error = error
        self.gate = gate
        self.requests: list[tuple[str, str]] = []

    async def explain(self, span_text, context):
        self.requests.append((span_text, context))
        if self.gate is not None:
            await self.gate.wait()
        for token in self.tokens:
            await asyncio.sleep(0)
            yield token
        if self.error is not None:
            raise self.error


class SourceTestFactory:
    """Factory for common source outcomes."""

    @staticmethod
    def dictionary(result=_MISSING, gate=None) -> StubDictionary:
        return StubDictionary(result, gate)

    @staticmethod
    def dictionary_not_found() -> StubDictionary:
        return StubDictionary(None)

    @staticmethod
    def dictionary_down() -> StubDictionary:
        return StubDictionary(SourceUnavailableError("dictionary returned status 503"))

    @staticmethod
    def encyclopedia(result=_MISSING, gate=None) -> StubEncyclopedia:
        return StubEncyclopedia(result, gate)

    @staticmethod
    def encyclopedia_not_found() -> StubEncyclopedia:
        return StubEncyclopedia(None)

    @staticmethod
    def assistant(tokens=None, error=None, gate=None) -> StubAssistant:
        return StubAssistant(tokens, error, gate)
