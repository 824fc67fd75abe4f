"""
Lookup Source Abstractions

The three collaborators the cascading resolver consults, in cascade order.
Dictionary and encyclopedia sources return a structured result or ``None``
for "not found"; the assistant source streams text fragments. Any raised
exception is a failed fetch.

Author: System Architect
Date: 2026-03-02
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

import httpx

from spanlens.core.exceptions import SourceUnavailableError
from spanlens.lookup.models import DictionaryEntry, EncyclopediaSummary


class DictionarySource(ABC):
    """Given a single word, returns its entries or None when unknown."""

    name = "dictionary"

    @abstractmethod
    async def lookup(self, word: str) -> list[DictionaryEntry] | None:
        pass


class EncyclopediaSource(ABC):
    """Given a phrase, returns an article summary or None when unknown."""

    name = "encyclopedia"

    @abstractmethod
    async def summarize(self, phrase: str) -> EncyclopediaSummary | None:
        pass


class AssistantSource(ABC):
    """Given a span and its context, streams an explanation."""

    name = "assistant"

    @abstractmethod
    def explain(self, span_text: str, context: str) -> AsyncIterator[str]:
        pass


class HTTPSource:
    """
    Shared plumbing for sources backed by a JSON-over-HTTP API.

    Owns its ``httpx.AsyncClient`` unless one is injected.
    """

    def __init__(
        self, base_url: str, client: httpx.AsyncClient | None = None, timeout: float = 10.0
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url, timeout=timeout, follow_redirects=True
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(self, path: str) -> object | None:
        """
        GET ``path`` and decode the body.

        Returns None on 404. Transport failures, other error statuses and
        undecodable bodies raise SourceUnavailableError.
        """
        try:
            response = await self._client.get(path)
        except httpx.HTTPError as e:
            raise SourceUnavailableError(
                f"{self.name} request failed: {e}", details={"path": path}
            ) from e

        if response.status_code == 404:
            return None
        if response.is_error:
            raise SourceUnavailableError(
                f"{self.name} returned status {response.status_code}",
                details={"path": path, "status_code": response.status_code},
            )
        try:
            return response.json()
        except ValueError as e:
            raise SourceUnavailableError(
                f"{self.name} returned an invalid body", details={"path": path}
            ) from e
