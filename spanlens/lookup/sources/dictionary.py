"""Dictionary source backed by dictionaryapi.dev."""

from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from spanlens.core.config.settings import get_settings
from spanlens.core.exceptions import SourceUnavailableError
from spanlens.core.logging import get_logger
from spanlens.lookup.models import DictionaryEntry
from spanlens.lookup.sources.base import DictionarySource, HTTPSource

logger = get_logger(__name__)


class FreeDictionarySource(HTTPSource, DictionarySource):
    """
    ``GET {base}/api/v2/entries/en/{word}``.

    The API answers 404 for unknown words and a JSON list of entries
    otherwise.
    """

    def __init__(self, base_url: str | None = None, client: httpx.AsyncClient | None = None):
        settings = get_settings()
        super().__init__(
            base_url or settings.lookup.DICTIONARY_BASE_URL,
            client=client,
            timeout=settings.lookup.LOOKUP_TIMEOUT,
        )

    async def lookup(self, word: str) -> list[DictionaryEntry] | None:
        body = await self._get_json(f"/api/v2/entries/en/{quote(word, safe='')}")
        if body is None:
            logger.debug("Dictionary miss", word=word)
            return None
        if not isinstance(body, list):
            raise SourceUnavailableError("dictionary returned an unexpected payload")

        try:
            entries = [DictionaryEntry.model_validate(item) for item in body]
        except PydanticValidationError as e:
            raise SourceUnavailableError("dictionary returned an unexpected payload") from e
        return entries or None
