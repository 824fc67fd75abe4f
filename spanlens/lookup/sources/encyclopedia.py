"""Encyclopedia source backed by the Wikipedia REST summary endpoint."""

from urllib.parse import quote

import httpx

from spanlens.core.config.settings import get_settings
from spanlens.core.exceptions import SourceUnavailableError
from spanlens.core.logging import get_logger
from spanlens.lookup.models import EncyclopediaSummary, Thumbnail
from spanlens.lookup.sources.base import EncyclopediaSource, HTTPSource

logger = get_logger(__name__)


class WikipediaSource(HTTPSource, EncyclopediaSource):
    """``GET {base}/api/rest_v1/page/summary/{phrase}``."""

    def __init__(self, base_url: str | None = None, client: httpx.AsyncClient | None = None):
        settings = get_settings()
        super().__init__(
            base_url or settings.lookup.ENCYCLOPEDIA_BASE_URL,
            client=client,
            timeout=settings.lookup.LOOKUP_TIMEOUT,
        )

    async def summarize(self, phrase: str) -> EncyclopediaSummary | None:
        key = quote(phrase.strip(), safe="")
        body = await self._get_json(f"/api/rest_v1/page/summary/{key}")
        if body is None:
            logger.debug("Encyclopedia miss", phrase=phrase)
            return None
        if not isinstance(body, dict) or not body.get("title"):
            raise SourceUnavailableError("encyclopedia returned an unexpected payload")

        page_url = (body.get("content_urls") or {}).get("desktop", {}).get("page")
        thumbnail = body.get("thumbnail")
        return EncyclopediaSummary(
            title=body["title"],
            extract=body.get("extract") or "",
            page_url=page_url or f"{self.base_url}/wiki/{key}",
            thumbnail=Thumbnail.model_validate(thumbnail)
            if isinstance(thumbnail, dict) and thumbnail.get("source")
            else None,
        )
