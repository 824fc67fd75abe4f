import asyncio
import random
import re
from collections.abc import AsyncGenerator
from typing import Any

from spanlens.core.exceptions import ProviderAPIError
from spanlens.core.logging import get_logger
from spanlens.llm_stream.providers.base_provider import BaseProvider, ProviderConfig, StreamChunk

logger = get_logger(__name__)


class FakeProvider(BaseProvider):
    """
    A fake token-stream provider for local runs and tests.
    Streams a canned answer word by word with configurable latency.
    """

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.min_latency = 0.02
        self.max_latency = 0.06
        self.failure_rate = 0.0
        self.response_text: str | None = None

    async def _stream_internal(
        self,
        query: str,
        model: str,
        thread_id: str | None = None,
        system_prompt: str | None = None,
        **kwargs
    ) -> AsyncGenerator[StreamChunk, None]:
        chunks = self._chunk_text(self.response_text or self._generate_response_content(query))

        for i, chunk_text in enumerate(chunks):
            if self.max_latency > 0:
                await asyncio.sleep(random.uniform(self.min_latency, self.max_latency))

            if self.failure_rate > 0 and random.random() < self.failure_rate:
                raise ProviderAPIError("Simulated provider failure", thread_id=thread_id)

            finish_reason = "stop" if i == len(chunks) - 1 else None
            yield StreamChunk(content=chunk_text, finish_reason=finish_reason, model=model)

    async def health_check(self) -> dict[str, Any]:
        return {
            "status": "healthy",
            "latency_ms": 0,
            "provider": self.name
        }

    def _generate_response_content(self, query: str) -> str:
        """Generates a dummy answer that echoes the start of the prompt."""
        subject = query.strip().splitlines()[0][:60] if query.strip() else "your message"
        return (
            f"Here is a short answer about {subject}. "
            "This response comes from the fake provider, which streams text "
            "word by word so the relay and the client can be exercised without "
            "an API key."
        )

    @staticmethod
    def _chunk_text(text: str) -> list[str]:
        """Split into words keeping their trailing whitespace."""
        return re.findall(r"\S+\s*", text)
