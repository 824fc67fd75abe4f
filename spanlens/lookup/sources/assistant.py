"""
Assistant Sources

Two ways to stream an explanation for a span:

- RelayAssistantSource: through the relay's ``POST /api/explain`` stream
  (what a client talking to the server does)
- ProviderAssistantSource: straight from a token-stream provider
  (in-process, no HTTP hop)

Both yield text fragments and raise on the terminal failure.
"""

from collections.abc import AsyncIterator

from spanlens.core.exceptions import ProviderAPIError
from spanlens.llm_stream.prompts import explanation_messages
from spanlens.llm_stream.providers.base_provider import BaseProvider
from spanlens.lookup.sources.base import AssistantSource
from spanlens.streaming.cancellation import CancellationToken
from spanlens.streaming.frames import Done, Error, Token
from spanlens.streaming.relay_client import RelayClient


class RelayAssistantSource(AssistantSource):
    """Streams explanations from the relay; an error frame raises ProviderAPIError."""

    def __init__(self, client: RelayClient, token: CancellationToken | None = None):
        self.client = client
        self.token = token

    async def explain(self, span_text: str, context: str) -> AsyncIterator[str]:
        async for event in self.client.stream_explanation(span_text, context, self.token):
            if isinstance(event, Token):
                yield event.text
            elif isinstance(event, Error):
                raise ProviderAPIError(event.message)
            elif isinstance(event, Done):
                return


class ProviderAssistantSource(AssistantSource):
    """Streams explanations from a provider using the explanation prompt."""

    def __init__(self, provider: BaseProvider, model: str | None = None):
        self.provider = provider
        self.model = model

    async def explain(self, span_text: str, context: str) -> AsyncIterator[str]:
        system_prompt, prompt = explanation_messages(span_text, context)
        async for chunk in self.provider.stream(
            query=prompt, model=self.model, system_prompt=system_prompt
        ):
            if chunk.content:
                yield chunk.content
