#!/usr/bin/env python3
"""
OpenAI-Compatible Provider Implementation

Streams chat completions through the official AsyncOpenAI client. The same
class serves OpenAI itself and OpenAI-compatible endpoints such as xAI
(``base_url="https://api.x.ai/v1"``).

Architectural Decision: Use official SDK
- Best compatibility with the chat completions streaming API
- SDK retries disabled; the relay never retries

Author: Senior Solution Architect
Date: 2026-03-02
"""

import time
from collections.abc import AsyncGenerator
from typing import Any

from openai import (
    APIConnectionError,
    APIError,
    APITimeoutError,
    AsyncOpenAI,
    AuthenticationError,
    RateLimitError,
)

from spanlens.core.exceptions import (
    ProviderAPIError,
    ProviderAuthenticationError,
    ProviderNotAvailableError,
    ProviderTimeoutError,
)
from spanlens.core.logging import get_logger
from spanlens.llm_stream.providers.base_provider import BaseProvider, ProviderConfig, StreamChunk

logger = get_logger(__name__)


class OpenAIProvider(BaseProvider):
    """
    OpenAI-compatible token-stream provider.

    Translates SDK exceptions into the internal provider exception hierarchy
    so the relay can frame a single, readable error message.
    """

    def __init__(self, config: ProviderConfig):
        super().__init__(config)

        self.client = AsyncOpenAI(
            api_key=config.api_key,
            base_url=config.base_url or None,
            timeout=config.timeout,
            max_retries=0
        )

    async def _stream_internal(
        self,
        query: str,
        model: str,
        thread_id: str | None = None,
        system_prompt: str | None = None,
        **kwargs
    ) -> AsyncGenerator[StreamChunk, None]:
        """
        Stream a chat completion.

        Raises:
            ProviderAuthenticationError: For invalid API keys
            ProviderAPIError: For API errors, including rate limits
            ProviderTimeoutError: When the request times out
            ProviderNotAvailableError: For connection issues
        """
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": query})

        if self.config.max_tokens and "max_tokens" not in kwargs:
            kwargs["max_tokens"] = self.config.max_tokens

        try:
            stream_response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                stream=True,
                **kwargs
            )

            async for chunk in stream_response:
                if not chunk.choices:
                    continue
                choice = chunk.choices[0]
                content = choice.delta.content if choice.delta else None
                if content:
                    yield StreamChunk(content=content, model=chunk.model)
                if choice.finish_reason:
                    yield StreamChunk(
                        content="", model=chunk.model, finish_reason=choice.finish_reason
                    )

        except AuthenticationError as auth_error:
            logger.error("Provider authentication failed", provider=self.name, thread_id=thread_id)
            raise ProviderAuthenticationError(
                message=f"Invalid {self.name} API key",
                thread_id=thread_id,
                details={"provider": self.name}
            ) from auth_error

        except RateLimitError as rate_error:
            logger.warning("Provider rate limit exceeded", provider=self.name, thread_id=thread_id)
            raise ProviderAPIError(
                message=f"{self.name} rate limit exceeded",
                thread_id=thread_id,
                details={"provider": self.name}
            ) from rate_error

        except APITimeoutError as timeout_error:
            raise ProviderTimeoutError(
                message=f"{self.name} request timed out",
                thread_id=thread_id,
                details={"provider": self.name, "timeout": self.config.timeout}
            ) from timeout_error

        except APIConnectionError as conn_error:
            logger.error("Provider connection failed", provider=self.name, error=str(conn_error))
            raise ProviderNotAvailableError(
                message=f"Could not connect to {self.name}",
                thread_id=thread_id,
                details={"provider": self.name}
            ) from conn_error

        except APIError as api_error:
            logger.error("Provider API error", provider=self.name, error=str(api_error))
            raise ProviderAPIError(
                message=f"{self.name} API returned an error: {api_error.message}",
                thread_id=thread_id,
                details={"provider": self.name, "code": api_error.code}
            ) from api_error

    async def health_check(self) -> dict[str, Any]:
        """Health check via the lightweight model listing endpoint."""
        try:
            start_time = time.perf_counter()
            await self.client.models.list()
            duration_ms = (time.perf_counter() - start_time) * 1000

            return {
                "status": "healthy",
                "latency_ms": round(duration_ms, 2),
                "provider": self.name
            }
        except APIError as e:
            return {
                "status": "unhealthy",
                "error": str(e),
                "provider": self.name
            }
