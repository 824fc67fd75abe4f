#!/usr/bin/env python3
"""
Base Provider Abstract Class

This module defines the abstract base class for all token-stream providers.
Concrete implementations (OpenAI-compatible, fake) inherit from this class.

Architectural Decision: Abstract base class for consistent patterns
- Common interface for all providers
- Structured logging around every stream
- Structured error handling

Author: Senior Solution Architect
Date: 2026-03-02
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator
from contextlib import aclosing
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from spanlens.core.config.constants import Stage
from spanlens.core.logging.logger import get_logger

logger = get_logger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class StreamChunk:
    """
    Represents a single chunk of streamed response.

    Attributes:
        content: Text content of the chunk (may be empty for finish-only chunks)
        finish_reason: Why streaming ended (if applicable)
        model: Model that generated the chunk
        timestamp: When chunk was received
    """
    content: str
    finish_reason: str | None = None
    model: str | None = None
    timestamp: str = field(default_factory=_utc_now)


@dataclass
class ProviderConfig:
    """
    Configuration for an LLM provider.

    Attributes:
        name: Provider name
        api_key: API key for authentication
        base_url: Base URL for API
        timeout: Request timeout in seconds
        default_model: Default model to use
        max_tokens: Output token cap passed to the API
    """
    name: str
    api_key: str
    base_url: str
    timeout: int = 30
    default_model: str = ""
    max_tokens: int | None = None


class BaseProvider(ABC):
    """
    Abstract base class for token-stream providers.

    STAGE-3: LLM provider base class

    Contract: given a prompt, ``stream()`` returns a lazy, finite sequence of
    text fragments that terminates normally or raises a single terminal
    failure. Providers never retry.

    Subclasses must implement:
    - _stream_internal(): Core streaming logic
    - health_check(): Provider health check
    """

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.name = config.name

        logger.info(
            "Provider initialized",
            stage=Stage.PROVIDER_SELECTION.value,
            provider=config.name,
            base_url=config.base_url[:50] + "..." if len(config.base_url) > 50 else config.base_url
        )

    async def stream(
        self,
        query: str,
        model: str | None = None,
        thread_id: str | None = None,
        system_prompt: str | None = None,
        **kwargs
    ) -> AsyncGenerator[StreamChunk, None]:
        """
        Stream a response from the provider.

        Args:
            query: User prompt
            model: Model to use (default from config)
            thread_id: Thread ID for log correlation
            system_prompt: Optional system instruction
            **kwargs: Additional provider-specific arguments

        Yields:
            StreamChunk: Individual response chunks

        Raises:
            ProviderError: On provider errors
        """
        model = model or self.config.default_model

        logger.info(
            "Starting stream",
            stage=Stage.LLM_STREAMING.value,
            provider=self.name,
            model=model,
            query_length=len(query)
        )

        try:
            chunk_count = 0
            total_content_length = 0

            internal = self._stream_internal(
                query, model, thread_id=thread_id, system_prompt=system_prompt, **kwargs
            )
            async with aclosing(internal) as chunks:
                async for chunk in chunks:
                    chunk_count += 1
                    total_content_length += len(chunk.content)
                    yield chunk

            logger.info(
                "Stream completed",
                stage=Stage.LLM_STREAMING.value,
                provider=self.name,
                chunk_count=chunk_count,
                total_length=total_content_length
            )

        except Exception as e:
            logger.error(
                "Stream failed",
                stage=Stage.LLM_STREAMING.value,
                provider=self.name,
                error_type=type(e).__name__,
                error=str(e)
            )
            raise

    @abstractmethod
    async def _stream_internal(
        self,
        query: str,
        model: str,
        thread_id: str | None = None,
        system_prompt: str | None = None,
        **kwargs
    ) -> AsyncGenerator[StreamChunk, None]:
        """
        Provider-specific streaming.

        Yields:
            StreamChunk: Response chunks
        """
        pass

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        """
        Check provider health.

        Returns:
            Dict with health status
        """
        pass


class ProviderFactory:
    """
    Factory for creating token-stream providers.

    STAGE-2.F: Provider factory

    Usage:
        factory = ProviderFactory()
        factory.register("xai", OpenAIProvider, config)

        provider = factory.get("xai")
        async for chunk in provider.stream("Hello"):
            print(chunk.content)
    """

    def __init__(self):
        self._providers: dict[str, BaseProvider] = {}
        self._configs: dict[str, ProviderConfig] = {}
        self._classes: dict[str, type] = {}

    def register(
        self,
        name: str,
        provider_class: type,
        config: ProviderConfig
    ) -> None:
        """Register a provider class under ``name``."""
        self._classes[name] = provider_class
        self._configs[name] = config
        self._providers.pop(name, None)

        logger.info(f"Registered provider: {name}", stage=Stage.PROVIDER_SELECTION.value)

    def get(self, name: str) -> BaseProvider:
        """
        Get or lazily create a provider.

        Raises:
            ValueError: If provider not registered
        """
        if name not in self._classes:
            raise ValueError(f"Provider not registered: {name}")

        if name not in self._providers:
            self._providers[name] = self._classes[name](self._configs[name])

        return self._providers[name]

    def get_available(self) -> list[str]:
        """Registered provider names, in registration order."""
        return list(self._classes.keys())

    def select(self, preferred: str | None = None) -> BaseProvider | None:
        """
        Select the preferred provider, else the first registered one.

        STAGE-2.F.2: Provider selection

        Returns:
            BaseProvider or None if nothing is registered
        """
        if preferred and preferred in self._classes:
            return self.get(preferred)
        if preferred:
            logger.warning(
                "Preferred provider not registered",
                stage=Stage.PROVIDER_SELECTION.value,
                preferred=preferred,
                available=self.get_available(),
            )
        for name in self._classes:
            return self.get(name)
        return None


_provider_factory: ProviderFactory | None = None


def get_provider_factory() -> ProviderFactory:
    """Get global provider factory."""
    global _provider_factory
    if _provider_factory is None:
        _provider_factory = ProviderFactory()
    return _provider_factory
