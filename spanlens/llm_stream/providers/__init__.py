"""
LLM Providers Module

Abstraction layer for token-stream providers.
"""

from .base_provider import (
    BaseProvider,
    ProviderConfig,
    ProviderFactory,
    StreamChunk,
    get_provider_factory,
)
from .fake_provider import FakeProvider
from .openai_provider import OpenAIProvider

__all__ = [
    "BaseProvider",
    "StreamChunk",
    "ProviderConfig",
    "ProviderFactory",
    "get_provider_factory",
    "FakeProvider",
    "OpenAIProvider",
]
