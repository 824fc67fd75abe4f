"""
LLM Provider Exceptions

All exceptions related to token-stream provider operations (xAI, OpenAI, fake).

Author: System Architect
Date: 2026-03-02
"""

from spanlens.core.exceptions.base import SpanlensError


class ProviderError(SpanlensError):
    """Base exception for LLM provider errors."""
    pass


class ProviderNotAvailableError(ProviderError):
    """
    Raised when the LLM provider is not available.

    Common causes:
    - Provider API is down
    - Network connectivity issues
    - No provider registered
    """
    pass


class ProviderAuthenticationError(ProviderError):
    """
    Raised when LLM provider authentication fails.

    Common causes:
    - Invalid or expired API key
    - Insufficient permissions
    """
    pass


class ProviderTimeoutError(ProviderError):
    """Raised when an LLM provider request times out."""
    pass


class ProviderAPIError(ProviderError):
    """
    Raised when the LLM provider API returns an error.

    Common causes:
    - Invalid request format
    - Unsupported model
    - Rate limiting
    """
    pass
