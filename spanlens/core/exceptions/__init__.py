"""
Exception Module

Structured exception hierarchy, organized by theme.

Module Structure:
-----------------
- **base.py**: SpanlensError base class + ConfigurationError
- **provider.py**: LLM provider exceptions
- **streaming.py**: Event stream / relay client exceptions
- **validation.py**: Request validation exceptions
- **lookup.py**: Dictionary / encyclopedia / assistant source exceptions
- **chat.py**: Conversation model exceptions

Usage:
------
```python
from spanlens.core.exceptions import InvalidInputError, ProviderAPIError
```
"""

from spanlens.core.exceptions.base import ConfigurationError, SpanlensError
from spanlens.core.exceptions.chat import ChatError, ChatNotFoundError, MessageFinalizedError
from spanlens.core.exceptions.lookup import (
    SourceLookupError,
    SourceNotFoundError,
    SourceUnavailableError,
)
from spanlens.core.exceptions.provider import (
    ProviderAPIError,
    ProviderAuthenticationError,
    ProviderError,
    ProviderNotAvailableError,
    ProviderTimeoutError,
)
from spanlens.core.exceptions.streaming import RelayHTTPError, StreamingError
from spanlens.core.exceptions.validation import InvalidInputError, ValidationError

__all__ = [
    "SpanlensError",
    "ConfigurationError",
    "ProviderError",
    "ProviderNotAvailableError",
    "ProviderAuthenticationError",
    "ProviderTimeoutError",
    "ProviderAPIError",
    "StreamingError",
    "RelayHTTPError",
    "ValidationError",
    "InvalidInputError",
    "SourceLookupError",
    "SourceNotFoundError",
    "SourceUnavailableError",
    "ChatError",
    "ChatNotFoundError",
    "MessageFinalizedError",
]
