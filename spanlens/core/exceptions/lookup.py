"""
Lookup Source Exceptions

Exceptions raised by the dictionary, encyclopedia and assistant sources.
The cascading resolver turns them into per-source error states.
"""

from spanlens.core.exceptions.base import SpanlensError


class SourceLookupError(SpanlensError):
    """Base exception for lookup source failures."""
    pass


class SourceNotFoundError(SourceLookupError):
    """Raised when a source has no entry for the requested key."""
    pass


class SourceUnavailableError(SourceLookupError):
    """Raised when a source request fails (network error, 5xx, bad payload)."""
    pass
