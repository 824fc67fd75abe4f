"""
Streaming Exceptions

All exceptions related to the text event stream between relay and client.

Author: System Architect
Date: 2026-03-02
"""

from spanlens.core.exceptions.base import SpanlensError


class StreamingError(SpanlensError):
    """Base exception for streaming errors."""
    pass


class RelayHTTPError(StreamingError):
    """
    Raised by the relay client when the relay answers with a non-2xx status.

    The ``status_code`` is kept in ``details`` and the server's ``error``
    message, when present, becomes the exception message.
    """

    @property
    def status_code(self) -> int | None:
        return self.details.get("status_code")
