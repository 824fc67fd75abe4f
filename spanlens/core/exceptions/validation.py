"""
Validation Exceptions

All exceptions related to request validation

Author: System Architect
Date: 2026-03-02
"""

from spanlens.core.exceptions.base import SpanlensError


class ValidationError(SpanlensError):
    """
    Raised when request validation fails.

    Surfaced by the API as a non-stream 400 response; never opens an
    upstream connection.
    """
    pass


class InvalidInputError(ValidationError):
    """
    Raised when input validation fails.

    Common causes:
    - Missing required fields
    - Empty message or span
    - Span longer than the configured bound
    - Body that is not a JSON object
    """
    pass
