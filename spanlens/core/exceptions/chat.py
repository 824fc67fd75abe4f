"""
Chat Exceptions

Errors raised by the conversation model and chat manager.
"""

from spanlens.core.exceptions.base import SpanlensError


class ChatError(SpanlensError):
    """Base exception for chat errors."""
    pass


class ChatNotFoundError(ChatError):
    """Raised when a chat id is not known to the manager."""
    pass


class MessageFinalizedError(ChatError):
    """Raised when mutating a message whose stream already ended."""
    pass
