"""
Chat Module

Conversation model, the chat list manager and the streaming chat session.
"""

from .manager import ChatManager
from .models import Chat, Message, Sender, generate_chat_name
from .session import ChatSession

__all__ = [
    "Chat",
    "Message",
    "Sender",
    "generate_chat_name",
    "ChatManager",
    "ChatSession",
]
