"""
Chat Models

Message and Chat records for the conversation view. An assistant message
starts as an empty placeholder that the streaming turn fills in; once its
stream ends the message is complete and rejects further edits.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from spanlens.core.config.constants import CHAT_NAME_MAX_LENGTH, DEFAULT_CHAT_NAME
from spanlens.core.exceptions import MessageFinalizedError


class Sender(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Message:
    sender: Sender
    text: str = ""
    id: str = field(default_factory=_new_id)
    timestamp: datetime = field(default_factory=_now)
    complete: bool = True

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(sender=Sender.USER, text=text)

    @classmethod
    def placeholder(cls) -> "Message":
        """Empty assistant message awaiting streamed text."""
        return cls(sender=Sender.ASSISTANT, text="", complete=False)

    def set_text(self, text: str) -> None:
        if self.complete:
            raise MessageFinalizedError(
                "Message is complete and cannot be modified", details={"message_id": self.id}
            )
        self.text = text

    def finalize(self, text: str | None = None) -> None:
        """Mark the message complete, optionally setting its final text."""
        if text is not None:
            self.set_text(text)
        self.complete = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "sender": self.sender.value,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class Chat:
    id: str = field(default_factory=_new_id)
    name: str = DEFAULT_CHAT_NAME
    messages: list[Message] = field(default_factory=list)

    @property
    def message_count(self) -> int:
        return len(self.messages)

    @property
    def has_default_name(self) -> bool:
        return self.name == DEFAULT_CHAT_NAME


def generate_chat_name(messages: list[Message]) -> str:
    """Name a chat after its first user message, truncated with '...'."""
    first = next((m for m in messages if m.sender is Sender.USER), None)
    if first is None:
        return DEFAULT_CHAT_NAME
    text = first.text
    if len(text) > CHAT_NAME_MAX_LENGTH:
        return text[:CHAT_NAME_MAX_LENGTH] + "..."
    return text
