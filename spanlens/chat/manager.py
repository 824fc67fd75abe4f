"""
Chat Manager

In-memory list of conversations, newest first, with one active chat.
A chat is created on the first message when none is active.
"""

from spanlens.chat.models import Chat, Message, Sender, generate_chat_name
from spanlens.core.config.constants import Stage
from spanlens.core.exceptions import ChatNotFoundError
from spanlens.core.logging import get_logger

logger = get_logger(__name__)


class ChatManager:
    def __init__(self):
        self.chats: list[Chat] = []
        self.active_chat_id: str | None = None

    @property
    def active_chat(self) -> Chat | None:
        if self.active_chat_id is None:
            return None
        return self._find(self.active_chat_id)

    @property
    def current_messages(self) -> list[Message]:
        chat = self.active_chat
        return list(chat.messages) if chat else []

    def get_chat(self, chat_id: str) -> Chat:
        chat = self._find(chat_id)
        if chat is None:
            raise ChatNotFoundError(f"Chat not found: {chat_id}", details={"chat_id": chat_id})
        return chat

    def create_new_chat(self) -> Chat:
        chat = Chat()
        self.chats.insert(0, chat)
        self.active_chat_id = chat.id
        logger.debug("Chat created", stage=Stage.CHAT.value, chat_id=chat.id)
        return chat

    def select_chat(self, chat_id: str) -> Chat:
        chat = self.get_chat(chat_id)
        self.active_chat_id = chat.id
        return chat

    def add_message_to_active_chat(self, message: Message) -> Chat:
        chat = self.active_chat or self.create_new_chat()
        chat.messages.append(message)
        if chat.has_default_name and message.sender is Sender.USER:
            chat.name = generate_chat_name(chat.messages)
        return chat

    def save_chat(self, messages: list[Message]) -> Chat | None:
        """Store ``messages`` as the active chat's history (creating it if needed)."""
        if not messages:
            return None
        chat = self.active_chat or self.create_new_chat()
        chat.messages = list(messages)
        if chat.has_default_name:
            chat.name = generate_chat_name(chat.messages)
        return chat

    def update_chat_name(self, chat_id: str, name: str) -> Chat:
        chat = self.get_chat(chat_id)
        chat.name = name
        return chat

    def _find(self, chat_id: str) -> Chat | None:
        return next((chat for chat in self.chats if chat.id == chat_id), None)
