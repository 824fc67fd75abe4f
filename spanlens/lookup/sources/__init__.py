"""
Lookup Sources

Dictionary, encyclopedia and assistant collaborators, in cascade order.
"""

from .assistant import ProviderAssistantSource, RelayAssistantSource
from .base import AssistantSource, DictionarySource, EncyclopediaSource, HTTPSource
from .dictionary import FreeDictionarySource
from .encyclopedia import WikipediaSource

__all__ = [
    "DictionarySource",
    "EncyclopediaSource",
    "AssistantSource",
    "HTTPSource",
    "FreeDictionarySource",
    "WikipediaSource",
    "RelayAssistantSource",
    "ProviderAssistantSource",
]
