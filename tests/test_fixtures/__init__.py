"""
Test Fixtures Package

Shared test utilities and helpers for consistent testing across all modules.
"""

from .provider_factory import ProviderTestFactory, ScriptedProvider
from .source_factory import SourceTestFactory, StubAssistant, StubDictionary, StubEncyclopedia
from .transport_factory import failing_transport, json_transport, stream_transport

__all__ = [
    "ProviderTestFactory",
    "ScriptedProvider",
    "SourceTestFactory",
    "StubDictionary",
    "StubEncyclopedia",
    "StubAssistant",
    "stream_transport",
    "json_transport",
    "failing_transport",
]
