"""
System Constants and Enumerations

This module defines system-wide constants and enumerations shared by the
relay server and the client-side engine.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for wire-format literals
- Type-safe enums for state management

Author: System Architect
Date: 2026-03-02
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Processing stages used as the ``stage`` field of log events.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}
    """

    # Relay (server side)
    REQUEST_VALIDATION = "1.0_REQUEST_VALIDATION"
    PROVIDER_SELECTION = "2.0_PROVIDER_SELECTION"
    LLM_STREAMING = "3.0_LLM_STREAMING"
    STREAM_TERMINATION = "4.0_STREAM_TERMINATION"

    # Client side
    FRAME_DECODING = "D_FRAME_DECODING"
    LIFECYCLE = "RL_REQUEST_LIFECYCLE"
    CASCADE = "C_CASCADE"
    CHAT = "CH_CHAT"


# ============================================================================
# Lookup Sources
# ============================================================================


class LookupSource(str, Enum):
    """
    Lookup sources in fixed cascade order.

    DICTIONARY: single-word definitions
    ENCYCLOPEDIA: article summaries
    ASSISTANT: streamed language-model explanation (terminal source)
    """

    DICTIONARY = "dictionary"
    ENCYCLOPEDIA = "encyclopedia"
    ASSISTANT = "assistant"


CASCADE_ORDER: tuple[LookupSource, ...] = (
    LookupSource.DICTIONARY,
    LookupSource.ENCYCLOPEDIA,
    LookupSource.ASSISTANT,
)


# ============================================================================
# Request Slots
# ============================================================================

SLOT_CHAT = "chat"
SLOT_LOOKUP = "lookup"

# ============================================================================
# Wire Format (text event stream)
# ============================================================================

SSE_DATA_PREFIX = "data: "
SSE_FRAME_TERMINATOR = "\n\n"
SSE_DONE_SENTINEL = "[DONE]"
SSE_FIELD_TOKEN = "token"
SSE_FIELD_ERROR = "error"
SSE_MEDIA_TYPE = "text/event-stream"

# ============================================================================
# HTTP
# ============================================================================

HEADER_THREAD_ID = "X-Thread-ID"

ROUTE_CHAT = "/chat"
ROUTE_EXPLAIN = "/explain"

ERROR_MESSAGE_REQUIRED = "message required"
ERROR_SPAN_REQUIRED = "spanText and context required"
ERROR_SPAN_TOO_LONG = "spanText too long"
ERROR_METHOD_NOT_ALLOWED = "Method not allowed"

# ============================================================================
# Chat
# ============================================================================

DEFAULT_CHAT_NAME = "New Chat"
CHAT_NAME_MAX_LENGTH = 40

# ============================================================================
# Lookup error messages
# ============================================================================

DICTIONARY_NOT_FOUND = "Word not found in dictionary"
ENCYCLOPEDIA_NOT_FOUND = "No encyclopedia article found"
ASSISTANT_FAILED = "Failed to fetch AI explanation"

# ============================================================================
# Prompts
# ============================================================================

EXPLAIN_SYSTEM_PROMPT = (
    "You are a helpful assistant explaining technical terms concisely.\n"
    "Given a phrase, provide a 2-3 sentence explanation with optional sources.\n"
    "Be conversational and informative."
)
