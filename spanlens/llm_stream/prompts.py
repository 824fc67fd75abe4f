"""Prompt builders for the chat and explanation endpoints."""

from spanlens.core.config.constants import EXPLAIN_SYSTEM_PROMPT


def build_explanation_prompt(span_text: str, context: str) -> str:
    return f'Explain this term: "{span_text}"\n\nContext: {context}'


def explanation_messages(span_text: str, context: str) -> tuple[str, str]:
    """Return (system_prompt, user_prompt) for a span explanation."""
    return EXPLAIN_SYSTEM_PROMPT, build_explanation_prompt(span_text, context)
