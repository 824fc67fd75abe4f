"""
LLM Provider Registry

Registers the available token-stream providers (xAI, OpenAI, fake) with the
provider factory during application startup.

Architectural Decision: Centralized provider registration
- Single location for all provider configurations
- Conditional registration based on API key availability
- Fake provider as the fallback so the relay always has an upstream

Author: System Architect
Date: 2026-03-02
"""

from spanlens.core.config.settings import Settings, get_settings
from spanlens.core.logging.logger import get_logger
from spanlens.llm_stream.providers import (
    FakeProvider,
    OpenAIProvider,
    ProviderConfig,
    ProviderFactory,
    get_provider_factory,
)

logger = get_logger(__name__)


def register_providers(
    factory: ProviderFactory | None = None, settings: Settings | None = None
) -> ProviderFactory:
    """
    Register all available providers with the factory.

    Args:
        factory: Optional ProviderFactory instance. If None, uses global factory.
        settings: Optional settings. If None, uses global settings.

    Returns:
        The factory, for chaining
    """
    settings = settings or get_settings()
    factory = factory or get_provider_factory()
    llm = settings.llm

    if llm.XAI_API_KEY:
        factory.register(
            name="xai",
            provider_class=OpenAIProvider,
            config=ProviderConfig(
                name="xai",
                api_key=llm.XAI_API_KEY,
                base_url=llm.XAI_BASE_URL,
                timeout=llm.LLM_TIMEOUT,
                default_model=llm.XAI_MODEL,
                max_tokens=llm.LLM_MAX_TOKENS,
            ),
        )
        logger.info("Registered xAI provider")

    if llm.OPENAI_API_KEY:
        factory.register(
            name="openai",
            provider_class=OpenAIProvider,
            config=ProviderConfig(
                name="openai",
                api_key=llm.OPENAI_API_KEY,
                base_url="",
                timeout=llm.LLM_TIMEOUT,
                default_model=llm.OPENAI_MODEL,
                max_tokens=llm.LLM_MAX_TOKENS,
            ),
        )
        logger.info("Registered OpenAI provider")

    if llm.USE_FAKE_LLM or not factory.get_available():
        factory.register(
            name="fake",
            provider_class=FakeProvider,
            config=ProviderConfig(
                name="fake", api_key="fake-key", base_url="fake-url", default_model="fake-model"
            ),
        )
        if not llm.USE_FAKE_LLM:
            logger.warning("No provider API key configured, falling back to fake provider")
        else:
            logger.info("Registered fake provider")

    return factory
