"""
FastAPI Dependency Injection Module
===================================

Reusable dependencies for the relay routes. The stream relay is built once
during startup (see ``app.lifespan``) and stored on ``app.state``; routes
receive it through ``StreamRelayDep`` so tests can swap it for one backed by
a scripted provider.

Example:
    @router.post("/chat")
    async def chat(relay: StreamRelayDep, thread_id: ThreadIdDep):
        ...
"""

import uuid
from typing import Annotated

from fastapi import Depends, Request

from spanlens.core.config.constants import HEADER_THREAD_ID, Stage
from spanlens.core.config.provider_registry import register_providers
from spanlens.core.config.settings import Settings, get_settings
from spanlens.core.exceptions import ProviderNotAvailableError
from spanlens.core.logging import get_logger, log_stage
from spanlens.llm_stream.providers.base_provider import ProviderFactory
from spanlens.llm_stream.services.stream_relay import StreamRelay

logger = get_logger(__name__)


def build_stream_relay(settings: Settings, factory: ProviderFactory | None = None) -> StreamRelay:
    """
    Register providers and wrap the preferred one in a StreamRelay.

    Raises:
        ProviderNotAvailableError: No provider could be registered
    """
    factory = register_providers(factory or ProviderFactory(), settings)
    provider = factory.select(settings.llm.LLM_PROVIDER)
    if provider is None:
        raise ProviderNotAvailableError("No LLM provider configured")

    log_stage(
        logger,
        Stage.PROVIDER_SELECTION,
        "Provider selected",
        provider=provider.name,
        requested=settings.llm.LLM_PROVIDER,
    )
    return StreamRelay(provider)


def get_stream_relay(request: Request) -> StreamRelay:
    """
    The application's StreamRelay.

    Falls back to building one when the lifespan has not run (for example
    when the app is mounted without startup events).
    """
    relay = getattr(request.app.state, "stream_relay", None)
    if relay is None:
        relay = build_stream_relay(get_settings())
        request.app.state.stream_relay = relay
    return relay


def get_thread_id(request: Request) -> str:
    """Correlation id assigned by the request context middleware, else from ``X-Thread-ID``."""
    thread_id = getattr(request.state, "thread_id", None)
    return thread_id or request.headers.get(HEADER_THREAD_ID) or str(uuid.uuid4())


StreamRelayDep = Annotated[StreamRelay, Depends(get_stream_relay)]

SettingsDep = Annotated[Settings, Depends(get_settings)]

ThreadIdDep = Annotated[str, Depends(get_thread_id)]
