"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import os
import sys

import pytest

# Add project root to sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

_PROVIDER_ENV = ("XAI_API_KEY", "OPENAI_API_KEY", "LLM_PROVIDER", "USE_FAKE_LLM")


# ============================================================================
# Pytest Configuration
# ============================================================================

# pytest-asyncio runs in auto mode (see pyproject.toml)


@pytest.fixture(scope="session", autouse=True)
def quiet_logging():
    """Configure structlog once with console output at WARNING."""
    from spanlens.core.logging import setup_logging

    setup_logging(log_level="WARNING", log_format="console")


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch):
    """
    Fresh settings for every test with no real provider keys.

    Tests that need specific values set env vars with monkeypatch and call
    ``reload_settings()`` themselves.
    """
    from spanlens.core.config.settings import reload_settings

    for name in _PROVIDER_ENV:
        monkeypatch.delenv(name, raising=False)
    settings = reload_settings()
    yield settings
    monkeypatch.undo()
    reload_settings()


# ============================================================================
# Provider and Relay Fixtures
# ============================================================================


@pytest.fixture
def scripted_provider():
    """Provider streaming "Hello", " world", "!" then finishing."""
    from tests.test_fixtures.provider_factory import ProviderTestFactory

    return ProviderTestFactory.success_provider()


@pytest.fixture
def failing_provider():
    """Provider streaming one token then raising."""
    from spanlens.core.exceptions import ProviderAPIError
    from tests.test_fixtures.provider_factory import ProviderTestFactory

    return ProviderTestFactory.failing_provider(
        error=ProviderAPIError("upstream exploded"), tokens=["Partial"]
    )


@pytest.fixture
def stream_relay(scripted_provider):
    from spanlens.llm_stream.services.stream_relay import StreamRelay

    return StreamRelay(scripted_provider)


@pytest.fixture
def relay_app(stream_relay):
    """FastAPI app with the scripted relay injected."""
    from spanlens.application.app import create_app

    app = create_app()
    app.state.stream_relay = stream_relay
    return app


@pytest.fixture
def client(relay_app):
    """Synchronous TestClient (lifespan not run; the injected relay is used)."""
    from fastapi.testclient import TestClient

    return TestClient(relay_app)


# ============================================================================
# Client-Side Fixtures
# ============================================================================


@pytest.fixture
def lifecycle():
    from spanlens.streaming.cancellation import RequestLifecycleManager

    return RequestLifecycleManager()


@pytest.fixture
def source_factory():
    from tests.test_fixtures.source_factory import SourceTestFactory

    return SourceTestFactory
