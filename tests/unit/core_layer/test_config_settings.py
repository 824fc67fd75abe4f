"""
Unit Tests for Configuration Settings

Tests the settings loading, validation, default values and provider registry.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from spanlens.core.config.constants import CASCADE_ORDER, LookupSource
from spanlens.core.config.provider_registry import register_providers
from spanlens.core.config.settings import Settings, get_settings, reload_settings
from spanlens.llm_stream.providers import FakeProvider, OpenAIProvider, ProviderFactory


@pytest.mark.unit
class TestSettingsDefaults:
    """Test Settings defaults and section views."""

    def test_section_views_exist(self):
        settings = Settings()
        for section in ("app", "llm", "lookup", "client", "logging"):
            assert hasattr(settings, section)

    def test_relay_defaults(self):
        settings = Settings()

        assert settings.app.API_PORT == 3001
        assert settings.app.API_BASE_PATH == "/api"
        assert settings.llm.XAI_BASE_URL == "https://api.x.ai/v1"
        assert settings.llm.XAI_MODEL == "grok-4-fast"
        assert settings.llm.LLM_MAX_TOKENS == 300

    def test_client_defaults(self):
        settings = Settings()

        assert settings.client.STREAM_UPDATE_INTERVAL == pytest.approx(0.1)
        assert settings.lookup.MAX_SPAN_LENGTH == 500
        assert settings.lookup.DICTIONARY_BASE_URL == "https://api.dictionaryapi.dev"
        assert settings.lookup.ENCYCLOPEDIA_BASE_URL == "https://en.wikipedia.org"


@pytest.mark.unit
class TestSettingsValidation:
    """Test field validators."""

    def test_log_level_is_upper_cased(self):
        assert Settings(LOG_LEVEL="debug").LOG_LEVEL == "DEBUG"

    def test_invalid_log_level_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(LOG_LEVEL="LOUD")

    def test_negative_interval_rejected(self):
        with pytest.raises(PydanticValidationError):
            Settings(STREAM_UPDATE_INTERVAL=-1)

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("MAX_SPAN_LENGTH", "42")
        monkeypatch.setenv("STREAM_UPDATE_INTERVAL", "0.25")

        settings = reload_settings()

        assert settings.lookup.MAX_SPAN_LENGTH == 42
        assert settings.client.STREAM_UPDATE_INTERVAL == pytest.approx(0.25)


@pytest.mark.unit
class TestSettingsSingleton:
    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_reload_replaces_instance(self):
        first = get_settings()
        assert reload_settings() is not first


@pytest.mark.unit
class TestConstants:
    def test_cascade_order(self):
        assert CASCADE_ORDER == (
            LookupSource.DICTIONARY,
            LookupSource.ENCYCLOPEDIA,
            LookupSource.ASSISTANT,
        )


@pytest.mark.unit
class TestProviderRegistry:
    """Test conditional provider registration."""

    def test_falls_back_to_fake_without_keys(self):
        factory = register_providers(ProviderFactory(), Settings())

        assert factory.get_available() == ["fake"]
        assert isinstance(factory.get("fake"), FakeProvider)

    def test_registers_xai_when_key_present(self):
        factory = register_providers(ProviderFactory(), Settings(XAI_API_KEY="xai-test"))

        assert factory.get_available() == ["xai"]
        provider = factory.get("xai")
        assert isinstance(provider, OpenAIProvider)
        assert provider.config.base_url == "https://api.x.ai/v1"
        assert provider.config.default_model == "grok-4-fast"
        assert provider.config.max_tokens == 300

    def test_fake_registered_alongside_when_requested(self):
        factory = register_providers(
            ProviderFactory(), Settings(OPENAI_API_KEY="sk-test", USE_FAKE_LLM=True)
        )

        assert factory.get_available() == ["openai", "fake"]
