#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the relay
server and the client-side streaming/lookup engine. All configuration is
centralized here to ensure consistency across modules.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Easy testing with override mechanisms

Author: System Architect
Date: 2026-03-02
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMProviderSettings(BaseSettings):
    """
    Token-stream provider configuration.

    STAGE-0.2: LLM provider configuration

    Supports: xAI (OpenAI-compatible API), OpenAI, and a fake provider for
    local experiments.
    """

    LLM_PROVIDER: str | None = Field(default=None, description="Preferred provider name")

    # xAI (OpenAI-compatible)
    XAI_API_KEY: str | None = Field(default=None, description="xAI API key")
    XAI_BASE_URL: str = Field(default="https://api.x.ai/v1", description="xAI base URL")
    XAI_MODEL: str = Field(default="grok-4-fast", description="xAI model")

    # OpenAI
    OPENAI_API_KEY: str | None = Field(default=None, description="OpenAI API key")
    OPENAI_MODEL: str = Field(default="gpt-4o-mini", description="OpenAI model")

    LLM_MAX_TOKENS: int = Field(default=300, description="Max output tokens per explanation")
    LLM_TIMEOUT: int = Field(default=30, description="Provider request timeout in seconds")
    USE_FAKE_LLM: bool = Field(default=False, description="Register the fake provider")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LookupSettings(BaseSettings):
    """
    Span lookup configuration (dictionary, encyclopedia, selection).

    STAGE-LK: Lookup sources
    """

    DICTIONARY_BASE_URL: str = Field(
        default="https://api.dictionaryapi.dev", description="Dictionary API base URL"
    )
    ENCYCLOPEDIA_BASE_URL: str = Field(
        default="https://en.wikipedia.org", description="Encyclopedia API base URL"
    )
    LOOKUP_TIMEOUT: float = Field(default=10.0, description="Lookup request timeout in seconds")
    MAX_SPAN_LENGTH: int = Field(default=500, description="Maximum selected span length")
    SELECTION_DEBOUNCE_SECONDS: float = Field(
        default=0.25, description="Quiet period before a selection triggers a lookup"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ClientSettings(BaseSettings):
    """
    Client-side streaming configuration.

    STAGE-CL: Relay client and presentation throttling
    """

    RELAY_BASE_URL: str = Field(default="http://localhost:3001", description="Relay server URL")
    STREAM_UPDATE_INTERVAL: float = Field(
        default=0.1, description="Minimum seconds between streamed text snapshots"
    )

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """
    General application settings.

    STAGE-0: Application initialization
    """

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="Spanlens Relay", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")

    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=3001, description="API port")
    API_BASE_PATH: str = Field(default="/api", description="Prefix for all API routes")

    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    STAGE-0: Centralized configuration initialization

    Usage:
        from spanlens.core.config.settings import get_settings

        settings = get_settings()
        model = settings.llm.XAI_MODEL
        interval = settings.client.STREAM_UPDATE_INTERVAL
    """

    # LLM Provider settings
    LLM_PROVIDER: str | None = Field(default=None, description="Preferred provider name")
    XAI_API_KEY: str | None = Field(default=None, description="xAI API key")
    XAI_BASE_URL: str = Field(default="https://api.x.ai/v1", description="xAI base URL")
    XAI_MODEL: str = Field(default="grok-4-fast", description="xAI model")
    OPENAI_API_KEY: str | None = Field(default=None, description="OpenAI API key")
    OPENAI_MODEL: str = Field(default="gpt-4o-mini", description="OpenAI model")
    LLM_MAX_TOKENS: int = Field(default=300, description="Max output tokens per explanation")
    LLM_TIMEOUT: int = Field(default=30, description="Provider request timeout in seconds")
    USE_FAKE_LLM: bool = Field(default=False, description="Register the fake provider")

    # Lookup settings
    DICTIONARY_BASE_URL: str = Field(
        default="https://api.dictionaryapi.dev", description="Dictionary API base URL"
    )
    ENCYCLOPEDIA_BASE_URL: str = Field(
        default="https://en.wikipedia.org", description="Encyclopedia API base URL"
    )
    LOOKUP_TIMEOUT: float = Field(default=10.0, description="Lookup request timeout in seconds")
    MAX_SPAN_LENGTH: int = Field(default=500, description="Maximum selected span length")
    SELECTION_DEBOUNCE_SECONDS: float = Field(
        default=0.25, description="Quiet period before a selection triggers a lookup"
    )

    # Client settings
    RELAY_BASE_URL: str = Field(default="http://localhost:3001", description="Relay server URL")
    STREAM_UPDATE_INTERVAL: float = Field(
        default=0.1, description="Minimum seconds between streamed text snapshots"
    )

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment"
    )
    APP_NAME: str = Field(default="Spanlens Relay", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=3001, description="API port")
    API_BASE_PATH: str = Field(default="/api", description="Prefix for all API routes")
    CORS_ORIGINS: list[str] = Field(default=["*"], description="Allowed CORS origins")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    @field_validator("STREAM_UPDATE_INTERVAL", "SELECTION_DEBOUNCE_SECONDS")
    @classmethod
    def validate_non_negative(cls, v):
        """Intervals cannot be negative."""
        if v < 0:
            raise ValueError("interval must be >= 0")
        return v

    @property
    def llm(self) -> 'LLMProviderSettings':
        """Get LLM provider settings."""
        return LLMProviderSettings(
            LLM_PROVIDER=self.LLM_PROVIDER,
            XAI_API_KEY=self.XAI_API_KEY,
            XAI_BASE_URL=self.XAI_BASE_URL,
            XAI_MODEL=self.XAI_MODEL,
            OPENAI_API_KEY=self.OPENAI_API_KEY,
            OPENAI_MODEL=self.OPENAI_MODEL,
            LLM_MAX_TOKENS=self.LLM_MAX_TOKENS,
            LLM_TIMEOUT=self.LLM_TIMEOUT,
            USE_FAKE_LLM=self.USE_FAKE_LLM,
        )

    @property
    def lookup(self) -> 'LookupSettings':
        """Get lookup settings."""
        return LookupSettings(
            DICTIONARY_BASE_URL=self.DICTIONARY_BASE_URL,
            ENCYCLOPEDIA_BASE_URL=self.ENCYCLOPEDIA_BASE_URL,
            LOOKUP_TIMEOUT=self.LOOKUP_TIMEOUT,
            MAX_SPAN_LENGTH=self.MAX_SPAN_LENGTH,
            SELECTION_DEBOUNCE_SECONDS=self.SELECTION_DEBOUNCE_SECONDS,
        )

    @property
    def client(self) -> 'ClientSettings':
        """Get client settings."""
        return ClientSettings(
            RELAY_BASE_URL=self.RELAY_BASE_URL,
            STREAM_UPDATE_INTERVAL=self.STREAM_UPDATE_INTERVAL,
        )

    @property
    def logging(self) -> 'LoggingSettings':
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> 'ApplicationSettings':
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
            API_BASE_PATH=self.API_BASE_PATH,
            CORS_ORIGINS=self.CORS_ORIGINS,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    STAGE-0.3: Settings initialization

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
