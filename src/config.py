"""
Application configuration.

All settings are read from the environment once, at startup, into a frozen
Settings object that is handed to each component explicitly.
"""

import os
import logging
from typing import Mapping, Optional

from pydantic import BaseModel, field_validator

from src.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 3600


class AgentMetadata(BaseModel):
    """Agent descriptor strings published in the agent card."""

    id: str = "http-status-code-teacher"
    name: str = "HTTP Status Code Teacher"
    description: str = "AI-powered educational agent that teaches HTTP status codes."
    domain: str = "https://localhost:5001"
    category: str = "education"

    class Config:
        frozen = True


class Settings(BaseModel):
    """Immutable, validated process configuration."""

    ai_provider: str = "gemini"
    cache_type: str = "none"
    gemini_api_key: Optional[str] = None
    gemini_model_name: str = "gemini-2.5-flash"
    claude_api_key: Optional[str] = None
    claude_model_name: str = "claude-sonnet-4-5"
    redis_connection_string: str = "localhost:6379"
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    ai_max_attempts: int = 3
    ai_retry_base_delay_ms: int = 1000
    agent: AgentMetadata = AgentMetadata()
    log_level: str = "INFO"
    port: int = 8080

    class Config:
        frozen = True

    @field_validator("ai_provider", "cache_type", mode="before")
    @classmethod
    def normalize_selector(cls, value):
        if value is None:
            return value
        return str(value).strip().lower()

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        return str(value).strip().upper()

    @field_validator("gemini_api_key", "claude_api_key", mode="before")
    @classmethod
    def blank_key_is_missing(cls, value):
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    @field_validator("cache_ttl_seconds", "ai_max_attempts", "port")
    @classmethod
    def must_be_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("ai_retry_base_delay_ms")
    @classmethod
    def must_not_be_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.

        Raises:
            ConfigurationError: If a value has the wrong type or range.
        """
        env = os.environ if environ is None else environ

        def pick(*names: str) -> Optional[str]:
            for name in names:
                value = env.get(name)
                if value:
                    return value
            return None

        values = {}
        for field, names in (
            ("ai_provider", ("AI_PROVIDER",)),
            ("cache_type", ("CACHE_TYPE",)),
            ("gemini_api_key", ("GEMINI_API_KEY",)),
            ("gemini_model_name", ("GEMINI_MODEL_NAME",)),
            ("claude_api_key", ("CLAUDE_API_KEY", "ANTHROPIC_API_KEY")),
            ("claude_model_name", ("CLAUDE_MODEL_NAME",)),
            ("redis_connection_string", ("REDIS_CONNECTION_STRING", "REDIS_URL")),
            ("cache_ttl_seconds", ("CACHE_TTL_SECONDS",)),
            ("ai_max_attempts", ("AI_MAX_ATTEMPTS",)),
            ("ai_retry_base_delay_ms", ("AI_RETRY_BASE_DELAY_MS",)),
            ("log_level", ("LOG_LEVEL",)),
            ("port", ("PORT",)),
        ):
            found = pick(*names)
            if found is not None:
                values[field] = found

        agent_values = {}
        for field, name in (
            ("id", "AGENT_ID"),
            ("name", "AGENT_NAME"),
            ("description", "AGENT_DESCRIPTION"),
            ("domain", "AGENT_DOMAIN"),
            ("category", "AGENT_CATEGORY"),
        ):
            found = pick(name)
            if found is not None:
                agent_values[field] = found

        try:
            settings = cls(agent=AgentMetadata(**agent_values), **values)
        except ValueError as e:
            # pydantic.ValidationError is a ValueError
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        logger.info(
            f"Configuration loaded: ai_provider={settings.ai_provider}, cache_type={settings.cache_type}, "
            f"gemini_configured={bool(settings.gemini_api_key)}, claude_configured={bool(settings.claude_api_key)}"
        )
        return settings
