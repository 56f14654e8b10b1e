"""Tests for configuration loading and backend selection."""

import os
import sys
import pytest

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.agents.claude_explainer import ClaudeExplainer
from src.agents.gemini_explainer import GeminiExplainer
from src.clients.cache import InMemoryCache, NoOpCache, RedisCache
from src.config import Settings
from src.errors import ConfigurationError
from src.models.provider_types import AiProvider, CacheType
from src.services.selectors import create_cache, create_explainer, select_ai_provider, select_cache_type


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self):
        settings = Settings.from_env({})

        assert settings.ai_provider == "gemini"
        assert settings.cache_type == "none"
        assert settings.gemini_api_key is None
        assert settings.cache_ttl_seconds == 3600
        assert settings.ai_max_attempts == 3
        assert settings.port == 8080
        assert settings.agent.id == "http-status-code-teacher"

    def test_reads_environment(self):
        settings = Settings.from_env({
            "AI_PROVIDER": " Claude ",
            "CACHE_TYPE": "InMemory",
            "ANTHROPIC_API_KEY": "sk-test",
            "CACHE_TTL_SECONDS": "60",
            "AGENT_DOMAIN": "https://teacher.example.com",
            "LOG_LEVEL": "debug",
        })

        assert settings.ai_provider == "claude"
        assert settings.cache_type == "inmemory"
        assert settings.claude_api_key == "sk-test"
        assert settings.cache_ttl_seconds == 60
        assert settings.agent.domain == "https://teacher.example.com"
        assert settings.log_level == "DEBUG"

    def test_claude_key_takes_precedence(self):
        settings = Settings.from_env({"CLAUDE_API_KEY": "primary", "ANTHROPIC_API_KEY": "secondary"})
        assert settings.claude_api_key == "primary"

    def test_blank_key_is_missing(self):
        assert Settings(gemini_api_key="   ").gemini_api_key is None

    @pytest.mark.parametrize("environ", [
        {"CACHE_TTL_SECONDS": "soon"},
        {"CACHE_TTL_SECONDS": "0"},
        {"AI_MAX_ATTEMPTS": "-1"},
        {"AI_RETRY_BASE_DELAY_MS": "-5"},
    ])
    def test_invalid_values(self, environ):
        with pytest.raises(ConfigurationError):
            Settings.from_env(environ)


class TestSelectors:
    """Tests for provider and cache selection."""

    @pytest.mark.parametrize("value,expected", [
        ("gemini", AiProvider.GEMINI),
        ("CLAUDE", AiProvider.CLAUDE),
        (" claude ", AiProvider.CLAUDE),
    ])
    def test_select_ai_provider(self, value, expected):
        assert select_ai_provider(value) == expected

    def test_unknown_provider(self):
        with pytest.raises(ConfigurationError, match="openai"):
            select_ai_provider("openai")

    @pytest.mark.parametrize("value,expected", [
        ("redis", CacheType.REDIS),
        ("memory", CacheType.MEMORY),
        ("inmemory", CacheType.MEMORY),
        ("NONE", CacheType.NONE),
    ])
    def test_select_cache_type(self, value, expected):
        assert select_cache_type(value) == expected

    def test_unknown_cache_type_lists_allowed_values(self):
        with pytest.raises(ConfigurationError) as exc_info:
            select_cache_type("memcached")
        message = str(exc_info.value)
        assert "memcached" in message
        assert "redis" in message
        assert "inmemory" in message

    def test_create_explainer(self):
        claude = create_explainer(Settings(ai_provider="claude"))
        gemini = create_explainer(Settings(ai_provider="gemini"))

        assert isinstance(claude, ClaudeExplainer)
        assert isinstance(gemini, GeminiExplainer)
        assert not claude.is_configured

    def test_create_explainer_uses_retry_settings(self):
        explainer = create_explainer(Settings(ai_provider="claude", ai_max_attempts=5, ai_retry_base_delay_ms=250))

        assert explainer.retry_policy.max_attempts == 5
        assert explainer.retry_policy.base_delay == 0.25

    def test_create_explainer_rejects_unknown_provider(self):
        with pytest.raises(ConfigurationError):
            create_explainer(Settings(ai_provider="openai"))

    def test_create_cache(self):
        assert isinstance(create_cache(Settings(cache_type="redis")), RedisCache)
        assert isinstance(create_cache(Settings(cache_type="inmemory")), InMemoryCache)
        assert isinstance(create_cache(Settings(cache_type="none")), NoOpCache)

    def test_cache_ttl_is_passed_through(self):
        assert create_cache(Settings(cache_type="memory", cache_ttl_seconds=42)).default_ttl == 42
