"""
Startup-time selection of the AI backend and the cache backend.

Selection happens once, while the application is built. An unknown value
raises ConfigurationError so the process fails to start instead of failing
on the first request.
"""

import logging
from typing import Callable, Dict

from src.agents.base_explainer import StatusCodeExplainer
from src.agents.claude_explainer import ClaudeExplainer
from src.agents.gemini_explainer import GeminiExplainer
from src.clients.cache import ExplanationCache, InMemoryCache, NoOpCache, RedisCache
from src.config import Settings
from src.errors import ConfigurationError
from src.models.provider_types import CACHE_TYPE_ALIASES, AiProvider, CacheType
from src.tools.retry import RetryPolicy

logger = logging.getLogger(__name__)


def _retry_policy(settings: Settings) -> RetryPolicy:
    return RetryPolicy(
        max_attempts=settings.ai_max_attempts,
        base_delay=settings.ai_retry_base_delay_ms / 1000,
    )


EXPLAINER_BUILDERS: Dict[AiProvider, Callable[[Settings], StatusCodeExplainer]] = {
    AiProvider.GEMINI: lambda settings: GeminiExplainer(
        settings.gemini_api_key,
        model_name=settings.gemini_model_name,
        retry_policy=_retry_policy(settings),
    ),
    AiProvider.CLAUDE: lambda settings: ClaudeExplainer(
        settings.claude_api_key,
        model_name=settings.claude_model_name,
        retry_policy=_retry_policy(settings),
    ),
}

CACHE_BUILDERS: Dict[CacheType, Callable[[Settings], ExplanationCache]] = {
    CacheType.REDIS: lambda settings: RedisCache(settings.redis_connection_string, default_ttl=settings.cache_ttl_seconds),
    CacheType.MEMORY: lambda settings: InMemoryCache(default_ttl=settings.cache_ttl_seconds),
    CacheType.NONE: lambda settings: NoOpCache(default_ttl=settings.cache_ttl_seconds),
}


def select_ai_provider(value: str) -> AiProvider:
    """Map a configuration string to an AiProvider."""
    normalized = (value or "").strip().lower()
    try:
        return AiProvider(normalized)
    except ValueError:
        allowed = ", ".join(provider.value for provider in AiProvider)
        raise ConfigurationError(f"Unsupported AI provider: '{value}'. Use one of: {allowed}.")


def select_cache_type(value: str) -> CacheType:
    """Map a configuration string to a CacheType, honouring aliases like 'inmemory'."""
    normalized = (value or "").strip().lower()
    if normalized in CACHE_TYPE_ALIASES:
        return CACHE_TYPE_ALIASES[normalized]
    try:
        return CacheType(normalized)
    except ValueError:
        allowed = ", ".join([cache_type.value for cache_type in CacheType] + list(CACHE_TYPE_ALIASES))
        raise ConfigurationError(f"Unsupported cache type: '{value}'. Use one of: {allowed}.")


def create_explainer(settings: Settings) -> StatusCodeExplainer:
    provider = select_ai_provider(settings.ai_provider)
    logger.info(f"Creating AI service for provider: {provider.value}")
    explainer = EXPLAINER_BUILDERS[provider](settings)
    if not explainer.is_configured:
        logger.warning(f"No API key configured for {provider.value}; explanations will use the fallback")
    return explainer


def create_cache(settings: Settings) -> ExplanationCache:
    cache_type = select_cache_type(settings.cache_type)
    logger.info(f"Creating cache service for type: {cache_type.value}")
    return CACHE_BUILDERS[cache_type](settings)
