"""
Explanation service: range validation plus cache-aside around an AI backend.
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError

from src.agents.base_explainer import StatusCodeExplainer
from src.clients.cache import ExplanationCache, NoOpCache
from src.errors import InvalidStatusCodeError
from src.models.status_code_models import StatusCodeExplanation

logger = logging.getLogger(__name__)

CACHE_NAMESPACE = "status-code-teacher"


def validate_status_code(value: Any) -> int:
    """Return the status code as an int in 100-599.

    Accepts ints and integer strings (as they arrive in query strings).

    Raises:
        InvalidStatusCodeError: If the value is missing, not an integer, or out of range.
    """
    if isinstance(value, bool):
        raise InvalidStatusCodeError(value)
    if isinstance(value, str):
        try:
            code = int(value.strip())
        except ValueError:
            raise InvalidStatusCodeError(value)
    elif isinstance(value, int):
        code = value
    else:
        raise InvalidStatusCodeError(value)

    if code < 100 or code > 599:
        raise InvalidStatusCodeError(value)
    return code


def build_cache_key(provider: str, code: int) -> str:
    return f"{CACHE_NAMESPACE}:{provider}:{code}"


class ExplanationService:
    """Explains status codes, consulting the cache before the AI backend."""

    def __init__(self, explainer: StatusCodeExplainer, cache: Optional[ExplanationCache] = None, ttl: Optional[int] = None):
        self.explainer = explainer
        self.cache = cache or NoOpCache()
        self.ttl = ttl

    async def explain(self, value: Any) -> StatusCodeExplanation:
        """Explain a status code.

        Raises:
            InvalidStatusCodeError: If the code is not an integer in 100-599.
        """
        code = validate_status_code(value)
        key = build_cache_key(self.explainer.provider_name, code)

        cached = await self.cache.get(key)
        if cached:
            try:
                explanation = StatusCodeExplanation.model_validate_json(cached)
                logger.info(f"Cache hit for status code {code}")
                return explanation
            except ValidationError as e:
                logger.warning(f"Ignoring unreadable cache entry {key}: {e}")

        explanation = await self.explainer.explain(code)

        # A degraded answer is not worth keeping for an hour
        if not explanation.is_fallback:
            await self.cache.set(key, explanation.model_dump_json(), self.ttl)
        return explanation
