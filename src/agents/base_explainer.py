"""
Shared contract for AI backends that explain HTTP status codes.

Every backend degrades instead of raising: a missing API key, a permanent
provider error, exhausted retries or unparseable output all produce the
fallback explanation.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Optional

from src.models.status_code_models import StatusCodeExplanation, build_fallback_explanation
from src.tools.llm_output import parse_explanation
from src.tools.retry import RetryPolicy

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an expert teacher on HTTP status codes and web development. Your goal is to provide clear,
educational, and comprehensive explanations about HTTP status codes. The response MUST be a JSON object that strictly adheres
to the provided schema. Each generated string must be professional, educational, and informative. Focus on practical examples
and real-world scenarios that developers encounter."""

FIELD_DESCRIPTIONS = {
    "code": "The HTTP status code number.",
    "name": "The official name of the status code (e.g., 'Not Found', 'OK').",
    "category": "The category (1xx Informational, 2xx Success, 3xx Redirection, 4xx Client Error, 5xx Server Error).",
    "description": "A clear, detailed explanation of what this status code means.",
    "when_to_use": "Specific situations when a server should return this status code.",
    "common_scenarios": "Real-world examples and common use cases where this code appears.",
    "best_practices": "Guidelines for properly using and handling this status code.",
    "example_response": "A sample HTTP response showing headers and body for this status code.",
    "related_codes": "Other related HTTP status codes that developers should know about.",
}


def build_user_query(code: int) -> str:
    return f"Provide a comprehensive educational explanation for HTTP status code {code}"


class StatusCodeExplainer(ABC):
    """Base class for AI backends.

    Subclasses implement ``_generate`` (one provider call returning raw
    text) and ``_is_transient`` (which errors are worth retrying).
    """

    provider_name: str = "unknown"

    def __init__(
        self,
        api_key: Optional[str],
        retry_policy: Optional[RetryPolicy] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.api_key = api_key
        self.retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def explain(self, code: int) -> StatusCodeExplanation:
        """Explain a status code. Never raises; degrades to the fallback explanation."""
        if not self.is_configured:
            logger.error(f"API key not found. Cannot call {self.provider_name} service.")
            return build_fallback_explanation(code)

        logger.info(f"Fetching explanation from {self.provider_name} for status code: {code}")

        try:
            text = await self.retry_policy.run(
                lambda: self._generate(code),
                self._is_transient,
                sleep=self._sleep,
                description=f"{self.provider_name} request for status code {code}",
            )
        except Exception as e:
            logger.error(f"Failed to get explanation from {self.provider_name} for status code {code}: {e}", exc_info=True)
            return build_fallback_explanation(code)

        explanation = parse_explanation(text, code)
        if explanation is None:
            return build_fallback_explanation(code)
        return explanation

    @abstractmethod
    async def _generate(self, code: int) -> str:
        """Make one provider call and return the raw text answer."""

    @abstractmethod
    def _is_transient(self, error: Exception) -> bool:
        """Return True when the error should be retried."""
