"""
Claude backend.

Chat-completion style: a system prompt describing the JSON fields plus a
one-line user query. The answer is free text that should hold a JSON
object, possibly wrapped in a markdown code fence.
"""

import logging
from typing import Any, Optional

import anthropic

from src.agents.base_explainer import (
    FIELD_DESCRIPTIONS,
    SYSTEM_PROMPT,
    StatusCodeExplainer,
    build_user_query,
)
from src.errors import ProviderPermanentError

logger = logging.getLogger(__name__)

CLAUDE_SYSTEM_PROMPT = (
    SYSTEM_PROMPT
    + "\n\nThe JSON must have exactly these fields:\n"
    + "\n".join(f"- {field}: {description}" for field, description in FIELD_DESCRIPTIONS.items())
    + "\n\nReturn ONLY the JSON object, no additional text or markdown formatting."
)

# 529 is Anthropic's "overloaded" status
TRANSIENT_STATUS_CODES = {408, 429, 500, 502, 503, 504, 529}


class ClaudeExplainer(StatusCodeExplainer):
    """Explains status codes with Anthropic Claude."""

    provider_name = "claude"

    def __init__(
        self,
        api_key: Optional[str],
        model_name: str = "claude-sonnet-4-5",
        client: Any = None,
        max_tokens: int = 4096,
        temperature: float = 0.7,
        **kwargs,
    ):
        super().__init__(api_key, **kwargs)
        self.model_name = model_name
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = client

        if self._client is None and self.api_key:
            # Retries are driven by our RetryPolicy, not the SDK
            self._client = anthropic.AsyncAnthropic(api_key=self.api_key, max_retries=0)
            logger.info(f"Claude API configured with model: {model_name}")

    @property
    def is_configured(self) -> bool:
        return self._client is not None and bool(self.api_key)

    async def _generate(self, code: int) -> str:
        response = await self._client.messages.create(
            model=self.model_name,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            system=CLAUDE_SYSTEM_PROMPT,
            messages=[{"role": "user", "content": build_user_query(code)}],
        )
        for block in response.content or []:
            text = getattr(block, "text", None)
            if text:
                return text
        raise ProviderPermanentError("Claude response contained no text content")

    def _is_transient(self, error: Exception) -> bool:
        if isinstance(error, (anthropic.APIConnectionError, anthropic.RateLimitError, anthropic.InternalServerError)):
            return True
        if isinstance(error, anthropic.APIStatusError):
            return error.status_code in TRANSIENT_STATUS_CODES
        return False
