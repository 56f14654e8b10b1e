"""
Gemini backend.

Uses structured output: the request declares a JSON response schema so
Gemini answers with a conforming object, which is read from
candidates[0].content.parts[0].text.
"""

import logging
from typing import Any, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from src.agents.base_explainer import (
    FIELD_DESCRIPTIONS,
    SYSTEM_PROMPT,
    StatusCodeExplainer,
    build_user_query,
)
from src.errors import ProviderPermanentError

logger = logging.getLogger(__name__)

# 429 rate limited, 500 server error, 503 unavailable
TRANSIENT_ERRORS = (
    google_exceptions.TooManyRequests,
    google_exceptions.ResourceExhausted,
    google_exceptions.InternalServerError,
    google_exceptions.ServiceUnavailable,
)

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        field: {"type": "INTEGER" if field == "code" else "STRING", "description": description}
        for field, description in FIELD_DESCRIPTIONS.items()
    },
    "required": list(FIELD_DESCRIPTIONS),
}


class GeminiExplainer(StatusCodeExplainer):
    """Explains status codes with Google Gemini structured output."""

    provider_name = "gemini"

    def __init__(self, api_key: Optional[str], model_name: str = "gemini-2.5-flash", model: Any = None, **kwargs):
        super().__init__(api_key, **kwargs)
        self.model_name = model_name
        self._model = model

        if self._model is None and self.api_key:
            genai.configure(api_key=self.api_key)
            self._model = genai.GenerativeModel(
                model_name,
                system_instruction=SYSTEM_PROMPT,
                generation_config=genai.GenerationConfig(
                    response_mime_type="application/json",
                    response_schema=RESPONSE_SCHEMA,
                ),
            )
            logger.info(f"Gemini API configured with model: {model_name}")

    @property
    def is_configured(self) -> bool:
        return self._model is not None and bool(self.api_key)

    async def _generate(self, code: int) -> str:
        response = await self._model.generate_content_async(build_user_query(code))
        return extract_candidate_text(response)

    def _is_transient(self, error: Exception) -> bool:
        return isinstance(error, TRANSIENT_ERRORS)


def extract_candidate_text(response: Any) -> str:
    """Return candidates[0].content.parts[0].text from a Gemini response.

    Raises:
        ProviderPermanentError: If the response carries no text.
    """
    try:
        text = response.candidates[0].content.parts[0].text
    except (AttributeError, IndexError, TypeError) as e:
        raise ProviderPermanentError(f"Gemini response had no candidate text: {e}") from e
    if not text:
        raise ProviderPermanentError("Gemini response candidate text was empty")
    return text
