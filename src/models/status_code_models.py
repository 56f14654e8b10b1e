"""
Status code explanation models and the static status code catalog.

StatusCodeExplanation is the value object every AI backend produces. It is
frozen so an explanation read from cache or built from a provider response
is never modified afterwards.
"""

from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator

FALLBACK_SENTINEL = "API unavailable"
UNKNOWN = "Unknown"

CATEGORY_NAMES: Dict[str, str] = {
    "1xx": "1xx Informational",
    "2xx": "2xx Success",
    "3xx": "3xx Redirection",
    "4xx": "4xx Client Error",
    "5xx": "5xx Server Error",
}

# Common status codes per category, served by GET /api/v1/codes
COMMON_STATUS_CODES: Dict[str, List[Dict[str, Any]]] = {
    "1xx": [
        {"code": 100, "name": "Continue"},
        {"code": 101, "name": "Switching Protocols"},
        {"code": 102, "name": "Processing"},
    ],
    "2xx": [
        {"code": 200, "name": "OK"},
        {"code": 201, "name": "Created"},
        {"code": 202, "name": "Accepted"},
        {"code": 204, "name": "No Content"},
        {"code": 206, "name": "Partial Content"},
    ],
    "3xx": [
        {"code": 301, "name": "Moved Permanently"},
        {"code": 302, "name": "Found"},
        {"code": 304, "name": "Not Modified"},
        {"code": 307, "name": "Temporary Redirect"},
        {"code": 308, "name": "Permanent Redirect"},
    ],
    "4xx": [
        {"code": 400, "name": "Bad Request"},
        {"code": 401, "name": "Unauthorized"},
        {"code": 403, "name": "Forbidden"},
        {"code": 404, "name": "Not Found"},
        {"code": 405, "name": "Method Not Allowed"},
        {"code": 409, "name": "Conflict"},
        {"code": 429, "name": "Too Many Requests"},
    ],
    "5xx": [
        {"code": 500, "name": "Internal Server Error"},
        {"code": 501, "name": "Not Implemented"},
        {"code": 502, "name": "Bad Gateway"},
        {"code": 503, "name": "Service Unavailable"},
        {"code": 504, "name": "Gateway Timeout"},
    ],
}

TEXT_FIELDS = (
    "name",
    "category",
    "description",
    "when_to_use",
    "common_scenarios",
    "best_practices",
    "example_response",
    "related_codes",
)


def category_for_code(code: int) -> str:
    """Return the category label (e.g. '4xx Client Error') for a status code."""
    if 100 <= code <= 599:
        return CATEGORY_NAMES[f"{code // 100}xx"]
    return UNKNOWN


class StatusCodeExplanation(BaseModel):
    """The structured explanation of one HTTP status code."""

    code: int = Field(ge=100, le=599)
    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    description: str = Field(min_length=1)
    when_to_use: str = Field(min_length=1)
    common_scenarios: str = Field(min_length=1)
    best_practices: str = Field(min_length=1)
    example_response: str = Field(min_length=1)
    related_codes: str = Field(min_length=1)

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "code": 404,
                "name": "Not Found",
                "category": "4xx Client Error",
                "description": "The server cannot find the requested resource.",
                "when_to_use": "When the requested URL does not map to any resource.",
                "common_scenarios": "Mistyped URLs, deleted records, broken links.",
                "best_practices": "Return a helpful body and avoid leaking whether private resources exist.",
                "example_response": "HTTP/1.1 404 Not Found\nContent-Type: application/json\n\n{\"error\": \"not found\"}",
                "related_codes": "400, 410, 403",
            }
        }

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def join_list_values(cls, value: Any) -> Any:
        # Models sometimes answer with arrays (e.g. related codes); keep the wire type a string
        if isinstance(value, list):
            return ", ".join(str(item) for item in value)
        if isinstance(value, str):
            return value.strip()
        return value

    @property
    def is_fallback(self) -> bool:
        return self.name == UNKNOWN and self.description == FALLBACK_SENTINEL


class StatusCodeResponse(BaseModel):
    """Response body of GET /api/v1/explain."""

    status: str = "success"
    explanation: StatusCodeExplanation


def build_fallback_explanation(code: int) -> StatusCodeExplanation:
    """Build the degraded explanation returned when no AI answer can be produced."""
    return StatusCodeExplanation(
        code=code,
        name=UNKNOWN,
        category=UNKNOWN,
        description=FALLBACK_SENTINEL,
        when_to_use=FALLBACK_SENTINEL,
        common_scenarios=FALLBACK_SENTINEL,
        best_practices=FALLBACK_SENTINEL,
        example_response=FALLBACK_SENTINEL,
        related_codes=FALLBACK_SENTINEL,
    )
