"""Text extraction and formatting helpers for A2A messages."""

import re
import secrets
from typing import Any, Iterable, List, Optional

from src.models.status_code_models import StatusCodeExplanation

HTML_TAG_PATTERN = re.compile(r"<.*?>")
STATUS_CODE_PATTERN = re.compile(r"\b([1-5]\d{2})\b")

MESSAGE_ID_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
MESSAGE_ID_LENGTH = 24

_EXHAUSTED = object()

HELP_TEXT = (
    "I'm the HTTP Status Code Teacher! Ask me about any HTTP status code (100-599). "
    "For example, you can ask 'What is 404?' or 'Explain 200' or just send a status code like '500'."
)


def extract_text_parts(parts: Optional[Iterable[Any]]) -> List[str]:
    """Flatten raw message parts depth-first into their non-blank, tag-stripped texts.

    Nested ``data`` lists are walked with an explicit stack, so nesting depth
    is not bounded by the interpreter's recursion limit. Parts that are not
    objects, a ``text`` that is not a string, and a ``data`` that is not a
    list are ignored.
    """
    texts: List[str] = []
    stack = [iter(parts or [])]
    while stack:
        part = next(stack[-1], _EXHAUSTED)
        if part is _EXHAUSTED:
            stack.pop()
            continue
        if not isinstance(part, dict):
            continue

        text = part.get("text")
        if isinstance(text, str) and text.strip():
            clean_text = HTML_TAG_PATTERN.sub("", text).strip()
            if clean_text:
                texts.append(clean_text)

        data = part.get("data")
        if isinstance(data, list) and data:
            stack.append(iter(data))

    return texts


def extract_status_code(message: str) -> Optional[int]:
    """Return the first 3-digit status code (100-599) mentioned in a message."""
    for match in STATUS_CODE_PATTERN.finditer(message):
        code = int(match.group(1))
        if 100 <= code <= 599:
            return code
    return None


def format_explanation(code: int, explanation: StatusCodeExplanation) -> str:
    """Render an explanation as the markdown reply sent back over A2A."""
    return (
        f"**HTTP {code} - {explanation.name}**\n\n"
        f"**Category:** {explanation.category}\n\n"
        f"**Description:** {explanation.description}\n\n"
        f"**When to Use:** {explanation.when_to_use}\n\n"
        f"**Common Scenarios:** {explanation.common_scenarios}\n\n"
        f"**Best Practices:** {explanation.best_practices}\n\n"
        f"**Example:** {explanation.example_response}\n\n"
        f"**Related Codes:** {explanation.related_codes}"
    )


def generate_message_id() -> str:
    """Generate a message id like 'fbuvdhb4ke6vq8hbva9qh9ha'."""
    return "".join(secrets.choice(MESSAGE_ID_ALPHABET) for _ in range(MESSAGE_ID_LENGTH))
