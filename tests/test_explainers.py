"""Tests for the Gemini and Claude backends and their shared fallback contract."""

import asyncio
import os
import sys
import httpx
import pytest
from unittest.mock import AsyncMock, Mock, patch

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import anthropic
from google.api_core import exceptions as google_exceptions

from src.agents.claude_explainer import ClaudeExplainer
from src.agents.gemini_explainer import RESPONSE_SCHEMA, GeminiExplainer, extract_candidate_text
from src.models.status_code_models import FALLBACK_SENTINEL, UNKNOWN

EXPLANATION_JSON = (
    '{"code": 503, "name": "Service Unavailable", "category": "5xx Server Error", "description": "d", '
    '"when_to_use": "w", "common_scenarios": "c", "best_practices": "b", '
    '"example_response": "e", "related_codes": "500, 502"}'
)


def gemini_response(text):
    part = Mock(text=text)
    content = Mock(parts=[part])
    return Mock(candidates=[Mock(content=content)])


def claude_response(text):
    return Mock(content=[Mock(type="text", text=text)])


def assert_fallback(explanation, code):
    assert explanation.code == code
    assert explanation.name == UNKNOWN
    assert explanation.category == UNKNOWN
    for field in ("description", "when_to_use", "common_scenarios", "best_practices",
                  "example_response", "related_codes"):
        assert getattr(explanation, field) == FALLBACK_SENTINEL
    assert explanation.is_fallback


def connection_error():
    return anthropic.APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))


class TestGeminiExplainer:
    """Tests for the structured-output Gemini backend."""

    def make(self, model, sleep=None):
        return GeminiExplainer("test-key", model=model, sleep=sleep or AsyncMock())

    def test_success(self):
        model = Mock()
        model.generate_content_async = AsyncMock(return_value=gemini_response(EXPLANATION_JSON))

        explanation = asyncio.run(self.make(model).explain(503))

        assert explanation.code == 503
        assert explanation.name == "Service Unavailable"
        prompt = model.generate_content_async.await_args.args[0]
        assert "503" in prompt

    def test_retries_transient_errors_then_succeeds(self):
        model = Mock()
        model.generate_content_async = AsyncMock(side_effect=[
            google_exceptions.TooManyRequests("slow down"),
            google_exceptions.ServiceUnavailable("overloaded"),
            gemini_response(EXPLANATION_JSON),
        ])
        sleep = AsyncMock()

        explanation = asyncio.run(self.make(model, sleep).explain(503))

        assert explanation.name == "Service Unavailable"
        assert model.generate_content_async.await_count == 3
        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0]

    def test_exhausted_retries_return_fallback(self):
        model = Mock()
        model.generate_content_async = AsyncMock(side_effect=google_exceptions.InternalServerError("boom"))
        sleep = AsyncMock()

        explanation = asyncio.run(self.make(model, sleep).explain(500))

        assert_fallback(explanation, 500)
        assert model.generate_content_async.await_count == 3

    def test_permanent_error_is_not_retried(self):
        model = Mock()
        model.generate_content_async = AsyncMock(side_effect=google_exceptions.InvalidArgument("bad schema"))

        explanation = asyncio.run(self.make(model).explain(404))

        assert_fallback(explanation, 404)
        assert model.generate_content_async.await_count == 1

    def test_empty_candidates_return_fallback(self):
        model = Mock()
        model.generate_content_async = AsyncMock(return_value=Mock(candidates=[]))

        explanation = asyncio.run(self.make(model).explain(404))

        assert_fallback(explanation, 404)
        assert model.generate_content_async.await_count == 1

    def test_unparseable_output_returns_fallback(self):
        model = Mock()
        model.generate_content_async = AsyncMock(return_value=gemini_response("not json at all"))

        assert_fallback(asyncio.run(self.make(model).explain(201)), 201)

    @patch("src.agents.gemini_explainer.genai")
    def test_missing_key_returns_fallback_without_calling(self, mock_genai):
        explainer = GeminiExplainer(None)

        assert_fallback(asyncio.run(explainer.explain(200)), 200)
        mock_genai.configure.assert_not_called()
        mock_genai.GenerativeModel.assert_not_called()

    @patch("src.agents.gemini_explainer.genai")
    def test_model_is_built_with_response_schema(self, mock_genai):
        GeminiExplainer("test-key", model_name="gemini-test")

        mock_genai.configure.assert_called_once_with(api_key="test-key")
        mock_genai.GenerationConfig.assert_called_once_with(
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
        )
        assert mock_genai.GenerativeModel.call_args.args[0] == "gemini-test"

    def test_response_schema_requires_all_fields(self):
        assert len(RESPONSE_SCHEMA["required"]) == 9
        assert RESPONSE_SCHEMA["properties"]["code"]["type"] == "INTEGER"
        assert RESPONSE_SCHEMA["properties"]["related_codes"]["type"] == "STRING"

    def test_extract_candidate_text(self):
        assert extract_candidate_text(gemini_response("hi")) == "hi"


class TestClaudeExplainer:
    """Tests for the chat-completion Claude backend."""

    def make(self, client, sleep=None):
        return ClaudeExplainer("test-key", client=client, sleep=sleep or AsyncMock())

    def client_with(self, **kwargs):
        client = Mock()
        client.messages.create = AsyncMock(**kwargs)
        return client

    def test_fenced_json_is_parsed(self):
        client = self.client_with(return_value=claude_response(f"```json\n{EXPLANATION_JSON}\n```"))

        explanation = asyncio.run(self.make(client).explain(503))

        assert explanation.name == "Service Unavailable"
        kwargs = client.messages.create.await_args.kwargs
        assert "503" in kwargs["messages"][0]["content"]
        assert "Return ONLY the JSON object" in kwargs["system"]

    def test_connection_errors_are_retried(self):
        client = self.client_with(side_effect=[connection_error(), connection_error(), claude_response(EXPLANATION_JSON)])
        sleep = AsyncMock()

        explanation = asyncio.run(self.make(client, sleep).explain(503))

        assert explanation.name == "Service Unavailable"
        assert client.messages.create.await_count == 3
        assert [call.args[0] for call in sleep.await_args_list] == [1.0, 2.0]

    def test_exhausted_retries_return_fallback(self):
        client = self.client_with(side_effect=connection_error())
        sleep = AsyncMock()

        explanation = asyncio.run(self.make(client, sleep).explain(502))

        assert_fallback(explanation, 502)
        assert client.messages.create.await_count == 3
        assert sleep.await_count == 2

    def test_unexpected_error_is_not_retried(self):
        client = self.client_with(side_effect=ValueError("bad arguments"))

        explanation = asyncio.run(self.make(client).explain(400))

        assert_fallback(explanation, 400)
        assert client.messages.create.await_count == 1

    def test_prose_output_returns_fallback(self):
        client = self.client_with(return_value=claude_response("Sorry, I can't do that."))

        assert_fallback(asyncio.run(self.make(client).explain(418)), 418)

    def test_no_text_content_returns_fallback(self):
        client = self.client_with(return_value=Mock(content=[]))

        assert_fallback(asyncio.run(self.make(client).explain(418)), 418)

    @patch("src.agents.claude_explainer.anthropic.AsyncAnthropic")
    def test_missing_key_returns_fallback_without_client(self, mock_client_class):
        explainer = ClaudeExplainer("")

        assert_fallback(asyncio.run(explainer.explain(301)), 301)
        mock_client_class.assert_not_called()

    @patch("src.agents.claude_explainer.anthropic.AsyncAnthropic")
    def test_sdk_retries_are_disabled(self, mock_client_class):
        ClaudeExplainer("test-key")

        mock_client_class.assert_called_once_with(api_key="test-key", max_retries=0)

    @pytest.mark.parametrize("status_code,expected", [
        (429, True),
        (503, True),
        (529, True),
        (400, False),
        (401, False),
    ])
    def test_status_errors_classification(self, status_code, expected):
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        response = httpx.Response(status_code, request=request)
        error = anthropic.APIStatusError("error", response=response, body=None)

        assert ClaudeExplainer("test-key", client=Mock())._is_transient(error) is expected
