"""Tests for the explanation service."""

import asyncio
import os
import sys
import pytest
from unittest.mock import AsyncMock, Mock

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.clients.cache import InMemoryCache
from src.errors import InvalidStatusCodeError
from src.models.status_code_models import StatusCodeExplanation, build_fallback_explanation
from src.services.explanation_service import ExplanationService, build_cache_key, validate_status_code


def make_explanation(code=404):
    return StatusCodeExplanation(
        code=code,
        name="Not Found",
        category="4xx Client Error",
        description="The server cannot find the requested resource.",
        when_to_use="When the resource does not exist.",
        common_scenarios="Broken links.",
        best_practices="Return a helpful body.",
        example_response="HTTP/1.1 404 Not Found",
        related_codes="410",
    )


def make_explainer(result=None):
    explainer = Mock()
    explainer.provider_name = "gemini"
    explainer.explain = AsyncMock(return_value=result or make_explanation())
    return explainer


class TestValidateStatusCode:

    @pytest.mark.parametrize("value,expected", [(100, 100), (599, 599), ("404", 404), (" 201 ", 201)])
    def test_valid(self, value, expected):
        assert validate_status_code(value) == expected

    @pytest.mark.parametrize("value", [99, 600, 0, -1, "abc", "", None, "4.5", True, 404.0])
    def test_invalid(self, value):
        with pytest.raises(InvalidStatusCodeError, match="Must be between 100 and 599"):
            validate_status_code(value)


class TestExplanationService:
    """Tests for cache-aside explanation lookups."""

    def test_out_of_range_never_reaches_backend(self):
        explainer = make_explainer()
        service = ExplanationService(explainer)

        with pytest.raises(InvalidStatusCodeError):
            asyncio.run(service.explain(600))

        explainer.explain.assert_not_awaited()

    def test_second_request_is_served_from_cache(self):
        explainer = make_explainer()
        service = ExplanationService(explainer, InMemoryCache())

        async def scenario():
            return await service.explain(404), await service.explain("404")

        first, second = asyncio.run(scenario())

        assert first == second
        explainer.explain.assert_awaited_once_with(404)

    def test_fallback_is_not_cached(self):
        explainer = make_explainer(build_fallback_explanation(503))
        cache = InMemoryCache()
        service = ExplanationService(explainer, cache)

        async def scenario():
            await service.explain(503)
            await service.explain(503)

        asyncio.run(scenario())

        assert explainer.explain.await_count == 2
        assert len(cache) == 0

    def test_unreadable_cache_entry_is_a_miss(self):
        explainer = make_explainer()
        cache = InMemoryCache()
        service = ExplanationService(explainer, cache)

        async def scenario():
            await cache.set(build_cache_key("gemini", 404), "{not json")
            return await service.explain(404)

        explanation = asyncio.run(scenario())

        assert explanation.name == "Not Found"
        explainer.explain.assert_awaited_once()

    def test_ttl_is_forwarded(self):
        explainer = make_explainer()
        cache = Mock()
        cache.get = AsyncMock(return_value=None)
        cache.set = AsyncMock()
        service = ExplanationService(explainer, cache, ttl=90)

        asyncio.run(service.explain(404))

        key, value, ttl = cache.set.await_args.args
        assert key == "status-code-teacher:gemini:404"
        assert ttl == 90
        assert StatusCodeExplanation.model_validate_json(value) == make_explanation()
