import os
import sys
import logging
from datetime import datetime, timezone
from typing import Optional

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

from src.agents.a2a_handler import A2AHandler, build_error_response
from src.clients.cache import ExplanationCache
from src.config import Settings
from src.errors import InvalidCategoryError, InvalidStatusCodeError
from src.middleware.request_logging import RequestLoggingMiddleware
from src.models.a2a_models import PARSE_ERROR
from src.models.agent_card import A2A_WEBHOOK_PATH, build_agent_card
from src.models.status_code_models import COMMON_STATUS_CODES, StatusCodeResponse
from src.services.explanation_service import ExplanationService
from src.services.selectors import create_cache, create_explainer

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

SERVICE_NAME = "http-status-code-teacher"
VERSION = "1.0.0"


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        stream=sys.stdout,
        format='%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_explanation_service(request: Request) -> ExplanationService:
    return request.app.state.explanation_service


def get_a2a_handler(request: Request) -> A2AHandler:
    return request.app.state.a2a_handler


def list_status_codes(category: Optional[str] = None) -> dict:
    """Return the whole catalog, or one category of it.

    Raises:
        InvalidCategoryError: If the category is not one of 1xx..5xx.
    """
    if not category:
        return COMMON_STATUS_CODES
    normalized_category = category.strip().lower()
    if normalized_category not in COMMON_STATUS_CODES:
        raise InvalidCategoryError(category)
    return {"category": normalized_category, "codes": COMMON_STATUS_CODES[normalized_category]}


def create_app(
    settings: Optional[Settings] = None,
    explanation_service: Optional[ExplanationService] = None,
    cache: Optional[ExplanationCache] = None,
) -> FastAPI:
    """Build the application.

    The AI backend and cache are selected here, so an unsupported
    AI_PROVIDER or CACHE_TYPE stops the process before it serves anything.
    """
    settings = settings or Settings.from_env()

    if explanation_service is None:
        cache = cache or create_cache(settings)
        explanation_service = ExplanationService(
            create_explainer(settings),
            cache,
            ttl=settings.cache_ttl_seconds,
        )

    app = FastAPI(
        title="HTTP Status Code Teacher API",
        version=VERSION,
        description="An AI-powered educational API that teaches HTTP status codes with detailed explanations and examples.",
    )
    app.state.settings = settings
    app.state.explanation_service = explanation_service
    app.state.a2a_handler = A2AHandler(explanation_service)
    app.add_middleware(RequestLoggingMiddleware)

    @app.on_event("startup")
    async def startup_event():
        logger.info("=" * 50)
        logger.info("HTTP Status Code Teacher starting up...")
        logger.info(f"AI provider: {settings.ai_provider}")
        logger.info(f"Cache type: {settings.cache_type}")
        logger.info(f"A2A webhook: {A2A_WEBHOOK_PATH}")
        await app.state.explanation_service.cache.connect()
        logger.info("Application is ready to receive requests")
        logger.info("=" * 50)

    @app.on_event("shutdown")
    async def shutdown_event():
        await app.state.explanation_service.cache.close()
        logger.info("HTTP Status Code Teacher shut down")

    @app.get("/", include_in_schema=False)
    async def root():
        return RedirectResponse(url="/docs")

    @app.get("/api/v1/health", tags=["Health"])
    async def health_check(settings: Settings = Depends(get_settings)):
        """Health check endpoint to verify API status."""
        return {
            "status": "healthy",
            "message": "HTTP Status Code Teacher API is running smoothly",
            "version": VERSION,
            "ai_provider": settings.ai_provider,
            "cache_type": settings.cache_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/api/v1/explain", response_model=StatusCodeResponse, tags=["HTTP Status Code Teacher"])
    async def explain_status_code(
        code: Optional[str] = None,
        service: ExplanationService = Depends(get_explanation_service),
    ):
        """Explain a specific HTTP status code with detailed educational content."""
        logger.info(f"API Call: Explaining HTTP status code: {code}")
        try:
            explanation = await service.explain(code)
        except InvalidStatusCodeError as e:
            return JSONResponse(status_code=400, content={"error": str(e)})
        except Exception as e:
            logger.error(f"Error explaining status code {code}: {e}", exc_info=True)
            return JSONResponse(status_code=500, content={"error": "Failed to generate explanation for the status code"})

        return StatusCodeResponse(status="success", explanation=explanation)

    @app.get("/api/v1/codes", tags=["HTTP Status Code Teacher"])
    async def list_common_codes(category: Optional[str] = None):
        """List common HTTP status codes, optionally for one category (1xx..5xx)."""
        try:
            return list_status_codes(category)
        except InvalidCategoryError as e:
            return JSONResponse(status_code=400, content={"error": str(e)})

    @app.get("/.well-known/agent.json", include_in_schema=False)
    async def agent_metadata(settings: Settings = Depends(get_settings)):
        """Return the A2A agent card built from configuration."""
        card = build_agent_card(settings)
        logger.info(f"Serving agent card for ID: {card.id}")
        return card.model_dump()

    @app.post(A2A_WEBHOOK_PATH, include_in_schema=False)
    async def a2a_webhook(request: Request, handler: A2AHandler = Depends(get_a2a_handler)):
        """Handle A2A JSON-RPC 'message/send' requests."""
        try:
            payload = await request.json()
        except ValueError as e:
            logger.warning(f"A2A request body is not valid JSON: {e}")
            return build_error_response(None, PARSE_ERROR, "Parse error: request body is not valid JSON")

        return await handler.handle(payload)

    return app


configure_logging(os.environ.get("LOG_LEVEL", "INFO").upper())
app_settings = Settings.from_env()
app = create_app(app_settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=app_settings.port)
