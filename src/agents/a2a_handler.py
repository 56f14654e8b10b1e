"""
A2A JSON-RPC handler for the status code teacher agent.

Each message/send request runs once through a small LangGraph workflow:

    validate_envelope -> extract_text -> detect_status_code -> compose_reply -> render_success
            |                  |
            +--> render_error <+

Nothing is kept between requests.
"""

import logging
from typing import Any, Optional, TypedDict

from langgraph.graph import END, StateGraph
from pydantic import ValidationError

from src.models.a2a_models import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    JSONRPC_VERSION,
    MESSAGE_SEND_METHOD,
    METHOD_NOT_FOUND,
    A2AError,
    A2AErrorResponse,
    A2AParams,
    A2AResult,
    A2ASuccessResponse,
    TaskInfo,
    TextPart,
)
from src.models.status_code_models import category_for_code
from src.services.explanation_service import ExplanationService
from src.tools.message_parsing import (
    HELP_TEXT,
    extract_status_code,
    extract_text_parts,
    format_explanation,
    generate_message_id,
)

logger = logging.getLogger(__name__)


class A2AState(TypedDict, total=False):
    """Defines the state of one A2A request."""
    payload: Any
    request_id: Any
    params: A2AParams
    texts: list[str]
    utterance: str
    status_code: Optional[int]
    response_text: str
    error: Optional[A2AError]
    response: dict


def build_error_response(request_id: Any, code: int, message: str) -> dict:
    return A2AErrorResponse(id=request_id, error=A2AError(code=code, message=message)).model_dump()


class A2AHandler:
    """Turns A2A JSON-RPC payloads into JSON-RPC responses."""

    def __init__(self, explanation_service: ExplanationService):
        self.explanation_service = explanation_service
        self.graph = self._build_graph()

    def _build_graph(self):
        workflow = StateGraph(A2AState)

        workflow.add_node("validate_envelope", self.validate_envelope_node)
        workflow.add_node("extract_text", self.extract_text_node)
        workflow.add_node("detect_status_code", self.detect_status_code_node)
        workflow.add_node("compose_reply", self.compose_reply_node)
        workflow.add_node("render_success", self.render_success_node)
        workflow.add_node("render_error", self.render_error_node)

        workflow.set_entry_point("validate_envelope")
        workflow.add_conditional_edges(
            "validate_envelope",
            route_on_error("extract_text"),
            {"extract_text": "extract_text", "render_error": "render_error"},
        )
        workflow.add_conditional_edges(
            "extract_text",
            route_on_error("detect_status_code"),
            {"detect_status_code": "detect_status_code", "render_error": "render_error"},
        )
        workflow.add_edge("detect_status_code", "compose_reply")
        workflow.add_edge("compose_reply", "render_success")
        workflow.add_edge("render_success", END)
        workflow.add_edge("render_error", END)

        return workflow.compile()

    async def handle(self, payload: Any) -> dict:
        """Handle one JSON-RPC request body and return the response envelope.

        Unexpected failures become a -32603 error without internal detail.
        """
        request_id = payload.get("id") if isinstance(payload, dict) else None
        try:
            result = await self.graph.ainvoke({"payload": payload, "request_id": request_id})
            return result["response"]
        except Exception as e:
            logger.error(f"A2A webhook internal error: {e}", exc_info=True)
            return build_error_response(request_id, INTERNAL_ERROR, "Internal error")

    def validate_envelope_node(self, state: A2AState) -> dict:
        """Checks the JSON-RPC version and method."""
        payload = state["payload"]
        if not isinstance(payload, dict):
            return {"error": A2AError(code=INVALID_REQUEST, message="Invalid Request: body must be a JSON object")}

        if payload.get("jsonrpc") != JSONRPC_VERSION:
            return {"error": A2AError(code=INVALID_REQUEST, message="Invalid Request: JSON-RPC version must be 2.0")}

        method = payload.get("method")
        if method != MESSAGE_SEND_METHOD:
            return {"error": A2AError(code=METHOD_NOT_FOUND, message=f"Method not found: {method}")}

        return {"error": None}

    def extract_text_node(self, state: A2AState) -> dict:
        """Flattens every text part, including nested data parts."""
        raw_params = state["payload"].get("params") or {}
        try:
            params = A2AParams.model_validate(raw_params)
        except ValidationError as e:
            logger.warning(f"A2A request params failed validation: {e}")
            return {"error": A2AError(code=INVALID_PARAMS, message="Invalid params: message is malformed")}

        texts = extract_text_parts(params.message.parts)
        if not texts:
            return {
                "params": params,
                "error": A2AError(code=INVALID_PARAMS, message="Invalid params: No text content found in message"),
            }

        # The last text is the most recent turn in a history-bearing payload
        utterance = texts[-1]
        logger.info(f"Received A2A message from {params.message.role or 'unknown'}: {utterance}")
        return {"params": params, "texts": texts, "utterance": utterance}

    def detect_status_code_node(self, state: A2AState) -> dict:
        status_code = extract_status_code(state["utterance"])
        if status_code is not None:
            logger.info(f"Extracted status code {status_code} from message")
        else:
            logger.info("No status code found in message; replying with help text")
        return {"status_code": status_code}

    async def compose_reply_node(self, state: A2AState) -> dict:
        """Explains the detected code, or returns the help text."""
        status_code = state.get("status_code")
        if status_code is None:
            return {"response_text": HELP_TEXT}

        try:
            explanation = await self.explanation_service.explain(status_code)
            response_text = format_explanation(status_code, explanation)
        except Exception as e:
            logger.warning(f"AI service error: {e}")
            response_text = f"HTTP {status_code} - {category_for_code(status_code)}"
        return {"response_text": response_text}

    def render_success_node(self, state: A2AState) -> dict:
        params = state["params"]
        message_id = params.message.messageId or generate_message_id()
        response = A2ASuccessResponse(
            id=state["request_id"],
            result=A2AResult(
                parts=[TextPart(text=state["response_text"])],
                messageId=message_id,
                task=TaskInfo(id=message_id, status="completed"),
            ),
        )
        logger.info(f"Sending A2A response for message {message_id}")
        return {"response": response.model_dump()}

    def render_error_node(self, state: A2AState) -> dict:
        error = state["error"]
        logger.warning(f"Rejecting A2A request: {error.code} {error.message}")
        return {"response": build_error_response(state["request_id"], error.code, error.message)}


def route_on_error(next_node: str):
    """Build a router that diverts to render_error when a node recorded an error."""
    def route(state: A2AState) -> str:
        if state.get("error") is not None:
            return "render_error"
        return next_node
    return route
