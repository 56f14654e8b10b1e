"""
A2A (Agent-to-Agent) protocol models for the Telex webhook.

Defines the JSON-RPC 2.0 request and response envelopes used by the
message/send method.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field

JSONRPC_VERSION = "2.0"
MESSAGE_SEND_METHOD = "message/send"

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class MessageMetadata(BaseModel):
    """Metadata Telex attaches to inbound messages."""

    telex_user_id: Optional[str] = None
    telex_channel_id: Optional[str] = None
    org_id: Optional[str] = None


class A2AMessage(BaseModel):
    """A message with a role and an ordered list of parts."""

    kind: Optional[str] = None
    role: str = "user"
    # Raw JSON parts {"kind", "text", "data": [parts...]}; data nesting has no depth limit
    parts: List[Any] = Field(default_factory=list)
    metadata: Optional[MessageMetadata] = None
    messageId: Optional[str] = None


class PushNotificationConfig(BaseModel):
    url: Optional[str] = None
    token: Optional[str] = None
    authentication: Optional[dict[str, Any]] = None


class A2AConfiguration(BaseModel):
    acceptedOutputModes: Optional[List[str]] = None
    historyLength: Optional[int] = None
    pushNotificationConfig: Optional[PushNotificationConfig] = None
    blocking: Optional[bool] = None


class A2AParams(BaseModel):
    """Parameters of a message/send request."""

    message: A2AMessage = Field(default_factory=A2AMessage)
    configuration: Optional[A2AConfiguration] = None

    class Config:
        json_schema_extra = {
            "example": {
                "message": {
                    "kind": "message",
                    "role": "user",
                    "parts": [
                        {"kind": "text", "text": "explain 404"},
                        {"kind": "data", "data": [{"kind": "text", "text": "what about 500"}]},
                    ],
                    "messageId": "fbuvdhb4ke6vq8hbva9qh9ha",
                }
            }
        }


class TextPart(BaseModel):
    kind: str = "text"
    text: str


class TaskInfo(BaseModel):
    id: str
    status: str = "completed"


class A2AResult(BaseModel):
    """The agent's reply carried in a success envelope."""

    role: str = "agent"
    parts: List[TextPart]
    kind: str = "message"
    messageId: str
    task: TaskInfo


class A2ASuccessResponse(BaseModel):
    jsonrpc: str = JSONRPC_VERSION
    id: Any = None
    result: A2AResult


class A2AError(BaseModel):
    code: int
    message: str


class A2AErrorResponse(BaseModel):
    jsonrpc: str = JSONRPC_VERSION
    id: Any = None
    error: A2AError

    class Config:
        json_schema_extra = {
            "example": {
                "jsonrpc": "2.0",
                "id": "req-1",
                "error": {"code": -32601, "message": "Method not found: tasks/get"},
            }
        }
