"""Agent card served at /.well-known/agent.json (Telex/Mastra workflow format)."""

from typing import Any, Dict, List

from pydantic import BaseModel, Field

from src.config import Settings

A2A_WEBHOOK_PATH = "/api/v1/a2a/status-code-teacher"

LONG_DESCRIPTION = (
    "You are a helpful HTTP status code teacher that provides accurate information about HTTP status codes. "
    "Your primary function is to help users understand what different HTTP status codes mean, when to use them, "
    "and best practices for implementing them in web applications."
)


class AgentNode(BaseModel):
    id: str
    name: str
    parameters: Dict[str, Any] = Field(default_factory=dict)
    position: List[int] = Field(default_factory=lambda: [816, -112])
    type: str = "a2a/mastra-a2a-node"
    typeVersion: int = 1
    url: str


class AgentSettings(BaseModel):
    executionOrder: str = "v1"


class AgentCard(BaseModel):
    active: bool = True
    category: str
    description: str
    id: str
    long_description: str = LONG_DESCRIPTION
    name: str
    nodes: List[AgentNode]
    pinData: Dict[str, Any] = Field(default_factory=dict)
    settings: AgentSettings = Field(default_factory=AgentSettings)
    short_description: str = "Learn about HTTP status codes"


def build_agent_card(settings: Settings) -> AgentCard:
    """Build the agent card from configuration."""
    agent = settings.agent
    webhook_url = f"{agent.domain.rstrip('/')}{A2A_WEBHOOK_PATH}"
    return AgentCard(
        category=agent.category,
        description=agent.description,
        id=agent.id,
        name=agent.name,
        nodes=[
            AgentNode(
                id="status_code_teacher",
                name="HTTP Status Code Teacher",
                url=webhook_url,
            )
        ],
    )
