"""
Pydantic models for civic agents API requests and responses.
This module defines the schemas that are not already part of the core data model.
"""

from typing import (
    Any,
    Dict,
    List,
)

from pydantic import (
    BaseModel,
    Field,
)


# ---------------------------------------------------------------------------
# Pydantic request / response schema
# ---------------------------------------------------------------------------
class ToolInfo(BaseModel):
    """One tool as the model sees it."""

    name: str
    description: str
    input_schema: Dict[str, Any]


class AgentInfo(BaseModel):
    """A registered agent profile and its tool catalog."""

    name: str
    description: str
    input_schema: Dict[str, Any] = Field(..., description="JSON schema of the run request body")
    tools: List[ToolInfo] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Body returned when an agent run aborts."""

    detail: str
