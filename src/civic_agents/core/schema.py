"""
Schema definitions for gateway <-> agent loop <-> tool messages.

These data models serve as the contract between the model gateway, the orchestration loop, and
individual tools.  We keep them separate from runtime logic so they can be imported anywhere without
side-effects.
"""

from __future__ import annotations

from enum import Enum
from typing import (
    Annotated,
    Any,
    Dict,
    List,
    Literal,
    Optional,
    Union,
)

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
)

NO_SUMMARY_PLACEHOLDER = "No summary produced."


# ---------------------------------------------------------------------------
# Content blocks
# ---------------------------------------------------------------------------
class TextBlock(BaseModel):
    """Free text produced by the model."""

    type: Literal["text"] = "text"
    text: str


class ToolInvocationBlock(BaseModel):
    """A request by the model to run one tool."""

    type: Literal["tool_use"] = "tool_use"
    invocation_id: str = Field(..., description="Opaque id correlating the result to this request")
    tool_name: str
    arguments: Dict[str, Any] = Field(default_factory=dict)


class ToolResultBlock(BaseModel):
    """The outcome of one invocation, fed back to the model."""

    type: Literal["tool_result"] = "tool_result"
    invocation_id: str
    payload: Any = None
    is_error: bool = False


ContentBlock = Annotated[
    Union[TextBlock, ToolInvocationBlock, ToolResultBlock],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Turns
# ---------------------------------------------------------------------------
class UserTurn(BaseModel):
    """User-role turn: the task text, or the tool results of the previous assistant turn."""

    role: Literal["user"] = "user"
    content: Union[str, List[ToolResultBlock]]


class AssistantTurn(BaseModel):
    """Assistant-role turn as returned by the model gateway."""

    role: Literal["assistant"] = "assistant"
    content: List[ContentBlock] = Field(default_factory=list)

    @property
    def invocations(self) -> List[ToolInvocationBlock]:
        """Tool invocation blocks in the order the model produced them."""
        return [block for block in self.content if isinstance(block, ToolInvocationBlock)]

    @property
    def texts(self) -> List[str]:
        """Text of every text block in this turn."""
        return [block.text for block in self.content if isinstance(block, TextBlock)]

    def first_text(self) -> Optional[str]:
        """Return the first text block, or *None* when the turn has none."""
        texts = self.texts
        return texts[0] if texts else None


Turn = Annotated[Union[UserTurn, AssistantTurn], Field(discriminator="role")]


# ---------------------------------------------------------------------------
# Gateway completion and usage
# ---------------------------------------------------------------------------
class StopReason(str, Enum):
    """Stop indicators the loop distinguishes; anything else is kept as a raw string."""

    END_TURN = "end_turn"
    TOOL_USE = "tool_use"


class UsageCounters(BaseModel):
    """Model-processing units consumed, summed per conversation."""

    input_units: int = Field(0, ge=0)
    output_units: int = Field(0, ge=0)

    @property
    def total(self) -> int:
        return self.input_units + self.output_units

    def __add__(self, other: "UsageCounters") -> "UsageCounters":
        return UsageCounters(
            input_units=self.input_units + other.input_units,
            output_units=self.output_units + other.output_units,
        )


class Completion(BaseModel):
    """One model gateway response."""

    assistant_turn: AssistantTurn
    stop_reason: str
    usage: UsageCounters = Field(default_factory=UsageCounters)

    @property
    def is_terminal(self) -> bool:
        """*True* unless the model asked for tools."""
        return self.stop_reason != StopReason.TOOL_USE.value


# ---------------------------------------------------------------------------
# Tool outcomes and the caller-facing result
# ---------------------------------------------------------------------------
class ToolOutcome(BaseModel):
    """Either ``Success(value)`` or ``Failure(reason)``."""

    ok: bool
    value: Any = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Any) -> "ToolOutcome":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, reason: str) -> "ToolOutcome":
        return cls(ok=False, error=reason)

    def to_result_block(self, invocation_id: str) -> ToolResultBlock:
        """Serialize into the block delivered to the model; failures become an error marker."""
        if self.ok:
            return ToolResultBlock(invocation_id=invocation_id, payload=self.value)
        return ToolResultBlock(
            invocation_id=invocation_id, payload={"error": self.error}, is_error=True
        )


class AgentResult(BaseModel):
    """Terminal value of one agent run."""

    model_config = ConfigDict(frozen=True)

    agent: str
    summary: str = NO_SUMMARY_PLACEHOLDER
    findings: List[Any] = Field(default_factory=list)
    counts: Dict[str, int] = Field(default_factory=dict)
    extras: Dict[str, Any] = Field(default_factory=dict)
    usage: UsageCounters = Field(default_factory=UsageCounters)
    iterations: int = 0
    stop_reason: str = StopReason.END_TURN.value
