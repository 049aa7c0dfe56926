"""Exception hierarchy shared by the agent loop, gateways and API layer."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from civic_agents.core.schema import UsageCounters


class AgentError(RuntimeError):
    """Base class for errors that abort a whole agent request."""


class GatewayError(AgentError):
    """The model gateway failed or returned a completion that breaks the protocol."""


class ConversationError(AgentError):
    """A transcript invariant was violated."""


class MaxIterationsExceeded(AgentError):
    """The model kept requesting tools past the configured iteration cap."""

    def __init__(self, iterations: int, usage: "UsageCounters") -> None:
        super().__init__(
            f"Max iterations exceeded: no final answer after {iterations} model calls "
            f"({usage.total} units used)"
        )
        self.iterations = iterations
        self.usage = usage


class SurveyGenerationError(AgentError):
    """The survey builder could not obtain a valid survey from the model."""


class ToolExecutionError(RuntimeError):
    """Raised by a tool implementation to fail with a clean, model-visible reason."""
