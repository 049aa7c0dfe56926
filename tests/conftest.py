"""
Shared fixtures: a scripted model gateway and a small tool catalog.

The scripted gateway replays a fixed list of completions and records every call, so tests can
check exactly what the loop sent to the model.
"""

import asyncio
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Sequence,
    Union,
)

import pytest
from pydantic import BaseModel

from civic_agents.agent.gateway import (
    BaseGateway,
    register_gateway,
)
from civic_agents.core.schema import (
    AssistantTurn,
    Completion,
    TextBlock,
    ToolInvocationBlock,
    UsageCounters,
    UserTurn,
)
from civic_agents.tools import (
    ToolCatalog,
    ToolRegistry,
)

Script = Union[Completion, Callable[[int], Completion], Exception]


def text_completion(text: str | None, input_units: int = 10, output_units: int = 5) -> Completion:
    """A terminal ``end_turn`` completion, optionally without any text block."""
    blocks = [TextBlock(text=text)] if text is not None else []
    return Completion(
        assistant_turn=AssistantTurn(content=blocks),
        stop_reason="end_turn",
        usage=UsageCounters(input_units=input_units, output_units=output_units),
    )


def tool_completion(
    *calls: tuple, input_units: int = 10, output_units: int = 5, text: str | None = None
) -> Completion:
    """A ``tool_use`` completion; each call is ``(invocation_id, tool_name, arguments)``."""
    blocks: List[Any] = [TextBlock(text=text)] if text else []
    blocks += [
        ToolInvocationBlock(invocation_id=call_id, tool_name=name, arguments=args)
        for call_id, name, args in calls
    ]
    return Completion(
        assistant_turn=AssistantTurn(content=blocks),
        stop_reason="tool_use",
        usage=UsageCounters(input_units=input_units, output_units=output_units),
    )


@register_gateway("scripted")
class ScriptedGateway(BaseGateway):
    """Replays *script*; callables receive the 0-based call index, exceptions are raised."""

    def __init__(self, script: Sequence[Script] = (), delay: float = 0.0) -> None:
        self.script = list(script)
        self.delay = delay
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, transcript, catalog, system=None) -> Completion:
        index = len(self.calls)
        self.calls.append(
            {"transcript": list(transcript), "catalog": catalog, "system": system}
        )
        if self.delay:
            await asyncio.sleep(self.delay)

        step = self.script[min(index, len(self.script) - 1)]
        if isinstance(step, Exception):
            raise step
        if callable(step):
            return step(index)
        return step


# ---------------------------------------------------------------------------
# A tiny catalog for loop tests
# ---------------------------------------------------------------------------
class AddArgs(BaseModel):
    a: int
    b: int


class NoArgs(BaseModel):
    pass


class Boom(RuntimeError):
    pass


def build_test_catalog() -> ToolCatalog:
    registry = ToolRegistry("test")

    @registry.register("add")
    def add(args: AddArgs) -> int:
        """Return the sum of two integers."""
        return args.a + args.b

    @registry.register("ping")
    def ping(args: NoArgs) -> Dict[str, str]:
        """Always answers pong."""
        return {"reply": "pong"}

    @registry.register("explode")
    def explode(args: NoArgs) -> None:
        """Always fails."""
        raise Boom("kaboom")

    @registry.register("list_items")
    def list_items(args: NoArgs) -> List[int]:
        """Returns three items."""
        return [1, 2, 3]

    @registry.register("slow_ping")
    async def slow_ping(args: NoArgs) -> str:
        """Answers pong after a short wait."""
        await asyncio.sleep(0.01)
        return "pong"

    return registry.catalog()


@pytest.fixture
def catalog() -> ToolCatalog:
    return build_test_catalog()


def first_user_text(transcript: Sequence[Any]) -> str:
    first = transcript[0]
    assert isinstance(first, UserTurn) and isinstance(first.content, str)
    return first.content
