"""Side-observers that gather caller-facing findings while the agent loop runs."""

from typing import (
    Any,
    Dict,
    List,
)

from civic_agents.core.schema import (
    ToolInvocationBlock,
    ToolOutcome,
)


class FindingsCollector:
    """
    Base collector: sees every ``(invocation, outcome)`` pair in dispatch order.

    Collectors only record; they cannot influence the loop.  One instance belongs to exactly one
    conversation.  The base class keeps every successful result tagged with its tool name.
    """

    def __init__(self) -> None:
        self.findings: List[Any] = []

    def observe(self, invocation: ToolInvocationBlock, outcome: ToolOutcome) -> None:
        if outcome.ok:
            self.findings.append({"tool": invocation.tool_name, "result": outcome.value})

    def counts(self) -> Dict[str, int]:
        return {"findings": len(self.findings)}

    def extras(self) -> Dict[str, Any]:
        return {}


class ListItemCollector(FindingsCollector):
    """Keeps the items of every list-shaped successful result, e.g. grants or schools found."""

    count_key = "items_found"

    def observe(self, invocation: ToolInvocationBlock, outcome: ToolOutcome) -> None:
        if outcome.ok and isinstance(outcome.value, list):
            self.findings.extend(outcome.value)

    def counts(self) -> Dict[str, int]:
        return {self.count_key: len(self.findings)}
