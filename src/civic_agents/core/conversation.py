"""Per-request conversation state: the transcript plus running usage totals."""

from __future__ import annotations

import logging
from typing import (
    List,
    Sequence,
    Set,
)

from civic_agents.core.errors import ConversationError
from civic_agents.core.schema import (
    AssistantTurn,
    ToolResultBlock,
    Turn,
    UsageCounters,
    UserTurn,
)

logger = logging.getLogger(__name__)


class Conversation:
    """
    Append-only transcript of one agent run.

    Turns strictly alternate user/assistant roles, starting with the user's task.  A user turn
    that follows an assistant turn with tool invocations must answer every one of them, in any
    order, before the next model call.
    """

    def __init__(self, task: str) -> None:
        self._turns: List[Turn] = [UserTurn(content=task)]
        self._seen_invocations: Set[str] = set()
        self.usage = UsageCounters()

    @property
    def turns(self) -> Sequence[Turn]:
        return tuple(self._turns)

    @property
    def last(self) -> Turn:
        return self._turns[-1]

    def __len__(self) -> int:
        return len(self._turns)

    def record_usage(self, usage: UsageCounters) -> UsageCounters:
        """Add one call's counters to the running total and return the new total."""
        self.usage = self.usage + usage
        return self.usage

    def append_assistant(self, turn: AssistantTurn) -> None:
        if not isinstance(self.last, UserTurn):
            raise ConversationError("assistant turn must follow a user turn")
        ids = [block.invocation_id for block in turn.invocations]
        for invocation_id in ids:
            if invocation_id in self._seen_invocations or ids.count(invocation_id) > 1:
                raise ConversationError(f"invocation id {invocation_id!r} was reused")
        self._seen_invocations.update(ids)
        self._turns.append(turn)

    def append_tool_results(self, results: List[ToolResultBlock]) -> None:
        last = self.last
        if not isinstance(last, AssistantTurn):
            raise ConversationError("tool results must follow an assistant turn")

        expected = [block.invocation_id for block in last.invocations]
        received = [block.invocation_id for block in results]
        if sorted(expected) != sorted(received):
            raise ConversationError(
                f"tool results {received} do not match invocations {expected}"
            )
        self._turns.append(UserTurn(content=list(results)))
        logger.debug("Appended %d tool results (transcript length %d)", len(results), len(self))
