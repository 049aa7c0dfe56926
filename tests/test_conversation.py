"""Tests for transcript invariants and usage accounting."""

import pytest

from civic_agents.core.conversation import Conversation
from civic_agents.core.errors import ConversationError
from civic_agents.core.schema import (
    AssistantTurn,
    TextBlock,
    ToolInvocationBlock,
    ToolOutcome,
    ToolResultBlock,
    UsageCounters,
    UserTurn,
)


def _invoking_turn(*ids: str) -> AssistantTurn:
    return AssistantTurn(
        content=[ToolInvocationBlock(invocation_id=i, tool_name="ping") for i in ids]
    )


def test_seeded_with_task() -> None:
    """A new conversation holds exactly the user's task."""

    conversation = Conversation("research my ballot")
    assert len(conversation) == 1
    assert conversation.last == UserTurn(content="research my ballot")
    assert conversation.usage == UsageCounters()


def test_roles_alternate() -> None:
    """Two assistant turns in a row are rejected."""

    conversation = Conversation("task")
    conversation.append_assistant(AssistantTurn(content=[TextBlock(text="hi")]))
    with pytest.raises(ConversationError):
        conversation.append_assistant(AssistantTurn(content=[TextBlock(text="again")]))


def test_tool_results_must_follow_assistant() -> None:
    """Results cannot be appended directly after the user's task."""

    conversation = Conversation("task")
    with pytest.raises(ConversationError):
        conversation.append_tool_results([])


def test_tool_results_must_match_invocations() -> None:
    """Every invocation gets exactly one result; order may differ."""

    conversation = Conversation("task")
    conversation.append_assistant(_invoking_turn("a", "b"))

    with pytest.raises(ConversationError):
        conversation.append_tool_results([ToolResultBlock(invocation_id="a")])

    conversation.append_tool_results(
        [ToolResultBlock(invocation_id="b"), ToolResultBlock(invocation_id="a")]
    )
    assert isinstance(conversation.last, UserTurn)
    assert [block.invocation_id for block in conversation.last.content] == ["b", "a"]


def test_invocation_ids_never_reused() -> None:
    """An invocation id can appear only once per conversation."""

    conversation = Conversation("task")
    conversation.append_assistant(_invoking_turn("a"))
    conversation.append_tool_results([ToolResultBlock(invocation_id="a")])
    with pytest.raises(ConversationError, match="reused"):
        conversation.append_assistant(_invoking_turn("a"))


def test_usage_accumulates() -> None:
    """Usage is the running sum of every recorded call."""

    conversation = Conversation("task")
    conversation.record_usage(UsageCounters(input_units=10, output_units=2))
    total = conversation.record_usage(UsageCounters(input_units=5, output_units=3))
    assert total == UsageCounters(input_units=15, output_units=5)
    assert conversation.usage.total == 20


def test_failure_outcome_becomes_error_marker() -> None:
    """Failures reach the model as an error payload flagged ``is_error``."""

    block = ToolOutcome.failure("unknown tool").to_result_block("x1")
    assert block.is_error
    assert block.payload == {"error": "unknown tool"}

    ok = ToolOutcome.success([1, 2]).to_result_block("x2")
    assert not ok.is_error and ok.payload == [1, 2]
