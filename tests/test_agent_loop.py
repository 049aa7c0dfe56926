"""
Tests for the agent loop: termination, dispatch, accounting and failure containment.

The model gateway is a scripted fake (see ``conftest.py``).
"""

import asyncio
import time

import pytest

from civic_agents.agent.agent_loop import AgentLoop
from civic_agents.agent.findings import (
    FindingsCollector,
    ListItemCollector,
)
from civic_agents.core.errors import (
    GatewayError,
    MaxIterationsExceeded,
)
from civic_agents.core.schema import (
    NO_SUMMARY_PLACEHOLDER,
    AssistantTurn,
    UsageCounters,
    UserTurn,
)
from civic_agents.tools import ToolRegistry
from conftest import (
    NoArgs,
    ScriptedGateway,
    first_user_text,
    text_completion,
    tool_completion,
)


def _loop(catalog, gateway, **kwargs) -> AgentLoop:
    kwargs.setdefault("max_iterations", 10)
    return AgentLoop("test", catalog, gateway, **kwargs)


def test_end_turn_returns_summary(catalog) -> None:
    """A terminal completion ends the run with its first text block."""

    gateway = ScriptedGateway([text_completion("Summary: done.")])
    result = asyncio.run(_loop(catalog, gateway).run("do things"))

    assert result.summary == "Summary: done."
    assert result.iterations == 1
    assert result.stop_reason == "end_turn"
    assert len(gateway.calls) == 1
    assert first_user_text(gateway.calls[0]["transcript"]) == "do things"


def test_missing_text_uses_placeholder(catalog) -> None:
    """No text on the terminal turn falls back to the placeholder."""

    gateway = ScriptedGateway([text_completion(None)])
    result = asyncio.run(_loop(catalog, gateway).run("task"))
    assert result.summary == NO_SUMMARY_PLACEHOLDER


def test_tool_results_pair_with_invocations(catalog) -> None:
    """One result per invocation, matched by id, appended before the next model call."""

    gateway = ScriptedGateway(
        [
            tool_completion(("c1", "add", {"a": 1, "b": 2}), ("c2", "ping", {})),
            text_completion("all done"),
        ]
    )
    asyncio.run(_loop(catalog, gateway).run("task"))

    transcript = gateway.calls[1]["transcript"]
    assert [turn.role for turn in transcript] == ["user", "assistant", "user"]
    results = transcript[2].content
    assert [block.invocation_id for block in results] == ["c1", "c2"]
    assert results[0].payload == 3
    assert results[1].payload == {"reply": "pong"}
    assert not any(block.is_error for block in results)


def test_usage_is_exact_sum(catalog) -> None:
    """Usage equals the sum of what every gateway call reported."""

    gateway = ScriptedGateway(
        [
            tool_completion(("c1", "ping", {}), input_units=100, output_units=7),
            tool_completion(("c2", "ping", {}), input_units=150, output_units=11),
            text_completion("done", input_units=200, output_units=13),
        ]
    )
    result = asyncio.run(_loop(catalog, gateway).run("task"))

    assert result.usage == UsageCounters(input_units=450, output_units=31)
    assert result.iterations == 3


def test_same_catalog_every_call(catalog) -> None:
    """The identical catalog object is handed to every gateway call."""

    gateway = ScriptedGateway(
        [tool_completion(("c1", "ping", {})), tool_completion(("c2", "ping", {})), text_completion("ok")]
    )
    asyncio.run(_loop(catalog, gateway).run("task"))

    assert len(gateway.calls) == 3
    assert all(call["catalog"] is catalog for call in gateway.calls)


def test_unknown_tool_does_not_abort(catalog) -> None:
    """An unknown tool yields an error marker and the loop carries on."""

    gateway = ScriptedGateway(
        [tool_completion(("c1", "delete_everything", {})), text_completion("recovered")]
    )
    result = asyncio.run(_loop(catalog, gateway).run("task"))

    assert result.summary == "recovered"
    result_block = gateway.calls[1]["transcript"][2].content[0]
    assert result_block.is_error
    assert "unknown tool" in result_block.payload["error"]


def test_tool_crash_is_contained(catalog) -> None:
    """A failing tool is reported to the model, other tools in the turn still run."""

    gateway = ScriptedGateway(
        [
            tool_completion(("c1", "explode", {}), ("c2", "add", {"a": 2, "b": 2})),
            text_completion("fine"),
        ]
    )
    collector = FindingsCollector()
    asyncio.run(_loop(catalog, gateway).run("task", collector))

    first, second = gateway.calls[1]["transcript"][2].content
    assert first.is_error and "kaboom" in first.payload["error"]
    assert second.payload == 4
    assert collector.findings == [{"tool": "add", "result": 4}]


def test_terminal_turn_tool_calls_ignored(catalog) -> None:
    """Invocations on an end_turn completion are never dispatched."""

    terminal = tool_completion(("c1", "explode", {}), text="final words")
    terminal.stop_reason = "end_turn"
    collector = FindingsCollector()
    gateway = ScriptedGateway([terminal])

    result = asyncio.run(_loop(catalog, gateway).run("task", collector))
    assert result.summary == "final words"
    assert collector.findings == []
    assert len(gateway.calls) == 1


def test_other_stop_reason_is_terminal(catalog) -> None:
    """Stop reasons other than tool_use end the run and are reported."""

    completion = text_completion("cut short")
    completion.stop_reason = "max_tokens"
    result = asyncio.run(_loop(catalog, ScriptedGateway([completion])).run("task"))
    assert result.stop_reason == "max_tokens"
    assert result.summary == "cut short"


def test_iteration_cap(catalog) -> None:
    """A model that never finishes is stopped after max_iterations calls."""

    gateway = ScriptedGateway([lambda i: tool_completion((f"c{i}", "ping", {}))])
    with pytest.raises(MaxIterationsExceeded) as excinfo:
        asyncio.run(_loop(catalog, gateway, max_iterations=4).run("task"))

    assert len(gateway.calls) == 4
    assert excinfo.value.iterations == 4
    assert excinfo.value.usage == UsageCounters(input_units=40, output_units=20)
    assert "Max iterations exceeded" in str(excinfo.value)


def test_gateway_failure_is_fatal(catalog) -> None:
    """Gateway errors propagate as GatewayError and stop the run."""

    gateway = ScriptedGateway([tool_completion(("c1", "ping", {})), ConnectionError("reset")])
    with pytest.raises(GatewayError, match="reset"):
        asyncio.run(_loop(catalog, gateway).run("task"))
    assert len(gateway.calls) == 2


def test_gateway_timeout(catalog) -> None:
    """A slow gateway call is cut off by the per-call timeout."""

    gateway = ScriptedGateway([text_completion("late")], delay=0.5)
    with pytest.raises(GatewayError, match="timed out"):
        asyncio.run(_loop(catalog, gateway, gateway_timeout=0.01).run("task"))


def test_tool_use_without_invocations_is_malformed(catalog) -> None:
    """tool_use with nothing to run is a protocol violation."""

    completion = text_completion("thinking...")
    completion.stop_reason = "tool_use"
    with pytest.raises(GatewayError, match="Malformed"):
        asyncio.run(_loop(catalog, ScriptedGateway([completion])).run("task"))


def test_reused_invocation_id_is_malformed(catalog) -> None:
    """Invocation ids must be unique over the conversation."""

    gateway = ScriptedGateway(
        [tool_completion(("same", "ping", {})), tool_completion(("same", "ping", {}))]
    )
    with pytest.raises(GatewayError, match="reused"):
        asyncio.run(_loop(catalog, gateway).run("task"))


def test_collector_crash_does_not_change_flow(catalog) -> None:
    """A broken findings collector is logged and ignored."""

    class Broken(FindingsCollector):
        def observe(self, invocation, outcome) -> None:
            raise ValueError("bad bookkeeping")

    gateway = ScriptedGateway([tool_completion(("c1", "ping", {})), text_completion("ok")])
    result = asyncio.run(_loop(catalog, gateway).run("task", Broken()))
    assert result.summary == "ok"
    assert len(gateway.calls) == 2


def test_list_item_collector(catalog) -> None:
    """List-shaped results are flattened into findings."""

    gateway = ScriptedGateway(
        [
            tool_completion(("c1", "list_items", {}), ("c2", "ping", {})),
            tool_completion(("c3", "list_items", {})),
            text_completion("ok"),
        ]
    )
    result = asyncio.run(_loop(catalog, gateway).run("task", ListItemCollector()))
    assert result.findings == [1, 2, 3, 1, 2, 3]
    assert result.counts == {"items_found": 6}


def test_parallel_dispatch_keeps_correlation(catalog) -> None:
    """Concurrent dispatch still answers each invocation id with its own result."""

    gateway = ScriptedGateway(
        [
            tool_completion(
                ("c1", "slow_ping", {}), ("c2", "add", {"a": 5, "b": 5}), ("c3", "slow_ping", {})
            ),
            text_completion("ok"),
        ]
    )
    asyncio.run(_loop(catalog, gateway, parallel_tool_calls=True).run("task"))

    results = {b.invocation_id: b.payload for b in gateway.calls[1]["transcript"][2].content}
    assert results == {"c1": "pong", "c2": 10, "c3": "pong"}


def test_concurrent_conversations_are_isolated(catalog) -> None:
    """Two runs on one loop object share no transcript, usage or findings."""

    def script(units: int, count: int):
        steps = [
            tool_completion((f"{units}-{i}", "list_items", {}), input_units=units, output_units=1)
            for i in range(count)
        ]
        return steps + [text_completion(f"done {units}", input_units=units, output_units=1)]

    gateway_a = ScriptedGateway(script(10, 2), delay=0.01)
    gateway_b = ScriptedGateway(script(1000, 3), delay=0.005)
    loop_a = _loop(catalog, gateway_a)
    loop_b = _loop(catalog, gateway_b)

    async def both():
        return await asyncio.gather(
            loop_a.run("first", ListItemCollector()), loop_b.run("second", ListItemCollector())
        )

    result_a, result_b = asyncio.run(both())

    assert result_a.usage == UsageCounters(input_units=30, output_units=3)
    assert result_b.usage == UsageCounters(input_units=4000, output_units=4)
    assert result_a.counts == {"items_found": 6}
    assert result_b.counts == {"items_found": 9}
    assert first_user_text(gateway_a.calls[-1]["transcript"]) == "first"
    assert first_user_text(gateway_b.calls[-1]["transcript"]) == "second"


def test_shared_loop_runs_concurrently(catalog) -> None:
    """One AgentLoop instance can serve simultaneous conversations."""

    def reply(index: int):
        return text_completion(f"answer {index}", input_units=index + 1, output_units=0)

    gateway = ScriptedGateway([reply], delay=0.01)
    loop = _loop(catalog, gateway)

    async def many():
        return await asyncio.gather(*(loop.run(f"task {n}") for n in range(3)))

    results = asyncio.run(many())
    assert sorted(r.usage.input_units for r in results) == [1, 2, 3]
    for call in gateway.calls:
        assert len(call["transcript"]) == 1
        assert isinstance(call["transcript"][0], UserTurn)


def test_result_is_frozen(catalog) -> None:
    """AgentResult cannot be mutated after the run."""

    result = asyncio.run(_loop(catalog, ScriptedGateway([text_completion("x")])).run("task"))
    with pytest.raises(Exception):
        result.summary = "changed"


def test_assistant_turns_recorded(catalog) -> None:
    """The terminal assistant turn is part of the transcript the loop built."""

    gateway = ScriptedGateway([tool_completion(("c1", "ping", {})), text_completion("fin")])
    asyncio.run(_loop(catalog, gateway).run("task"))
    assert isinstance(gateway.calls[1]["transcript"][1], AssistantTurn)


@pytest.mark.parametrize("max_iterations", [0, -1])
def test_invalid_max_iterations(catalog, max_iterations: int) -> None:
    """Caps below one are rejected up front, never swapped for the default."""

    with pytest.raises(ValueError, match="max_iterations"):
        AgentLoop("test", catalog, ScriptedGateway([]), max_iterations=max_iterations)


def test_invalid_gateway_timeout(catalog) -> None:
    with pytest.raises(ValueError, match="gateway_timeout"):
        AgentLoop("test", catalog, ScriptedGateway([]), gateway_timeout=0)


def test_blocking_tools_in_concurrent_conversations() -> None:
    """A blocking sync tool in one conversation does not stall another."""

    registry = ToolRegistry("blocking_loop")

    @registry.register("slow_lookup")
    def slow_lookup(args: NoArgs) -> str:
        """Sleeps like a synchronous network call."""
        time.sleep(0.3)
        return "late"

    slow_catalog = registry.catalog()

    def script():
        return ScriptedGateway(
            [tool_completion(("s1", "slow_lookup", {})), text_completion("done")]
        )

    async def both():
        return await asyncio.gather(
            _loop(slow_catalog, script()).run("first"), _loop(slow_catalog, script()).run("second")
        )

    started = time.perf_counter()
    results = asyncio.run(both())
    elapsed = time.perf_counter() - started

    assert [result.summary for result in results] == ["done", "done"]
    assert elapsed < 0.55


def test_sync_tool_timeout_reaches_model() -> None:
    """A sync tool over its time limit is reported to the model as a failure."""

    registry = ToolRegistry("blocking_timeout")

    @registry.register("slow_lookup")
    def slow_lookup(args: NoArgs) -> str:
        """Sleeps past the tool timeout."""
        time.sleep(0.5)
        return "late"

    gateway = ScriptedGateway([tool_completion(("s1", "slow_lookup", {})), text_completion("ok")])
    asyncio.run(_loop(registry.catalog(), gateway, tool_timeout=0.05).run("task"))

    block = gateway.calls[1]["transcript"][2].content[0]
    assert block.is_error
    assert "timed out" in block.payload["error"]
