"""Main orchestration loop: model call -> tool dispatch -> model call ... -> final answer."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import List

from civic_agents.agent.findings import FindingsCollector
from civic_agents.agent.gateway import BaseGateway
from civic_agents.agent.tool_executor import ToolExecutor
from civic_agents.config import settings
from civic_agents.core.conversation import Conversation
from civic_agents.core.errors import (
    ConversationError,
    GatewayError,
    MaxIterationsExceeded,
)
from civic_agents.core.schema import (
    NO_SUMMARY_PLACEHOLDER,
    AgentResult,
    Completion,
    ToolInvocationBlock,
    ToolOutcome,
    ToolResultBlock,
)
from civic_agents.tools import ToolCatalog

logger = logging.getLogger(__name__)


class LoopState(str, Enum):
    """States of one conversation."""

    AWAITING_MODEL = "awaiting_model"
    DISPATCHING_TOOLS = "dispatching_tools"
    DONE = "done"


@dataclass
class _Run:
    """Everything owned by a single conversation; never shared between runs."""

    conversation: Conversation
    collector: FindingsCollector
    state: LoopState = LoopState.AWAITING_MODEL
    iteration: int = 0


# ---------------------------------------------------------------------------
# Agent Loop
# ---------------------------------------------------------------------------
class AgentLoop:
    """
    Drive the tool-calling cycle for one agent.

    The loop object holds only read-only configuration (catalog, gateway, limits), so a single
    instance can serve any number of concurrent :meth:`run` calls; each run builds its own
    transcript, usage counters and findings.

    Usage::

        loop = AgentLoop("ballot", registry.catalog(), load_gateway())
        result = await loop.run("I'm a voter at ...")
        print(result.summary, result.usage.total)
    """

    def __init__(
        self,
        name: str,
        catalog: ToolCatalog,
        gateway: BaseGateway,
        *,
        system: str | None = None,
        max_iterations: int | None = None,
        gateway_timeout: float | None = None,
        tool_timeout: float | None = None,
        parallel_tool_calls: bool | None = None,
    ) -> None:
        self.name = name
        self.catalog = catalog
        self.gateway = gateway
        self.system = system
        self.max_iterations = (
            settings.MAX_ITERATIONS if max_iterations is None else max_iterations
        )
        self.gateway_timeout = (
            settings.GATEWAY_TIMEOUT if gateway_timeout is None else gateway_timeout
        )
        self.parallel_tool_calls = (
            settings.PARALLEL_TOOL_CALLS if parallel_tool_calls is None else parallel_tool_calls
        )
        self.executor = ToolExecutor(catalog, timeout=tool_timeout)

        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if self.gateway_timeout <= 0:
            raise ValueError("gateway_timeout must be positive")

    async def run(self, task: str, collector: FindingsCollector | None = None) -> AgentResult:
        """
        Run one conversation seeded with *task* until the model finishes.

        Raises
        ------
        GatewayError
            The model call failed, timed out or returned a malformed completion.
        MaxIterationsExceeded
            The model was still requesting tools after ``max_iterations`` calls.
        """
        run = _Run(conversation=Conversation(task), collector=collector or FindingsCollector())
        logger.info("[%s] Starting agent run (max %d iterations)", self.name, self.max_iterations)

        while run.iteration < self.max_iterations:
            run.iteration += 1
            completion = await self._call_model(run)

            if completion.is_terminal:
                self._enter(run, LoopState.DONE)
                return self._finish(run, completion)

            self._enter(run, LoopState.DISPATCHING_TOOLS)
            results = await self._dispatch(run, completion.assistant_turn.invocations)
            run.conversation.append_tool_results(results)
            self._enter(run, LoopState.AWAITING_MODEL)

        logger.error(
            "[%s] Giving up after %d iterations (%d units used)",
            self.name,
            run.iteration,
            run.conversation.usage.total,
        )
        raise MaxIterationsExceeded(run.iteration, run.conversation.usage)

    # ------------------------------------------------------------------ #
    # Steps
    # ------------------------------------------------------------------ #
    def _enter(self, run: _Run, state: LoopState) -> None:
        logger.debug(
            "[%s] Iteration %d: %s -> %s", self.name, run.iteration, run.state.value, state.value
        )
        run.state = state

    async def _call_model(self, run: _Run) -> Completion:
        conversation = run.conversation
        logger.debug("[%s] Iteration %d: calling model gateway", self.name, run.iteration)
        try:
            completion = await asyncio.wait_for(
                self.gateway.complete(conversation.turns, self.catalog, system=self.system),
                timeout=self.gateway_timeout,
            )
        except asyncio.TimeoutError as exc:
            logger.error("[%s] Model gateway timed out", self.name)
            raise GatewayError(
                f"Model gateway timed out after {self.gateway_timeout}s"
            ) from exc
        except GatewayError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.error("[%s] Model gateway failed: %s", self.name, exc)
            raise GatewayError(f"Model gateway failed: {exc}") from exc

        total = conversation.record_usage(completion.usage)
        logger.info(
            "[%s] Iteration %d: stop_reason=%s, usage %d/%d (total %d)",
            self.name,
            run.iteration,
            completion.stop_reason,
            completion.usage.input_units,
            completion.usage.output_units,
            total.total,
        )

        turn = completion.assistant_turn
        try:
            conversation.append_assistant(turn)
        except ConversationError as exc:
            raise GatewayError(f"Malformed completion: {exc}") from exc

        if not completion.is_terminal:
            if not turn.invocations:
                raise GatewayError("Malformed completion: tool_use without any tool invocation")
            for text in turn.texts:
                logger.debug("[%s] Intermediate assistant text: %s", self.name, text)
        return completion

    async def _dispatch(
        self, run: _Run, invocations: List[ToolInvocationBlock]
    ) -> List[ToolResultBlock]:
        logger.info(
            "[%s] Dispatching %d tool calls: %s",
            self.name,
            len(invocations),
            [block.tool_name for block in invocations],
        )

        results: List[ToolResultBlock] = []
        if self.parallel_tool_calls:
            outcomes = await asyncio.gather(
                *(self.executor.execute(block.tool_name, block.arguments) for block in invocations)
            )
            for block, outcome in zip(invocations, outcomes):
                self._observe(run, block, outcome)
                results.append(outcome.to_result_block(block.invocation_id))
            return results

        for block in invocations:
            outcome = await self.executor.execute(block.tool_name, block.arguments)
            self._observe(run, block, outcome)
            results.append(outcome.to_result_block(block.invocation_id))
        return results

    def _observe(self, run: _Run, block: ToolInvocationBlock, outcome: ToolOutcome) -> None:
        if not outcome.ok:
            logger.warning("[%s] Tool '%s' failed: %s", self.name, block.tool_name, outcome.error)
        try:
            run.collector.observe(block, outcome)
        except Exception:  # noqa: BLE001
            logger.exception("[%s] Findings collector failed on '%s'", self.name, block.tool_name)

    def _finish(self, run: _Run, completion: Completion) -> AgentResult:
        turn = completion.assistant_turn
        if turn.invocations:
            logger.warning(
                "[%s] Ignoring %d tool calls on terminal turn", self.name, len(turn.invocations)
            )
        summary = turn.first_text()
        if summary is None:
            summary = NO_SUMMARY_PLACEHOLDER

        result = AgentResult(
            agent=self.name,
            summary=summary,
            findings=list(run.collector.findings),
            counts=run.collector.counts(),
            extras=run.collector.extras(),
            usage=run.conversation.usage,
            iterations=run.iteration,
            stop_reason=completion.stop_reason,
        )
        logger.info(
            "[%s] Done after %d iterations (%d units used)",
            self.name,
            result.iterations,
            result.usage.total,
        )
        return result
