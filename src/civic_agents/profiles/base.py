"""Agent profile: what one civic agent asks, with which tools, and what it reports back."""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Mapping,
    Type,
)

from pydantic import BaseModel

from civic_agents.agent.agent_loop import AgentLoop
from civic_agents.agent.findings import FindingsCollector
from civic_agents.agent.gateway import BaseGateway
from civic_agents.core.schema import AgentResult
from civic_agents.tools import ToolCatalog


@dataclass(frozen=True)
class AgentProfile:
    """Static definition of one tool-calling agent."""

    name: str
    description: str
    catalog: ToolCatalog
    input_model: Type[BaseModel]
    build_task: Callable[[Any], str]
    collector_factory: Callable[[], FindingsCollector] = FindingsCollector
    system: str | None = None

    def loop(self, gateway: BaseGateway, **overrides: Any) -> AgentLoop:
        """Build an :class:`AgentLoop` for this profile; *overrides* go to its constructor."""
        return AgentLoop(self.name, self.catalog, gateway, system=self.system, **overrides)

    async def run(
        self, inputs: Mapping[str, Any] | BaseModel, gateway: BaseGateway, **overrides: Any
    ) -> AgentResult:
        """
        Validate *inputs*, seed the task prompt and run a fresh conversation.

        Raises ``pydantic.ValidationError`` for bad inputs, and whatever
        :meth:`AgentLoop.run` raises.
        """
        if isinstance(inputs, BaseModel):
            inputs = inputs.model_dump()
        request = self.input_model.model_validate(inputs)
        task = self.build_task(request)
        return await self.loop(gateway, **overrides).run(task, self.collector_factory())

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_model.model_json_schema(),
            "tools": [descriptor.model_dump() for descriptor in self.catalog.descriptors()],
        }
