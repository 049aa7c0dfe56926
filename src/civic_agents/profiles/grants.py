"""Grant discovery: match federal and foundation grants to a jurisdiction."""

from typing import (
    Any,
    Dict,
)

from pydantic import (
    BaseModel,
    Field,
)

from civic_agents.agent.findings import ListItemCollector
from civic_agents.core.schema import (
    ToolInvocationBlock,
    ToolOutcome,
)
from civic_agents.profiles.base import AgentProfile
from civic_agents.tools.grants import registry


class GrantRequest(BaseModel):
    jurisdiction: str = Field(..., min_length=1, examples=["Matteson, IL"])
    query: str = Field(
        ..., min_length=1, examples=["Find public safety grants for our community policing program"]
    )


def build_task(request: GrantRequest) -> str:
    return f"""I need help finding grants for {request.jurisdiction}. {request.query}

Please:
1. Get demographic profile for the jurisdiction to understand eligibility
2. Search relevant federal and foundation grant databases
3. Match grants to jurisdiction's eligibility
4. Provide recommendations with reasoning"""


class GrantFindings(ListItemCollector):
    """Grants found, plus the confidence of each eligibility check."""

    count_key = "total_matches"

    def __init__(self) -> None:
        super().__init__()
        self.eligibility_scores: Dict[str, float] = {}

    def observe(self, invocation: ToolInvocationBlock, outcome: ToolOutcome) -> None:
        super().observe(invocation, outcome)
        if outcome.ok and invocation.tool_name == "match_grant_eligibility":
            requirements = invocation.arguments.get("grant_requirements") or {}
            key = (
                requirements.get("title")
                or requirements.get("grant")
                or invocation.arguments.get("jurisdiction", "")
            )
            self.eligibility_scores[str(key)] = float(outcome.value.get("confidence", 0.0))

    def extras(self) -> Dict[str, Any]:
        return {"eligibility_scores": dict(self.eligibility_scores)}


PROFILE = AgentProfile(
    name="grants",
    description="Discover grants a jurisdiction is eligible for",
    catalog=registry.catalog(),
    input_model=GrantRequest,
    build_task=build_task,
    collector_factory=GrantFindings,
)
