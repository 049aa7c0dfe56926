"""Ballot research: find every race on a voter's ballot and research the candidates."""

from typing import (
    Any,
    Dict,
    Set,
)

from pydantic import (
    BaseModel,
    Field,
)

from civic_agents.agent.findings import FindingsCollector
from civic_agents.core.schema import (
    ToolInvocationBlock,
    ToolOutcome,
)
from civic_agents.profiles.base import AgentProfile
from civic_agents.tools.ballot import registry


class BallotRequest(BaseModel):
    address: str = Field(..., min_length=1, description="Voter's full address")


def build_task(request: BallotRequest) -> str:
    return f"""I'm a voter at this address: {request.address}

Please help me research my ballot:
1. Find all races and candidates I'll see on election day
2. Research each candidate's background and qualifications
3. Look up their campaign finance data
4. Search for recent news coverage
5. Provide a summary comparing the candidates in each race"""


class BallotFindings(FindingsCollector):
    """Keeps every tool result and counts races seen and candidates researched."""

    def __init__(self) -> None:
        super().__init__()
        self.races: Set[str] = set()
        self.candidates: Set[str] = set()

    def observe(self, invocation: ToolInvocationBlock, outcome: ToolOutcome) -> None:
        super().observe(invocation, outcome)
        if not outcome.ok:
            return
        if invocation.tool_name == "get_voter_ballot":
            for race in outcome.value.get("races", []):
                self.races.add(race.get("office", ""))
        elif invocation.tool_name == "research_candidate_background":
            self.candidates.add(invocation.arguments.get("candidate_name", ""))

    def counts(self) -> Dict[str, int]:
        return {
            "candidates_researched": len(self.candidates),
            "races_analyzed": len(self.races),
            "findings": len(self.findings),
        }

    def extras(self) -> Dict[str, Any]:
        return {"races": sorted(self.races)}


PROFILE = AgentProfile(
    name="ballot",
    description="Research every candidate on a voter's ballot",
    catalog=registry.catalog(),
    input_model=BallotRequest,
    build_task=build_task,
    collector_factory=BallotFindings,
)
