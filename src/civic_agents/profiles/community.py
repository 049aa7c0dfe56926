"""Community insight: turn resident feedback into a prioritized action plan."""

from typing import (
    Any,
    Dict,
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
from civic_agents.tools.community import registry


class CommunityRequest(BaseModel):
    jurisdiction: str = Field(..., min_length=1, examples=["Matteson, IL"])


def build_task(request: CommunityRequest) -> str:
    return f"""I need a comprehensive analysis of community concerns for {request.jurisdiction}.

Please:
1. Fetch community feedback from surveys and resident input
2. Get 311 service request data to identify systemic issues
3. Analyze social media to understand public sentiment
4. Cluster similar issues across all data sources
5. Generate a prioritized action plan with cost estimates and funding sources

Focus on identifying the most pressing issues that affect the most residents."""


class CommunityFindings(FindingsCollector):
    """Counts feedback and issue clusters; keeps the latest action plan."""

    def __init__(self) -> None:
        super().__init__()
        self.feedback_analyzed = 0
        self.issues_clustered = 0
        self.action_plan: Dict[str, Any] | None = None

    def observe(self, invocation: ToolInvocationBlock, outcome: ToolOutcome) -> None:
        super().observe(invocation, outcome)
        if not outcome.ok:
            return
        if invocation.tool_name == "fetch_community_feedback" and isinstance(outcome.value, list):
            self.feedback_analyzed += len(outcome.value)
        elif invocation.tool_name == "cluster_similar_issues":
            self.issues_clustered = len(outcome.value.get("clusters", []))
        elif invocation.tool_name == "generate_action_plan":
            self.action_plan = outcome.value

    def counts(self) -> Dict[str, int]:
        return {
            "feedback_analyzed": self.feedback_analyzed,
            "issues_clustered": self.issues_clustered,
        }

    def extras(self) -> Dict[str, Any]:
        return {"action_plan": self.action_plan}


PROFILE = AgentProfile(
    name="community",
    description="Analyze community concerns and draft an action plan",
    catalog=registry.catalog(),
    input_model=CommunityRequest,
    build_task=build_task,
    collector_factory=CommunityFindings,
)
