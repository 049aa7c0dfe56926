"""School discovery: schools serving an address, with ratings and demographics."""

from pydantic import (
    BaseModel,
    Field,
)

from civic_agents.agent.findings import ListItemCollector
from civic_agents.profiles.base import AgentProfile
from civic_agents.tools.schools import registry


class SchoolRequest(BaseModel):
    address: str = Field(..., min_length=1)
    jurisdiction: str = Field(..., min_length=1, description="'City, State'")


def build_task(request: SchoolRequest) -> str:
    return f"""I need to find schools for this address: {request.address} in {request.jurisdiction}

Please help me:
1. Discover all schools serving this address (within 5 miles)
2. Get ratings and performance data for each school
3. Look up enrollment and demographic information
4. Verify the data accuracy
5. Provide a comparison and recommendations for families"""


class SchoolFindings(ListItemCollector):
    count_key = "schools_found"


PROFILE = AgentProfile(
    name="schools",
    description="Find and compare schools serving an address",
    catalog=registry.catalog(),
    input_model=SchoolRequest,
    build_task=build_task,
    collector_factory=SchoolFindings,
)
