"""Community insight tools.  Sample data stands in for survey, 311 and social media feeds."""

from __future__ import annotations

from typing import (
    Any,
    Dict,
    List,
    Optional,
)

from pydantic import (
    BaseModel,
    Field,
)

from civic_agents.tools import ToolRegistry

registry = ToolRegistry("community")

_FEEDBACK = [
    {
        "id": 1,
        "text": "The lighting in Central Park is inadequate, making it unsafe after dark",
        "sentiment": "negative",
        "category": "public_safety",
        "date": "2024-10-15",
    },
    {
        "id": 2,
        "text": "We need more after-school programs for middle school students",
        "sentiment": "neutral",
        "category": "education",
        "date": "2024-10-16",
    },
    {
        "id": 3,
        "text": "Potholes on Main Street are getting worse every month",
        "sentiment": "negative",
        "category": "infrastructure",
        "date": "2024-10-17",
    },
]


class FeedbackQuery(BaseModel):
    jurisdiction: str = Field(..., description="Municipality name (e.g., 'Matteson, IL')")
    limit: int = Field(100, ge=1, description="Maximum entries to return (default: 100)")
    category_filter: Optional[str] = Field(
        None,
        description="Optional category filter (e.g., 'infrastructure', 'public_safety')",
    )


class ServiceRequestQuery(BaseModel):
    jurisdiction: str = Field(..., description="Municipality name")
    days_back: int = Field(90, ge=1, description="Days of historical data (default: 90)")


class SocialMediaQuery(BaseModel):
    jurisdiction: str = Field(..., description="Municipality name")
    sources: List[str] = Field(
        default_factory=list,
        description="Sources to include (e.g., ['facebook', 'twitter', 'youtube'])",
    )
    days_back: int = Field(30, ge=1, description="Historical data window in days (default: 30)")


class ClusterRequest(BaseModel):
    data_sources: List[Any] = Field(..., description="Data sources with items to cluster")
    max_clusters: int = Field(10, ge=1, description="Maximum issue clusters (default: 10)")


class ActionPlanRequest(BaseModel):
    issues: List[Any] = Field(..., description="Identified issues to address")
    constraints: Dict[str, Any] = Field(
        default_factory=dict, description="Budget and resource constraints"
    )


@registry.register("fetch_community_feedback")
def fetch_community_feedback(args: FeedbackQuery) -> List[Dict[str, Any]]:
    """Retrieve community feedback from surveys and resident input. Returns feedback with text, sentiment, and categories."""  # noqa: E501
    items = [
        item
        for item in _FEEDBACK
        if args.category_filter is None or item["category"] == args.category_filter
    ]
    return items[: args.limit]


@registry.register("fetch_311_service_requests")
def fetch_311_service_requests(args: ServiceRequestQuery) -> Dict[str, Any]:
    """Get 311 service request data showing types, statuses, locations, and resolution times."""
    return {
        "total_requests": 452,
        "top_categories": [
            {"type": "Pothole", "count": 89, "avg_resolution_days": 12},
            {"type": "Streetlight Out", "count": 67, "avg_resolution_days": 8},
            {"type": "Graffiti Removal", "count": 45, "avg_resolution_days": 5},
            {"type": "Tree Trimming", "count": 38, "avg_resolution_days": 21},
        ],
        "recent_trends": "Pothole requests increased 35% in last 30 days",
    }


@registry.register("fetch_social_media_insights")
def fetch_social_media_insights(args: SocialMediaQuery) -> Dict[str, Any]:
    """Get social media data from municipal pages and community groups. Returns posts, comments, and sentiment."""  # noqa: E501
    return {
        "posts_analyzed": 234,
        "top_topics": [
            {"topic": "Park safety concerns", "mentions": 45, "sentiment": -0.6},
            {"topic": "Road maintenance", "mentions": 38, "sentiment": -0.7},
            {"topic": "Community events", "mentions": 32, "sentiment": 0.8},
            {"topic": "School funding", "mentions": 28, "sentiment": -0.4},
        ],
        "overall_sentiment": -0.2,
        "engagement_rate": 0.15,
    }


@registry.register("cluster_similar_issues")
def cluster_similar_issues(args: ClusterRequest) -> Dict[str, Any]:
    """Use AI to cluster and categorize similar concerns across data sources into thematic issues."""
    clusters = [
        {
            "theme": "Infrastructure Maintenance",
            "count": 127,
            "severity": "high",
            "examples": ["potholes", "road repair", "sidewalk cracks"],
            "affected_areas": ["Main Street", "Oak Avenue", "Park Road"],
        },
        {
            "theme": "Public Safety & Lighting",
            "count": 92,
            "severity": "high",
            "examples": ["inadequate lighting", "park safety", "security cameras"],
            "affected_areas": ["Central Park", "Downtown", "Residential areas"],
        },
        {
            "theme": "Youth Programs & Education",
            "count": 60,
            "severity": "medium",
            "examples": ["after-school programs", "library hours", "sports facilities"],
            "affected_areas": ["Community Center", "Schools", "Parks"],
        },
    ]
    return {"clusters": clusters[: args.max_clusters]}


@registry.register("generate_action_plan")
def generate_action_plan(args: ActionPlanRequest) -> Dict[str, Any]:
    """Generate prioritized action plan based on identified issues with recommendations and resource estimates."""  # noqa: E501
    return {
        "priorities": [
            {
                "rank": 1,
                "issue": "Infrastructure Maintenance",
                "action": "Emergency pothole repair program for Main Street corridor",
                "estimated_cost": "$75,000",
                "timeline": "30 days",
                "impact": "Addresses 127 resident complaints and improves safety",
                "funding_sources": ["Municipal budget", "State infrastructure grants"],
            },
            {
                "rank": 2,
                "issue": "Public Safety & Lighting",
                "action": "Install LED lighting in Central Park and high-traffic areas",
                "estimated_cost": "$50,000",
                "timeline": "45 days",
                "impact": "Addresses 92 safety concerns, reduces crime risk",
                "funding_sources": ["Community Safety Grant", "Energy efficiency rebates"],
            },
            {
                "rank": 3,
                "issue": "Youth Programs",
                "action": "Expand after-school programs at Community Center",
                "estimated_cost": "$25,000/year",
                "timeline": "60 days to launch",
                "impact": "Serves 60+ families, addresses education gap",
                "funding_sources": ["State education funds", "Private foundations"],
            },
        ],
        "total_estimated_cost": "$150,000 initial + $25K/year ongoing",
        "grant_opportunities": 3,
    }
