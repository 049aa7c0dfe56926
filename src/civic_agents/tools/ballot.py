"""Ballot research tools.  Sample data stands in for election-board and news APIs."""

from __future__ import annotations

from typing import (
    Any,
    Dict,
    List,
)

from pydantic import (
    BaseModel,
    Field,
)

from civic_agents.tools import ToolRegistry

registry = ToolRegistry("ballot")


class VoterAddress(BaseModel):
    address: str = Field(..., description="Full voter address (street, city, state, ZIP)")


class CandidateOffice(BaseModel):
    candidate_name: str = Field(..., description="Full name of the candidate")
    office: str = Field(
        ...,
        description="Office they're running for (e.g., 'Circuit Court Judge', "
        "'State Representative')",
    )


class CandidateNewsQuery(BaseModel):
    candidate_name: str = Field(..., description="Full name of the candidate")
    days_back: int = Field(90, ge=1, description="How many days back to search (default: 90)")


@registry.register("get_voter_ballot")
def get_voter_ballot(args: VoterAddress) -> Dict[str, Any]:
    """Get the complete ballot for a voter based on their address. Returns all races and candidates they will see on election day."""  # noqa: E501
    return {
        "address": args.address,
        "election_date": "2024-11-05",
        "races": [
            {
                "office": "Circuit Court Judge - Cook County",
                "candidates": [
                    {"name": "John Smith", "party": "Democrat"},
                    {"name": "Mary Johnson", "party": "Republican"},
                ],
            },
            {
                "office": "State Representative District 30",
                "candidates": [
                    {"name": "Robert Williams", "party": "Democrat"},
                    {"name": "Sarah Davis", "party": "Republican"},
                    {"name": "Michael Brown", "party": "Independent"},
                ],
            },
        ],
    }


@registry.register("research_candidate_background")
def research_candidate_background(args: CandidateOffice) -> Dict[str, Any]:
    """Research a candidate's background, education, professional experience, and qualifications using web search."""  # noqa: E501
    return {
        "name": args.candidate_name,
        "office": args.office,
        "background": {
            "education": "JD from Northwestern University Law School, BA from University of Illinois",
            "experience": "15 years as practicing attorney, 5 years as public defender",
            "previous_offices": ["None - first campaign for elected office"],
            "endorsements": ["Illinois Bar Association", "Chicago Tribune Editorial Board"],
            "key_qualifications": "Extensive trial experience, focus on criminal justice reform",
        },
    }


@registry.register("get_campaign_finance")
def get_campaign_finance(args: CandidateOffice) -> Dict[str, Any]:
    """Get campaign finance data showing fundraising, spending, and top donors."""
    return {
        "candidate": args.candidate_name,
        "total_raised": 245000,
        "total_spent": 198000,
        "cash_on_hand": 47000,
        "top_donors": [
            {"name": "Illinois Trial Lawyers Association", "amount": 10000},
            {"name": "Individual donations under $100", "amount": 45000},
        ],
        "data_source": "Illinois State Board of Elections",
    }


@registry.register("search_candidate_news")
def search_candidate_news(args: CandidateNewsQuery) -> List[Dict[str, Any]]:
    """Search for recent news coverage about a candidate."""
    return [
        {
            "title": f"{args.candidate_name} announces criminal justice reform platform",
            "source": "Chicago Tribune",
            "date": "2024-09-15",
            "summary": "Candidate proposes reforms to reduce pretrial detention",
        },
        {
            "title": f"{args.candidate_name} endorsed by local community groups",
            "source": "Cook County Chronicle",
            "date": "2024-10-01",
            "summary": "Receives endorsements from 12 community organizations",
        },
    ]
