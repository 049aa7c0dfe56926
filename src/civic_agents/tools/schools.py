"""School discovery tools.  Sample data stands in for geospatial and school-ratings services."""

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

registry = ToolRegistry("schools")


class AddressInJurisdiction(BaseModel):
    address: str = Field(
        ..., description="Full address (e.g., '4605 South State Street, Chicago, IL 60609')"
    )
    jurisdiction: str = Field(
        ..., description="Municipality in 'City, State' format (e.g., 'Chicago, IL')"
    )


class SchoolLocation(BaseModel):
    school_name: str = Field(..., description="Name of the school")
    city: str = Field(..., description="City where school is located")
    state: str = Field(..., description="State abbreviation")


class SchoolName(BaseModel):
    school_name: str = Field(..., description="Name of the school")


class SchoolVerification(BaseModel):
    school_name: str = Field(..., description="School name to verify")
    data_points: List[Any] = Field(
        default_factory=list, description="Data from different sources to cross-validate"
    )


@registry.register("get_schools_serving_address")
def get_schools_serving_address(args: AddressInJurisdiction) -> List[Dict[str, Any]]:
    """Discover schools serving an address using geospatial data. Returns nearby schools within 5 miles with complete data."""  # noqa: E501
    return [
        {
            "name": "Washington Elementary School",
            "address": "4600 S State St, Chicago, IL 60609",
            "distance_miles": 0.3,
            "grades": "K-8",
            "enrollment": 450,
            "type": "Public Elementary",
            "phone": "(312) 555-0100",
        },
        {
            "name": "Lincoln High School",
            "address": "4900 S Wabash Ave, Chicago, IL 60615",
            "distance_miles": 1.2,
            "grades": "9-12",
            "enrollment": 1250,
            "type": "Public High School",
            "phone": "(312) 555-0200",
        },
        {
            "name": "Southside Montessori Academy",
            "address": "4700 S Michigan Ave, Chicago, IL 60653",
            "distance_miles": 0.8,
            "grades": "PreK-6",
            "enrollment": 180,
            "type": "Private/Charter",
            "phone": "(312) 555-0300",
        },
    ]


@registry.register("search_school_ratings")
def search_school_ratings(args: SchoolLocation) -> Dict[str, Any]:
    """Find school ratings and performance data including test scores, graduation rates, and overall ratings."""  # noqa: E501
    return {
        "school": args.school_name,
        "overall_rating": 7.5,
        "rating_scale": "1-10",
        "test_scores": {
            "reading_proficiency": 68,
            "math_proficiency": 72,
            "science_proficiency": 65,
        },
        "graduation_rate": 85,
        "college_readiness": 62,
        "sources": ["GreatSchools", "Illinois Report Card"],
    }


@registry.register("get_school_demographics")
def get_school_demographics(args: SchoolName) -> Dict[str, Any]:
    """Get detailed demographic information for a school including enrollment by grade, student-teacher ratio, and student diversity."""  # noqa: E501
    return {
        "school": args.school_name,
        "total_enrollment": 450,
        "student_teacher_ratio": 18,
        "enrollment_by_grade": {
            "Kindergarten": 65,
            "1st Grade": 62,
            "2nd Grade": 58,
            "3rd Grade": 55,
            "4th Grade": 52,
            "5th Grade": 50,
            "6th Grade": 48,
            "7th Grade": 32,
            "8th Grade": 28,
        },
        "demographics": {
            "African American": 75,
            "Hispanic": 15,
            "White": 5,
            "Asian": 3,
            "Other": 2,
        },
        "free_reduced_lunch": 78,
    }


@registry.register("verify_school_data")
def verify_school_data(args: SchoolVerification) -> Dict[str, Any]:
    """Cross-validate school information across multiple sources to assess data confidence level."""
    return {
        "school": args.school_name,
        "confidence_score": 0.92,
        "verified_fields": ["name", "address", "grades", "enrollment", "type"],
        "sources_checked": max(3, len(args.data_points)),
        "consistency": "High - data matches across all sources",
        "recommendation": "Data is highly reliable",
    }
