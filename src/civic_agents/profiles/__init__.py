"""
Registry of the civic agent profiles.

Profiles are looked up by name (``ballot``, ``grants``, ``schools``, ``community``) from the CLI and
the HTTP API.
"""

from typing import (
    Dict,
    List,
)

from civic_agents.profiles import (
    ballot,
    community,
    grants,
    schools,
)
from civic_agents.profiles.base import AgentProfile

PROFILES: Dict[str, AgentProfile] = {
    profile.name: profile
    for profile in (grants.PROFILE, ballot.PROFILE, schools.PROFILE, community.PROFILE)
}


def get_profile(name: str) -> AgentProfile:
    """Return the profile registered under *name*; raises ``KeyError`` if there is none."""
    try:
        return PROFILES[name.lower()]
    except KeyError:
        raise KeyError(f"Agent '{name}' is not registered.") from None


def list_profiles() -> List[AgentProfile]:
    return list(PROFILES.values())


__all__ = ["AgentProfile", "PROFILES", "get_profile", "list_profiles"]
