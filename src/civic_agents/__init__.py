"""Civic agents: tool-calling LLM agents for ballots, grants, schools and community insight."""

__version__ = "0.1.0"
