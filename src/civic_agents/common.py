"""Common console helpers for the project."""

from enum import Enum
from typing import Any

from civic_agents.core.schema import AgentResult


class AnsiColors(Enum):
    """
    ANSI color codes for terminal output.
    """

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[33m"
    BLUE = "\033[94m"

    def __str__(self) -> str:
        return self.value


def colored_print(text: str, color: AnsiColors, *args: Any, **kwargs: Any) -> None:
    """
    Print text in color.

    Args:
        text: The text to print
        color: The color to use (AnsiColors enum)
        args: Additional positional arguments for print
        kwargs: Additional keyword arguments for print
    """
    print(f"{color}{text}\033[0m", *args, **kwargs)  # ANSI reset at the end


def print_result(result: AgentResult) -> None:
    """Pretty-print an :class:`AgentResult` to the console."""
    colored_print(f"\n✅ {result.agent} agent finished ({result.stop_reason})", AnsiColors.GREEN)
    for key, value in result.counts.items():
        colored_print(f"   {key.replace('_', ' ')}: {value}", AnsiColors.BLUE)
    colored_print(
        f"   model calls: {result.iterations}, "
        f"units used: {result.usage.total} "
        f"({result.usage.input_units} in / {result.usage.output_units} out)",
        AnsiColors.BLUE,
    )
    colored_print(f"\n📊 Summary:\n{result.summary}", AnsiColors.YELLOW)
