"""
Civic agents entry point.

This file handles startup concerns (arg-parsing, logging) and either launches the REST API or runs
agents once from the command line.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import (
    Any,
    Dict,
    List,
)

from civic_agents.agent.gateway import (
    BaseGateway,
    load_gateway,
)
from civic_agents.agent.survey_builder import SurveyBuilder
from civic_agents.common import (
    AnsiColors,
    colored_print,
    print_result,
)
from civic_agents.config import settings
from civic_agents.core.errors import AgentError
from civic_agents.profiles import (
    PROFILES,
    get_profile,
)

logger = logging.getLogger(__name__)

# Sample inputs used when a flag is not given on the command line
_DEFAULTS = {
    "address": "123 Main St, Chicago, IL 60609",
    "jurisdiction": "Matteson, IL",
    "query": "Find public safety grants for our community policing program",
    "prompt": "Create a survey about park safety concerns",
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _init_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _agent_inputs(name: str, args: argparse.Namespace) -> Dict[str, Any]:
    """Pick the CLI values the profile's input model declares."""
    fields = get_profile(name).input_model.model_fields
    return {
        field: getattr(args, field, None) or _DEFAULTS[field]
        for field in fields
        if field in _DEFAULTS
    }


async def _run_cli(args: argparse.Namespace, gateway: BaseGateway) -> None:
    targets: List[str] = ["survey"] + list(PROFILES) if args.agent == "all" else [args.agent]

    for target in targets:
        colored_print(f"\n🤖 {target.upper()} AGENT", AnsiColors.YELLOW)
        colored_print("-" * 70, AnsiColors.YELLOW)

        if target == "survey":
            survey = await SurveyBuilder(gateway).generate(
                args.prompt or _DEFAULTS["prompt"], args.pov
            )
            colored_print(f"✅ Generated survey: \"{survey.title}\"", AnsiColors.GREEN)
            colored_print(f"   Questions: {len(survey.questions)}", AnsiColors.BLUE)
            colored_print(f"   Reasoning: {survey.reasoning}", AnsiColors.BLUE)
            if args.json:
                print(survey.model_dump_json(by_alias=True, indent=2))
            continue

        profile = get_profile(target)
        result = await profile.run(_agent_inputs(target, args), gateway)
        print_result(result)
        if args.json:
            print(json.dumps(result.extras, indent=2))


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for the civic agents application.

    This function sets up the command-line interface, initializes logging, and either starts the
    API server or runs the requested agents in-process.
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(description="Run civic tool-calling agents")
    parser.add_argument(
        "--mode",
        choices=["api", "cli"],
        type=str.lower,
        default="cli",
        help="Launch the REST API or run agents once from the CLI (default: cli)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical"],
        type=str.lower,
        default=settings.LOG_LEVEL,
        help="Logging level (default from env: %(default)s)",
    )
    parser.add_argument(
        "--agent",
        choices=sorted(PROFILES) + ["survey", "all"],
        type=str.lower,
        default="all",
        help="Agent to run in CLI mode (default: %(default)s)",
    )
    parser.add_argument("--address", help="Address for the ballot and schools agents")
    parser.add_argument("--jurisdiction", help="Jurisdiction, e.g. 'Matteson, IL'")
    parser.add_argument("--query", help="What the grants agent should look for")
    parser.add_argument("--prompt", help="Survey description for the survey builder")
    parser.add_argument(
        "--pov", default="municipality_to_resident", help="Survey point of view"
    )
    parser.add_argument("--json", action="store_true", help="Also print structured output")
    args = parser.parse_args(argv)

    # Override log level setting with command-line argument
    settings.LOG_LEVEL = args.log_level

    _init_logging(settings.LOG_LEVEL)

    logger.info("Starting civic agents [%s mode]", args.mode)
    logger.debug("Settings: %s", settings.model_dump(exclude={"ANTHROPIC_API_KEY"}))

    if args.mode == "api":
        # Lazy import to avoid web dependencies if not needed
        from civic_agents.api.app import (  # pylint: disable=import-outside-toplevel
            run_api,
        )

        run_api(host="0.0.0.0", port=settings.API_PORT, reload=settings.DEBUG)
        return

    try:
        asyncio.run(_run_cli(args, load_gateway()))
    except AgentError as exc:
        colored_print(f"❌ {exc}", AnsiColors.RED)
        sys.exit(1)


if __name__ == "__main__":
    main()
