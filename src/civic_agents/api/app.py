"""
HTTP API for civic agents.

It exposes the following endpoints:
- **GET /health**             - liveness probe for health checks.
- **GET /agents**             - registered agents with their tool catalogs.
- **POST /agents/{name}/run** - run one agent to completion and return its ``AgentResult``.
- **POST /surveys**           - generate a survey with the survey builder.

Each request runs its own conversation; nothing is kept between requests.
"""

import logging
from functools import lru_cache
from typing import (
    Any,
    Dict,
    List,
)

from fastapi import (
    Body,
    Depends,
    FastAPI,
    HTTPException,
    status,
)
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from civic_agents.agent.gateway import (
    BaseGateway,
    load_gateway,
)
from civic_agents.agent.survey_builder import (
    GeneratedSurvey,
    SurveyBuilder,
    SurveyRequest,
)
from civic_agents.api.models import (
    AgentInfo,
    ErrorResponse,
)
from civic_agents.common import (
    AnsiColors,
    colored_print,
)
from civic_agents.config import settings
from civic_agents.core.errors import (
    GatewayError,
    MaxIterationsExceeded,
    SurveyGenerationError,
)
from civic_agents.core.schema import AgentResult
from civic_agents.profiles import (
    get_profile,
    list_profiles,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Civic Agents API",
    version="0.1.0",
    description="Tool-calling agents for ballots, grants, schools and community insight",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_gateway() -> BaseGateway:
    """Return the process-wide model gateway (stateless, shared by all conversations)."""
    return load_gateway()


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/health", summary="Health check")
async def health() -> dict[str, str]:
    """Return a simple liveness payload."""
    return {"status": "ok"}


@app.get("/agents", response_model=List[AgentInfo], summary="List agents")
async def list_agents() -> List[AgentInfo]:
    """List every agent profile with its input schema and tool catalog."""
    return [AgentInfo.model_validate(profile.describe()) for profile in list_profiles()]


@app.post(
    "/agents/{name}/run",
    response_model=AgentResult,
    responses={
        404: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
        508: {"model": ErrorResponse},
    },
    summary="Run an agent",
)
async def run_agent(
    name: str,
    inputs: Dict[str, Any] = Body(..., examples=[{"address": "123 Main St, Chicago, IL 60609"}]),
    gateway: BaseGateway = Depends(get_gateway),
) -> AgentResult:
    """Run the named agent on *inputs* and return its aggregated result."""
    try:
        profile = get_profile(name)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    try:
        request = profile.input_model.model_validate(inputs)
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.errors(include_url=False, include_context=False),
        ) from exc

    try:
        return await profile.run(request, gateway)
    except GatewayError as exc:
        logger.warning("Agent '%s' aborted: %s", name, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except MaxIterationsExceeded as exc:
        logger.warning("Agent '%s' aborted: %s", name, exc)
        raise HTTPException(status_code=status.HTTP_508_LOOP_DETECTED, detail=str(exc)) from exc


@app.post(
    "/surveys",
    response_model=GeneratedSurvey,
    responses={502: {"model": ErrorResponse}},
    summary="Generate a survey",
)
async def create_survey(
    req: SurveyRequest, gateway: BaseGateway = Depends(get_gateway)
) -> GeneratedSurvey:
    """Design a survey from a natural-language prompt."""
    try:
        return await SurveyBuilder(gateway).generate(req.prompt, req.point_of_view)
    except (GatewayError, SurveyGenerationError) as exc:
        logger.warning("Survey generation failed: %s", exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc


@app.get("/", summary="API root")
async def root() -> dict[str, str]:
    """Return a simple welcome message."""
    return {"message": "Welcome to the Civic Agents API! Use /docs for API documentation."}


# ---------------------------------------------------------------------------
# Public helper to launch the API (imported by main.py)
# ---------------------------------------------------------------------------
def run_api(
    host: str = "0.0.0.0", port: int = 8000, reload: bool = False, log_level: str | None = None
) -> None:
    """Start a uvicorn server hosting *app*.

    Parameters
    ----------
    host, port:
        Bind address for the HTTP server.
    reload:
        If *True*, enable auto-reload (useful in development).
    log_level:
        Logging level to use (default from settings if not provided).
    """

    # Lazy import - keeps uvicorn out of the import path for library use
    import uvicorn  # pylint: disable=import-outside-toplevel

    if log_level is None:  # Use the default from settings if not provided
        log_level = settings.LOG_LEVEL

    logger.info(
        "Starting Civic Agents API at %s:%d (reload=%s, log_level=%s)", host, port, reload, log_level
    )
    logger.debug("API settings: %s", settings.model_dump(exclude={"ANTHROPIC_API_KEY"}))

    colored_print(f"🏛️  Civic Agents API is running at http://localhost:{port}.", AnsiColors.GREEN)
    colored_print(f"Visit http://localhost:{port}/docs for API documentation.", AnsiColors.BLUE)
    uvicorn.run(
        "civic_agents.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )


# ---------------------------------------------------------------------------
# `python -m civic_agents.api.app` helper
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    run_api(reload=True)
