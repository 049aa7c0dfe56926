"""Dispatches tool invocations against a :class:`ToolCatalog` and wraps every error as a failure."""

import asyncio
import json
import logging
from typing import (
    Any,
    Dict,
)

from pydantic import (
    BaseModel,
    ValidationError,
)

from civic_agents.config import settings
from civic_agents.core.errors import ToolExecutionError
from civic_agents.core.schema import ToolOutcome
from civic_agents.tools import ToolCatalog

logger = logging.getLogger(__name__)


def _to_json_value(result: Any) -> Any:
    """Coerce *result* into plain JSON data, raising ``TypeError`` if it cannot be."""
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json")
    # Round-trip so tuples come back as lists, exactly as the model will see them
    return json.loads(json.dumps(result))


class ToolExecutor:
    """
    Execute tools by name.

    ``execute`` never raises for tool-level problems: unknown tools, malformed arguments,
    implementation errors, timeouts and non-serializable results all come back as
    ``ToolOutcome.failure`` so the model can adapt.  Cancellation still propagates.

    Synchronous tools run in a worker thread under the same timeout as async ones; a sync tool
    that times out finishes in its thread, but its result is discarded.
    """

    def __init__(self, catalog: ToolCatalog, timeout: float | None = None) -> None:
        self.catalog = catalog
        self.timeout = settings.TOOL_TIMEOUT if timeout is None else timeout

    async def execute(self, name: str, arguments: Dict[str, Any] | None = None) -> ToolOutcome:
        """
        Look up *name* in the catalog, validate *arguments* and invoke the tool.

        Parameters
        ----------
        name:
            The tool name requested by the model.
        arguments:
            Raw JSON arguments from the model.  If *None*, an empty dict is assumed.

        Returns
        -------
        ToolOutcome
            ``success`` with the JSON result, or ``failure`` with a human-readable reason.
        """
        if arguments is None:
            arguments = {}

        tool = self.catalog.get(name)
        if tool is None:
            logger.warning("Model requested unknown tool '%s'", name)
            return ToolOutcome.failure(f"unknown tool: '{name}' is not registered.")

        try:
            args = tool.args_model.model_validate(arguments)
        except ValidationError as exc:
            logger.warning("Invalid arguments for tool '%s': %s", name, exc)
            return ToolOutcome.failure(f"Invalid arguments for tool '{name}': {exc}")

        try:
            logger.debug("Executing tool '%s' with args=%s", name, arguments)
            if tool.is_async:
                call = tool.fn(args)
            else:
                # Worker thread keeps blocking tools off the event loop
                call = asyncio.to_thread(tool.fn, args)
            result = await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Tool '%s' timed out after %.1fs", name, self.timeout)
            return ToolOutcome.failure(f"Tool '{name}' timed out after {self.timeout}s")
        except ToolExecutionError as exc:
            logger.warning("Tool '%s' failed: %s", name, exc)
            return ToolOutcome.failure(str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unhandled error in tool '%s'", name)
            return ToolOutcome.failure(f"Tool '{name}' raised an error: {exc}")

        try:
            return ToolOutcome.success(_to_json_value(result))
        except (TypeError, ValueError) as exc:
            logger.warning("Tool '%s' returned a non-JSON result: %s", name, exc)
            return ToolOutcome.failure(f"Tool '{name}' returned a non-serializable result: {exc}")
