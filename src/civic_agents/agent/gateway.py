"""
Model gateway for civic agents.

This module is the only place that *directly* calls an LLM.  Everything else (agent loop, tools,
profiles) stays model-agnostic and speaks the data model in :mod:`civic_agents.core.schema`.

One operation matters: :meth:`BaseGateway.complete` takes the transcript and the tool catalog and
returns one :class:`Completion`.  The Anthropic Messages API is supported out of the box;
additional back-ends can be added by subclassing :class:`BaseGateway` and registering via
:func:`register_gateway`.
"""

import json
import logging
from abc import (
    ABC,
    abstractmethod,
)
from typing import (
    Any,
    Callable,
    Dict,
    List,
    Sequence,
    Type,
    Union,
)

import anthropic
import httpx
from pydantic import ValidationError

from civic_agents.config import settings
from civic_agents.core.errors import GatewayError
from civic_agents.core.schema import (
    AssistantTurn,
    Completion,
    TextBlock,
    ToolInvocationBlock,
    ToolResultBlock,
    Turn,
    UsageCounters,
    UserTurn,
)
from civic_agents.tools import ToolCatalog

logger = logging.getLogger(__name__)

Transcript = Sequence[Turn]


# ---------------------------------------------------------------------------
# Registry helpers
# ---------------------------------------------------------------------------
_GATEWAY_REGISTRY: dict[str, Type["BaseGateway"]] = {}


def register_gateway(name: str) -> Callable:
    """Decorator to register a gateway class under *name*."""

    def wrapper(cls: Type["BaseGateway"]) -> Type["BaseGateway"]:
        _GATEWAY_REGISTRY[name] = cls
        return cls

    return wrapper


def load_gateway(name: str | None = None) -> "BaseGateway":
    """
    Factory that returns an instantiated gateway.

    Fallback order:
    1. *name* arg
    2. ``settings.GATEWAY`` env option
    3. default: ``"anthropic"``
    """

    target = name or getattr(settings, "GATEWAY", "anthropic")
    cls = _GATEWAY_REGISTRY.get(target.lower())
    if cls is None:
        raise ValueError(f"Gateway '{target}' is not registered.")
    return cls()


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------
class BaseGateway(ABC):
    """Abstract gateway: transcript + catalog -> one completion."""

    @abstractmethod
    async def complete(
        self,
        transcript: Transcript,
        catalog: ToolCatalog,
        system: str | None = None,
    ) -> Completion:
        """Return the model's next assistant turn, its stop reason and usage counters."""


# ---------------------------------------------------------------------------
# Anthropic wire format
# ---------------------------------------------------------------------------
def catalog_to_wire(catalog: ToolCatalog) -> List[Dict[str, Any]]:
    """Serialize tool descriptors as ``{name, description, input_schema}`` triples."""
    return [descriptor.model_dump() for descriptor in catalog.descriptors()]


def _result_to_wire(block: ToolResultBlock) -> Dict[str, Any]:
    wire: Dict[str, Any] = {
        "type": "tool_result",
        "tool_use_id": block.invocation_id,
        "content": json.dumps(block.payload),
    }
    if block.is_error:
        wire["is_error"] = True
    return wire


def turn_to_wire(turn: Union[UserTurn, AssistantTurn]) -> Dict[str, Any]:
    """Convert one turn into a Messages API ``MessageParam``."""
    if isinstance(turn, UserTurn):
        if isinstance(turn.content, str):
            return {"role": "user", "content": turn.content}
        return {"role": "user", "content": [_result_to_wire(block) for block in turn.content]}

    content: List[Dict[str, Any]] = []
    for block in turn.content:
        if isinstance(block, TextBlock):
            content.append({"type": "text", "text": block.text})
        elif isinstance(block, ToolInvocationBlock):
            content.append(
                {
                    "type": "tool_use",
                    "id": block.invocation_id,
                    "name": block.tool_name,
                    "input": block.arguments,
                }
            )
    return {"role": "assistant", "content": content}


def completion_from_message(message: Any) -> Completion:
    """Map an Anthropic ``Message`` onto :class:`Completion`; unknown block types are dropped."""
    blocks: List[Union[TextBlock, ToolInvocationBlock]] = []
    for block in message.content:
        if block.type == "text":
            blocks.append(TextBlock(text=block.text))
        elif block.type == "tool_use":
            blocks.append(
                ToolInvocationBlock(
                    invocation_id=block.id, tool_name=block.name, arguments=block.input or {}
                )
            )
        else:
            logger.debug("Ignoring content block of type '%s'", block.type)

    try:
        return Completion(
            assistant_turn=AssistantTurn(content=blocks),
            stop_reason=message.stop_reason or "",
            usage=UsageCounters(
                input_units=message.usage.input_tokens,
                output_units=message.usage.output_tokens,
            ),
        )
    except ValidationError as exc:
        raise GatewayError(f"Malformed completion from Anthropic: {exc}") from exc


# ---------------------------------------------------------------------------
# Concrete gateways
# ---------------------------------------------------------------------------
@register_gateway("anthropic")
class AnthropicGateway(BaseGateway):
    """Anthropic Claude gateway using the Messages API with native tool use."""

    def __init__(
        self,
        client: anthropic.AsyncAnthropic | None = None,
        model: str | None = None,
        max_tokens: int | None = None,
    ) -> None:
        self._client = client or anthropic.AsyncAnthropic(
            api_key=settings.ANTHROPIC_API_KEY,
            timeout=httpx.Timeout(settings.GATEWAY_TIMEOUT, connect=10.0),
            max_retries=settings.GATEWAY_MAX_RETRIES,
        )
        self.model = model or settings.ANTHROPIC_MODEL
        self.max_tokens = max_tokens or settings.MAX_TOKENS

    async def complete(
        self,
        transcript: Transcript,
        catalog: ToolCatalog,
        system: str | None = None,
    ) -> Completion:
        request: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [turn_to_wire(turn) for turn in transcript],
        }
        if len(catalog):
            request["tools"] = catalog_to_wire(catalog)
        if system:
            request["system"] = system

        try:
            message = await self._client.messages.create(**request)
        except anthropic.APIError as exc:
            logger.error("Anthropic request error: %s", exc)
            raise GatewayError(f"Error calling Anthropic: {exc}") from exc

        logger.debug(
            "Anthropic completion: stop_reason=%s, %d blocks",
            message.stop_reason,
            len(message.content),
        )
        return completion_from_message(message)
