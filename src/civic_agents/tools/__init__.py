"""
Tool registry for civic agents.

Each agent owns a :class:`ToolRegistry`.  Tools are plain functions (sync or async) taking a single
Pydantic model of arguments and returning a JSON-serializable value.  Registering a tool derives its
:class:`ToolDescriptor` from the function's docstring and argument model, and freezing the registry
produces the read-only :class:`ToolCatalog` handed to the model on every call.
"""

import inspect
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Tuple,
    Type,
    get_type_hints,
)

from pydantic import (
    BaseModel,
    ConfigDict,
)

logger = logging.getLogger(__name__)

_SCHEMA_KEYS = ("type", "properties", "required", "items", "description", "enum", "default")


class ToolDescriptor(BaseModel):
    """Name, description and argument schema of one tool, as shown to the model."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    input_schema: Dict[str, Any]


@dataclass(frozen=True)
class Tool:
    """A descriptor bound to its implementation and argument model."""

    descriptor: ToolDescriptor
    args_model: Type[BaseModel]
    fn: Callable[[Any], Any]

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.fn)


def _simplify(node: Any, defs: Mapping[str, Any]) -> Any:
    """Reduce a Pydantic JSON schema to the ``type``/``properties``/``required`` shape."""
    if not isinstance(node, dict):
        return node
    if "allOf" in node and len(node["allOf"]) == 1:
        # Older Pydantic releases wrap a described $ref as allOf [$ref]
        node = {**node["allOf"][0], **{k: v for k, v in node.items() if k != "allOf"}}
    if "$ref" in node:
        merged = dict(_simplify(defs[node["$ref"].rsplit("/", 1)[-1]], defs))
        if "description" in node:
            merged["description"] = node["description"]
        return merged
    if "anyOf" in node:
        # Optional[X] comes through as anyOf [X, null]
        options = [opt for opt in node["anyOf"] if opt.get("type") != "null"]
        if len(options) == 1:
            merged = dict(_simplify(options[0], defs))
        else:
            merged = {"anyOf": [_simplify(opt, defs) for opt in options]}
        if "description" in node:
            merged["description"] = node["description"]
        if node.get("default") is not None:
            merged["default"] = node["default"]
        return merged

    out: Dict[str, Any] = {}
    for key in _SCHEMA_KEYS:
        if key not in node:
            continue
        if key == "properties":
            out[key] = {name: _simplify(prop, defs) for name, prop in node[key].items()}
        elif key == "items":
            out[key] = _simplify(node[key], defs)
        elif key == "default" and node[key] is None:
            continue
        else:
            out[key] = node[key]
    return out


def schema_for(model: Type[BaseModel]) -> Dict[str, Any]:
    """Return the JSON-schema-like argument description for *model*."""
    raw = model.model_json_schema()
    schema = _simplify(raw, raw.get("$defs", {}))
    schema.setdefault("type", "object")
    schema.setdefault("properties", {})
    schema.pop("description", None)
    return schema


class ToolCatalog:
    """
    Immutable name -> :class:`Tool` mapping, built once before any loop runs.

    The same catalog object is passed to every gateway call of a conversation, so the model sees
    the same tool list each turn.
    """

    def __init__(self, tools: List[Tool]) -> None:
        by_name: Dict[str, Tool] = {}
        for tool in tools:
            if tool.name in by_name:
                raise ValueError(f"Tool '{tool.name}' is already registered.")
            by_name[tool.name] = tool
        self._tools: Mapping[str, Tool] = MappingProxyType(by_name)
        self._descriptors: Tuple[ToolDescriptor, ...] = tuple(t.descriptor for t in tools)

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def descriptors(self) -> Tuple[ToolDescriptor, ...]:
        """All descriptors, in registration order."""
        return self._descriptors

    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)


class ToolRegistry:
    """Collects tool functions for one agent via the :meth:`register` decorator."""

    def __init__(self, namespace: str) -> None:
        self.namespace = namespace
        self._tools: List[Tool] = []
        self._catalog: Optional[ToolCatalog] = None

    def register(self, name: str, description: Optional[str] = None) -> Callable:
        """
        Register a tool function under *name*.

        The function is registered as a decorator, so it can be used like this:
            @registry.register("my_tool")
            def my_tool(args: MyToolArgs) -> dict:
                ...

        The function's single parameter must be annotated with a Pydantic model; that model
        becomes the tool's argument schema.  The description defaults to the docstring.

        Raises
        ------
        ValueError
            If *name* is taken, the catalog is already frozen, or the function's parameter is not
            annotated with a Pydantic model.
        """
        if any(tool.name == name for tool in self._tools):
            raise ValueError(f"Tool '{name}' is already registered.")
        if self._catalog is not None:
            raise ValueError(f"Registry '{self.namespace}' is frozen; cannot add '{name}'.")

        def wrapper(fn: Callable) -> Callable:
            params = list(inspect.signature(fn).parameters)
            hints = get_type_hints(fn)
            args_model = hints.get(params[0]) if len(params) == 1 else None
            if not (inspect.isclass(args_model) and issubclass(args_model, BaseModel)):
                raise ValueError(
                    f"Tool '{name}' must take exactly one argument annotated with a Pydantic model"
                )

            descriptor = ToolDescriptor(
                name=name,
                description=description or inspect.getdoc(fn) or "",
                input_schema=schema_for(args_model),
            )
            self._tools.append(Tool(descriptor=descriptor, args_model=args_model, fn=fn))
            logger.debug("Registered tool '%s' in '%s'", name, self.namespace)
            return fn

        return wrapper

    def catalog(self) -> ToolCatalog:
        """Freeze the registry and return its catalog (always the same object)."""
        if self._catalog is None:
            self._catalog = ToolCatalog(self._tools)
        return self._catalog
