from __future__ import annotations

import inspect
import types
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Union, get_args, get_origin, get_type_hints

JsonSchema = Dict[str, Any]

_JSON_TYPES = {str: "string", int: "integer", float: "number", bool: "boolean", dict: "object", list: "array"}


def _json_type(annotation: Any) -> Any:
    if get_origin(annotation) in (Union, types.UnionType):
        members = [_json_type(arg) for arg in get_args(annotation) if arg is not type(None)]
        nullable = type(None) in get_args(annotation)
        if len(members) == 1:
            return [members[0], "null"] if nullable else members[0]
        return members + (["null"] if nullable else [])
    return _JSON_TYPES.get(get_origin(annotation) or annotation, "string")


@dataclass(frozen=True)
class Operation:
    """A coroutine published to the HTTP function surface."""

    name: str
    func: Callable[..., Any]
    description: str
    mutates: bool
    signature: inspect.Signature

    @property
    def parameter_schema(self) -> JsonSchema:
        # get_type_hints resolves the string annotations left by postponed evaluation.
        hints = get_type_hints(self.func)
        properties: JsonSchema = {}
        required: List[str] = []
        for param in self.signature.parameters.values():
            prop: JsonSchema = {"type": _json_type(hints.get(param.name, Any))}
            if param.default is inspect.Parameter.empty:
                required.append(param.name)
            elif param.default is not None:
                prop["default"] = param.default
            properties[param.name] = prop
        schema: JsonSchema = {"type": "object", "properties": properties, "additionalProperties": False}
        if required:
            schema["required"] = required
        return schema

    def bind(self, arguments: Mapping[str, Any]) -> inspect.BoundArguments:
        unknown = sorted(set(arguments) - set(self.signature.parameters))
        if unknown:
            raise TypeError(f"{self.name} does not accept: {', '.join(unknown)}")
        try:
            return self.signature.bind(**arguments)
        except TypeError as exc:
            raise TypeError(f"{self.name}: {exc}") from exc


OPERATIONS: Dict[str, Operation] = {}


def operation(name: str, *, description: str, mutates: bool = False) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        if name in OPERATIONS:
            raise ValueError(f"Operation '{name}' is already registered.")
        OPERATIONS[name] = Operation(
            name=name,
            func=func,
            description=description,
            mutates=mutates,
            signature=inspect.signature(func),
        )
        return func

    return decorator


def list_operations() -> List[Operation]:
    return sorted(OPERATIONS.values(), key=lambda item: item.name)


async def invoke(name: str, arguments: Mapping[str, Any]) -> Any:
    if name not in OPERATIONS:
        raise KeyError(f"Operation '{name}' is not registered.")
    op = OPERATIONS[name]
    bound = op.bind(arguments)
    result = op.func(*bound.args, **bound.kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
