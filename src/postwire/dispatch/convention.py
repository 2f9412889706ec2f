"""
Calling convention of a bound method: how many inputs it takes, how many outputs it returns,
which type the request body decodes into.

Discovered once at bind time, either from an explicit @endpoint(...) declaration or by
inspecting the method signature and annotations.
"""
from __future__ import annotations

import dataclasses
import inspect
import types
from dataclasses import dataclass
from typing import Any, Callable, Union, get_args, get_origin, get_type_hints

from postwire.dispatch.errors import InvalidSignature
from postwire.dispatch.result import Err, Ok

VALID_INPUTS = (1, 2, 3)
VALID_OUTPUTS = (1, 2)

UNION_TYPES: tuple[Any, ...] = (Union, types.UnionType)


@dataclass
class EmptyMessage:
    """Placeholder request type for methods that take only the context."""


@dataclass(frozen=True)
class EndpointSpec:
    """Explicit declaration attached by @endpoint. None fields fall back to introspection."""

    request: type | None = None
    response: type | None = None
    outputs: int | None = None


def endpoint(
    *,
    request: type | None = None,
    response: type | None = None,
    outputs: int | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Mark a service method as an endpoint and optionally declare its shape."""

    def deco(fn: Callable[..., Any]) -> Callable[..., Any]:
        fn.__endpoint__ = EndpointSpec(request=request, response=response, outputs=outputs)  # type: ignore[attr-defined]
        return fn

    return deco


@dataclass(frozen=True)
class Convention:
    num_in: int
    num_out: int
    request_type: type = EmptyMessage
    response_type: Any = None

    @property
    def shape(self) -> tuple[int, int]:
        return (self.num_in, self.num_out)

    @property
    def takes_request(self) -> bool:
        return self.num_in >= 2

    @property
    def output_parameter(self) -> bool:
        """Response value is passed in as the third argument instead of being returned."""
        return self.num_in == 3

    def __str__(self) -> str:
        return f"{self.num_in}-in/{self.num_out}-out"


def validate_shape(name: str, num_in: int, num_out: int) -> None:
    """Raise InvalidSignature unless (num_in, num_out) is one of the supported shapes."""
    if num_in not in VALID_INPUTS:
        raise InvalidSignature(name, f"takes {num_in} arguments, expected 1 to 3")
    if num_out not in VALID_OUTPUTS:
        raise InvalidSignature(name, f"returns {num_out} values, expected 1 or 2")
    # The response is either an input or an output, never both.
    if num_in == 3 and num_out == 2:
        raise InvalidSignature(name, "output parameter cannot be combined with a returned response")


def _unwrap_optional(tp: Any) -> Any:
    if get_origin(tp) in UNION_TYPES:
        args = [a for a in get_args(tp) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return tp


def _is_result(tp: Any) -> bool:
    origin = get_origin(tp) or tp
    if origin in (Ok, Err):
        return True
    if origin in UNION_TYPES:
        return all((get_origin(a) or a) in (Ok, Err) for a in get_args(tp))
    return False


def _outputs_of(return_ann: Any) -> tuple[int, Any]:
    """(number of outputs, response type) from a return annotation."""
    if return_ann is inspect.Signature.empty or return_ann is None or return_ann is type(None):
        return 1, None
    if _is_result(return_ann):
        for arg in get_args(return_ann) or (return_ann,):
            if (get_origin(arg) or arg) is Ok:
                inner = get_args(arg)
                return 2, inner[0] if inner else None
        return 2, None
    if get_origin(return_ann) is tuple:
        args = get_args(return_ann)
        if args == ((),):
            args = ()
        return len(args), (_unwrap_optional(args[0]) if args else None)
    return 1, None


def _type_hints(method: Callable[..., Any]) -> dict[str, Any]:
    target = getattr(method, "__func__", method)
    try:
        return get_type_hints(target)
    except (NameError, TypeError):
        # Unresolvable forward references: fall back to raw annotations.
        return dict(getattr(target, "__annotations__", {}))


def _check_message_type(name: str, tp: Any, role: str) -> type:
    tp = _unwrap_optional(tp)
    if tp is inspect.Parameter.empty:
        raise InvalidSignature(name, f"{role} parameter has no type annotation")
    if not (isinstance(tp, type) and dataclasses.is_dataclass(tp)):
        raise InvalidSignature(name, f"{role} type {tp!r} is not a dataclass")
    try:
        get_type_hints(tp)
    except NameError as e:
        raise InvalidSignature(name, f"{role} type {tp.__name__} has unresolvable field types: {e}") from e
    return tp


def inspect_convention(name: str, method: Callable[..., Any]) -> Convention:
    """Determine the calling convention of a (bound) method. Raises InvalidSignature."""
    try:
        sig = inspect.signature(method)
    except (TypeError, ValueError) as e:
        raise InvalidSignature(name, f"signature not inspectable: {e}") from e

    params = list(sig.parameters.values())
    for p in params:
        if p.kind not in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD):
            raise InvalidSignature(name, f"parameter {p.name!r} must be positional")

    declared: EndpointSpec = getattr(method, "__endpoint__", None) or EndpointSpec()
    hints = _type_hints(method)

    num_in = len(params)
    num_out, response_type = _outputs_of(hints.get("return", sig.return_annotation))
    if declared.outputs is not None:
        num_out = declared.outputs
    if declared.response is not None:
        response_type = declared.response
    validate_shape(name, num_in, num_out)

    request_type: type = EmptyMessage
    if num_in >= 2:
        # If there's a request type it's the second argument.
        ann = declared.request or hints.get(params[1].name, params[1].annotation)
        request_type = _check_message_type(name, ann, "request")
    if num_in == 3:
        ann = declared.response or hints.get(params[2].name, params[2].annotation)
        response_type = _check_message_type(name, ann, "response")
        try:
            response_type()
        except TypeError as e:
            raise InvalidSignature(name, f"response type {response_type.__name__} needs defaults for every field") from e

    return Convention(
        num_in=num_in,
        num_out=num_out,
        request_type=request_type,
        response_type=response_type,
    )
