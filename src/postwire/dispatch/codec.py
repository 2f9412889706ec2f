"""JSON codec: request body -> dataclass instance, response/error value -> JSON bytes."""
from __future__ import annotations

import dataclasses
import enum
import json
from typing import Any, TypeVar, get_args, get_origin, get_type_hints

from postwire.dispatch.convention import UNION_TYPES, EmptyMessage
from postwire.dispatch.errors import RequestDecodeError, ResponseEncodeError, WireError

T = TypeVar("T")


def _kind(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _mismatch(value: Any, tp: Any, path: str) -> RequestDecodeError:
    name = getattr(tp, "__name__", repr(tp))
    return RequestDecodeError(f"cannot unmarshal {_kind(value)} into {path} of type {name}")


def _convert(value: Any, tp: Any, path: str) -> Any:
    if tp is Any:
        return value
    origin = get_origin(tp)

    if origin in UNION_TYPES:
        args = get_args(tp)
        if value is None and type(None) in args:
            return None
        last: RequestDecodeError | None = None
        for arg in args:
            if arg is type(None):
                continue
            try:
                return _convert(value, arg, path)
            except RequestDecodeError as e:
                last = e
        raise last or _mismatch(value, tp, path)

    if origin in (list, tuple, set, frozenset):
        if not isinstance(value, list):
            raise _mismatch(value, origin, path)
        args = get_args(tp)
        item_tp = args[0] if args else Any
        items = [_convert(v, item_tp, f"{path}[{i}]") for i, v in enumerate(value)]
        return items if origin is list else origin(items)

    if origin is dict:
        if not isinstance(value, dict):
            raise _mismatch(value, dict, path)
        args = get_args(tp)
        val_tp = args[1] if len(args) == 2 else Any
        return {k: _convert(v, val_tp, f"{path}.{k}") for k, v in value.items()}

    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return _build_dataclass(value, tp, path)

    if tp is bool:
        if not isinstance(value, bool):
            raise _mismatch(value, tp, path)
        return value
    if tp is int:
        if isinstance(value, bool) or not isinstance(value, int):
            if isinstance(value, float) and value.is_integer():
                return int(value)
            raise _mismatch(value, tp, path)
        return value
    if tp is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise _mismatch(value, tp, path)
        return float(value)
    if tp is str:
        if not isinstance(value, str):
            raise _mismatch(value, tp, path)
        return value
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        try:
            return tp(value)
        except ValueError as e:
            raise RequestDecodeError(f"invalid value {value!r} for {path} of type {tp.__name__}") from e
    if tp in (list, dict):
        if not isinstance(value, tp):
            raise _mismatch(value, tp, path)
        return value
    return value


def _zero(tp: Any, path: str) -> Any:
    """Zero value for a field absent from the body."""
    origin = get_origin(tp)
    if origin in UNION_TYPES:
        args = get_args(tp)
        if type(None) in args:
            return None
        return _zero(args[0], path)
    if origin in (list, tuple, set, frozenset):
        return [] if origin is list else origin()
    if origin is dict or tp is dict:
        return {}
    if tp is list:
        return []
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return _build_dataclass({}, tp, path)
    if tp is bool:
        return False
    if tp is int:
        return 0
    if tp is float:
        return 0.0
    if tp is str:
        return ""
    if isinstance(tp, type) and issubclass(tp, enum.Enum):
        return next(iter(tp))
    return None


def _nesting_offset(text: str) -> int:
    """Offset of the innermost opening bracket of text."""
    depth = deepest = offset = 0
    in_string = escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch in "[{":
            depth += 1
            if depth > deepest:
                deepest, offset = depth, i
        elif ch in "]}":
            depth -= 1
    return offset


def _build_dataclass(value: Any, cls: type[T], path: str) -> T:
    if value is None:
        value = {}
    if not isinstance(value, dict):
        raise _mismatch(value, cls, path)
    hints = get_type_hints(cls)
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(cls):
        if not f.init:
            continue
        if f.name in value:
            kwargs[f.name] = _convert(value[f.name], hints.get(f.name, Any), f"{path}.{f.name}")
        elif f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            kwargs[f.name] = _zero(hints.get(f.name, Any), f"{path}.{f.name}")
    try:
        return cls(**kwargs)
    except (TypeError, ValueError) as e:
        raise RequestDecodeError(f"invalid {path}: {e}") from e


def decode(body: bytes, cls: type[T]) -> T:
    """
    Decode a JSON body into a fresh instance of cls (a dataclass).
    Empty body is accepted only for EmptyMessage. Unknown keys are ignored;
    absent fields without a default get their type's zero value.
    Raises RequestDecodeError.
    """
    if not body.strip():
        if issubclass(cls, EmptyMessage):
            return cls()
        raise RequestDecodeError("unexpected end of JSON input", offset=0)
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise RequestDecodeError(f"invalid UTF-8 in request body: {e.reason}", offset=e.start) from e
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise RequestDecodeError(e.msg, offset=e.pos) from e
    except RecursionError as e:
        raise RequestDecodeError("exceeded max nesting depth", offset=_nesting_offset(text)) from e
    try:
        return _build_dataclass(data, cls, cls.__name__)
    except RecursionError as e:
        raise RequestDecodeError("exceeded max nesting depth", offset=_nesting_offset(text)) from e


def to_jsonable(value: Any) -> Any:
    """Plain JSON structure for value: to_wire(), dataclass fields, enums, containers."""
    to_wire = getattr(value, "to_wire", None)
    if callable(to_wire):
        return to_wire()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, enum.Enum):
        return value.value
    if isinstance(value, dict):
        return {k: to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return value


def encode(value: Any) -> bytes:
    """Compact JSON terminated by a newline. Raises ResponseEncodeError."""
    try:
        text = json.dumps(to_jsonable(value), separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError, RecursionError) as e:
        raise ResponseEncodeError(str(e)) from e
    return (text + "\n").encode("utf-8")


def error_to_wire(err: Any) -> Any:
    """Wire representation of an error value. Exceptions without to_wire() get the standard envelope."""
    if callable(getattr(err, "to_wire", None)):
        return err.to_wire()
    if isinstance(err, BaseException):
        return {"error": {"code": WireError.code, "message": str(err) or type(err).__name__}}
    return to_jsonable(err)


def encode_error(err: Any) -> bytes:
    return encode(error_to_wire(err))


def is_error(err: Any) -> bool:
    """True for an exception or any truthy value. None, False, 0 and empty containers mean no error."""
    if isinstance(err, BaseException):
        return True
    return bool(err)
