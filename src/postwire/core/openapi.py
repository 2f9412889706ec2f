"""Minimal OpenAPI 3.0 document for bound endpoints: /openapi.json."""
from __future__ import annotations

import dataclasses
from typing import TYPE_CHECKING, Any, get_args, get_origin, get_type_hints

from postwire.dispatch.convention import UNION_TYPES, EmptyMessage

if TYPE_CHECKING:
    from postwire.dispatch.adapter import Binding

_ERROR_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "error": {
            "type": "object",
            "properties": {
                "code": {"type": "string"},
                "message": {"type": "string"},
            },
        },
    },
}


def _py_type_to_schema(t: Any) -> dict[str, Any]:
    origin = get_origin(t)
    if origin in UNION_TYPES:
        args = [a for a in get_args(t) if a is not type(None)]
        schema = _py_type_to_schema(args[0]) if len(args) == 1 else {}
        return {**schema, "nullable": True}
    if origin in (list, tuple, set, frozenset):
        args = get_args(t)
        return {"type": "array", "items": _py_type_to_schema(args[0]) if args else {}}
    if origin is dict or t is dict:
        return {"type": "object"}
    if t is list:
        return {"type": "array", "items": {}}
    if t is bool:
        return {"type": "boolean"}
    if t is int:
        return {"type": "integer"}
    if t is float:
        return {"type": "number"}
    if t is str:
        return {"type": "string"}
    if isinstance(t, type) and dataclasses.is_dataclass(t):
        return schema_from_dataclass(t)
    return {}


def schema_from_dataclass(cls: type) -> dict[str, Any]:
    """JSON schema of a dataclass request/response type: properties and required fields."""
    if not dataclasses.is_dataclass(cls):
        return {"type": "object"}
    hints = get_type_hints(cls)
    props: dict[str, Any] = {}
    required: list[str] = []
    for f in dataclasses.fields(cls):
        if f.name.startswith("_"):
            continue
        props[f.name] = _py_type_to_schema(hints.get(f.name, Any))
        if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
            required.append(f.name)
    schema: dict[str, Any] = {"type": "object", "properties": props}
    if required:
        schema["required"] = required
    return schema


def _json_content(schema: dict[str, Any]) -> dict[str, Any]:
    return {"application/json": {"schema": schema}}


def operation_for(binding: Binding, tag: str | None = None) -> dict[str, Any]:
    conv = binding.convention
    response_schema = _py_type_to_schema(conv.response_type) if conv.response_type is not None else {}
    op: dict[str, Any] = {
        "operationId": binding.name,
        "summary": f"POST {binding.name} ({conv})",
        "responses": {
            "200": {"description": "OK", "content": _json_content(response_schema)},
            "400": {"description": "Method other than POST"},
            "422": {"description": "Request body not decodable", "content": _json_content(_ERROR_SCHEMA)},
            "500": {"description": "Service or encoding error", "content": _json_content(_ERROR_SCHEMA)},
        },
        "tags": [tag or "default"],
    }
    if conv.request_type is not EmptyMessage:
        op["requestBody"] = {"required": True, "content": _json_content(schema_from_dataclass(conv.request_type))}
    return op


def build_openapi_spec(
    endpoints: list[tuple[str, Binding, str | None]],
    *,
    title: str = "API",
    version: str = "0.1.0",
) -> dict[str, Any]:
    """OpenAPI 3.0 document from (path, binding, tag) triples."""
    paths: dict[str, Any] = {}
    for path, binding, tag in endpoints:
        paths.setdefault(path, {})["post"] = operation_for(binding, tag)
    return {
        "openapi": "3.0.0",
        "info": {"title": title, "version": version},
        "paths": paths,
    }
