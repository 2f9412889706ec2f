"""Error taxonomy: binding errors (startup, fatal) and runtime errors (per request, serializable)."""
from __future__ import annotations

from typing import Any


class PostwireError(Exception):
    """Base for every error raised by postwire."""


class BindingError(PostwireError):
    """Method cannot be exposed. Raised at registration; the handler is never created."""

    def __init__(self, method_name: str, reason: str) -> None:
        self.method_name = method_name
        self.reason = reason
        super().__init__(f"cannot bind {method_name!r}: {reason}")


class MethodNotFound(BindingError):
    def __init__(self, method_name: str, service: Any) -> None:
        super().__init__(method_name, f"{type(service).__name__} has no method {method_name!r}")


class InvalidSignature(BindingError):
    """Arity out of range, the 3-in/2-out combination, or an unusable request/response type."""


class WireError(PostwireError):
    """
    Runtime error with a wire representation.
    to_wire() returns the standard envelope {"error": {"code": ..., "message": ...}}.
    """

    code = "INTERNAL"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        if code is not None:
            self.code = code
        self.message = message
        super().__init__(f"[{self.code}] {message}")

    def to_wire(self) -> dict[str, Any]:
        return {"error": {"code": self.code, "message": self.message}}


class RequestReadError(WireError):
    """Body could not be read from the client."""

    code = "READ_ERROR"


class RequestDecodeError(WireError):
    """Body is not valid JSON or does not match the request type."""

    code = "UNPROCESSABLE"

    def __init__(self, message: str, *, offset: int | None = None) -> None:
        self.offset = offset
        super().__init__(message)

    def to_wire(self) -> dict[str, Any]:
        wire = super().to_wire()
        if self.offset is not None:
            wire["error"]["offset"] = self.offset
        return wire


class ResponseEncodeError(WireError):
    """Response value could not be serialized."""

    code = "ENCODE_ERROR"


class ServiceError(WireError):
    """
    Domain error for bound methods. Return it (or raise it) from a service method;
    the adapter answers 500 with to_wire() as body.
    """

    code = "SERVICE_ERROR"
