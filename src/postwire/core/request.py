"""Request context: per-invocation carrier of the HTTP request and request-scoped data."""
from __future__ import annotations

import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

from starlette.requests import Request

TRACE_HEADER = "x-cloud-trace-context"
REQUEST_ID_HEADER = "x-request-id"

# Request/trace id of the invocation in flight, for log records.
_request_id_var: ContextVar[str | None] = ContextVar("postwire_request_id", default=None)
_trace_id_var: ContextVar[str | None] = ContextVar("postwire_trace_id", default=None)


def get_request_id() -> str | None:
    return _request_id_var.get()


def get_trace_id() -> str | None:
    return _trace_id_var.get()


def restore_body(request: Request, body: bytes) -> None:
    """Make request.body() return body after the stream was consumed."""
    # Starlette's Request.body() and stream() serve a cached _body when it is set.
    request._body = body


def captured_body(request: Request) -> bytes:
    return getattr(request, "_body", b"")


def _trace_id_from(request: Request) -> str:
    """Trace id from X-Cloud-Trace-Context ("TRACE_ID/SPAN_ID;o=1") or a fresh one."""
    header = request.headers.get(TRACE_HEADER, "")
    trace_id = header.split("/", 1)[0].strip()
    return trace_id or uuid.uuid4().hex


@dataclass
class RequestContext:
    """
    Passed as first argument to every bound method. Created fresh per request, never shared.
    authenticator is carried for the service's own use; postwire does not enforce it.
    """

    request: Request
    request_id: str
    trace_id: str
    authenticator: Any = None
    state: dict[str, Any] = field(default_factory=dict)

    @property
    def body(self) -> bytes:
        """Captured (possibly truncated) request body."""
        return captured_body(self.request)

    def bind_logging(self) -> tuple[Any, Any]:
        """Expose ids to log records for the current task/thread. Returns tokens for reset_logging()."""
        return _request_id_var.set(self.request_id), _trace_id_var.set(self.trace_id)

    @staticmethod
    def reset_logging(tokens: tuple[Any, Any]) -> None:
        request_token, trace_token = tokens
        _request_id_var.reset(request_token)
        _trace_id_var.reset(trace_token)


def new_context(request: Request, authenticator: Any = None) -> RequestContext:
    """New context for an in-flight request."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    return RequestContext(
        request=request,
        request_id=request_id,
        trace_id=_trace_id_from(request),
        authenticator=authenticator,
    )
