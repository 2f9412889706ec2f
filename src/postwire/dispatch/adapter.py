"""
Dispatch adapter: turns a method of a service object into a POST JSON handler.

    handler = bind(service, "submit")
    app.add_route("/api/submit", handler, methods=["POST"])

bind() resolves the method and its calling convention once (startup); invalid methods raise
BindingError and must abort startup. The returned handler is an async Starlette endpoint:
read body (truncated at max_body_bytes) -> decode request -> call method -> encode result.

Response ordering: the response value is encoded into a buffer before the status is chosen,
so an encode failure still answers 500 with the encode error as body.
"""
from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import Response

from postwire.core.request import RequestContext, new_context, restore_body
from postwire.dispatch.codec import decode, encode, encode_error, is_error
from postwire.dispatch.convention import Convention, inspect_convention
from postwire.dispatch.errors import (
    MethodNotFound,
    RequestDecodeError,
    RequestReadError,
    ResponseEncodeError,
    WireError,
)
from postwire.dispatch.result import Err, Ok

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=UTF-8"
MAX_BODY_BYTES = 1_048_576

Handler = Callable[[Request], Awaitable[Response]]


@dataclass(frozen=True)
class Binding:
    """Resolved method + calling convention. Immutable, shared by all requests."""

    name: str
    method: Callable[..., Any]
    convention: Convention
    authenticator: Any = None

    @property
    def request_type(self) -> type:
        return self.convention.request_type

    async def invoke(self, ctx: RequestContext, request_value: Any) -> tuple[Any, Any]:
        """Call the method. Returns (response value, error); an exception raised by the method is the error."""
        args: list[Any] = [ctx]
        if self.convention.takes_request:
            args.append(request_value)
        out = None
        if self.convention.output_parameter:
            out = self.convention.response_type()
            args.append(out)
        try:
            if inspect.iscoroutinefunction(self.method):
                ret = await self.method(*args)
            else:
                ret = await run_in_threadpool(self.method, *args)
                if hasattr(ret, "__await__"):
                    ret = await ret
        except Exception as e:
            logger.warning("%s raised %s: %s", self.name, type(e).__name__, e)
            return None, e
        return self._split(ret, out)

    def _split(self, ret: Any, out: Any) -> tuple[Any, Any]:
        if isinstance(ret, (Ok, Err)):
            value, err = ret.split()
            return (out, err) if self.convention.num_out == 1 else (value, err)
        if self.convention.num_out == 2:
            if isinstance(ret, tuple) and len(ret) == 2:
                return ret[0], ret[1]
            return None, WireError(
                f"{self.name} returned {type(ret).__name__}, expected a (value, error) pair",
                code="BAD_RETURN",
            )
        # The last returned value is an error.
        return out, ret


def resolve(service: Any, method_name: str, *, authenticator: Any = None) -> Binding:
    """Resolve method_name on service and its calling convention. Raises BindingError."""
    method = getattr(service, method_name, None)
    if method is None or not callable(method):
        logger.error("bad method: %s.%s", type(service).__name__, method_name)
        raise MethodNotFound(method_name, service)
    convention = inspect_convention(method_name, method)
    logger.debug("bound %s.%s as %s", type(service).__name__, method_name, convention)
    return Binding(name=method_name, method=method, convention=convention, authenticator=authenticator)


def _json(content: bytes, status_code: int) -> Response:
    return Response(content, status_code=status_code, media_type=JSON_CONTENT_TYPE)


def _error_body(name: str, err: Any) -> bytes:
    """Best effort: on failure to encode the error the body stays empty."""
    try:
        return encode_error(err)
    except ResponseEncodeError as e:
        logger.error("%s: encoding error value failed: %s", name, e)
        return b""


async def read_body(request: Request, limit: int = MAX_BODY_BYTES) -> bytes:
    """Read at most limit bytes of the body; the rest is dropped, not rejected."""
    buf = bytearray()
    async for chunk in request.stream():
        buf += chunk[: limit - len(buf)]
        if len(buf) >= limit:
            break
    return bytes(buf)


def make_handler(binding: Binding, *, max_body_bytes: int = MAX_BODY_BYTES, log_bodies: bool = False) -> Handler:
    """Request handler closure over binding."""
    name = binding.name

    async def handler(request: Request) -> Response:
        if request.method != "POST":
            return _json(b"", 400)

        try:
            body = await read_body(request, max_body_bytes)
        except Exception as e:
            logger.error("%s: %s", name, RequestReadError(f"reading request body failed: {e}"))
            return _json(b"", 500)

        restore_body(request, body)
        if log_bodies:
            logger.debug("%s: request body: %r", name, body)

        try:
            request_value = decode(body, binding.request_type)
        except RequestDecodeError as e:
            logger.info("%s: unmarshal: %s", name, e)
            return _json(_error_body(name, e), 422)

        ctx = new_context(request, binding.authenticator)
        tokens = ctx.bind_logging()
        try:
            value, err = await binding.invoke(ctx, request_value)
        finally:
            RequestContext.reset_logging(tokens)

        if is_error(err):
            return _json(_error_body(name, err), 500)

        try:
            payload = encode(value)
        except ResponseEncodeError as e:
            logger.error("%s: encoding response failed: %s", name, e)
            return _json(_error_body(name, e), 500)
        return _json(payload, 200)

    handler.__name__ = f"{name}_handler"
    handler.__qualname__ = handler.__name__
    return handler


def bind(
    service: Any,
    method_name: str,
    *,
    max_body_bytes: int = MAX_BODY_BYTES,
    authenticator: Any = None,
    log_bodies: bool = False,
) -> Handler:
    """Expose service.<method_name> as a POST JSON handler. Raises BindingError; treat it as fatal."""
    binding = resolve(service, method_name, authenticator=authenticator)
    return make_handler(binding, max_body_bytes=max_body_bytes, log_bodies=log_bodies)
