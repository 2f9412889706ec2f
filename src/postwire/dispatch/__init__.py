from postwire.dispatch.adapter import (
    JSON_CONTENT_TYPE,
    MAX_BODY_BYTES,
    Binding,
    Handler,
    bind,
    make_handler,
    read_body,
    resolve,
)
from postwire.dispatch.codec import decode, encode, encode_error
from postwire.dispatch.convention import Convention, EmptyMessage, endpoint, inspect_convention
from postwire.dispatch.errors import (
    BindingError,
    InvalidSignature,
    MethodNotFound,
    PostwireError,
    RequestDecodeError,
    RequestReadError,
    ResponseEncodeError,
    ServiceError,
    WireError,
)
from postwire.dispatch.result import Err, Ok, Result

__all__ = [
    "JSON_CONTENT_TYPE",
    "MAX_BODY_BYTES",
    "Binding",
    "BindingError",
    "Convention",
    "EmptyMessage",
    "Err",
    "Handler",
    "InvalidSignature",
    "MethodNotFound",
    "Ok",
    "PostwireError",
    "RequestDecodeError",
    "RequestReadError",
    "ResponseEncodeError",
    "Result",
    "ServiceError",
    "WireError",
    "bind",
    "decode",
    "encode",
    "encode_error",
    "endpoint",
    "inspect_convention",
    "make_handler",
    "read_body",
    "resolve",
]
