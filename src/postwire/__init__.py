"""
postwire — expose methods of service objects as HTTP POST JSON endpoints.
The calling convention of each method is worked out once, at registration.
"""
from postwire.core import Application, Config, Container, Module, RequestContext, Settings, setup_logging
from postwire.dispatch import (
    BindingError,
    EmptyMessage,
    Err,
    InvalidSignature,
    MethodNotFound,
    Ok,
    Result,
    ServiceError,
    bind,
    endpoint,
)
from postwire.service import Service, ServiceModule

__all__ = [
    "Application",
    "BindingError",
    "Config",
    "Container",
    "EmptyMessage",
    "Err",
    "InvalidSignature",
    "MethodNotFound",
    "Module",
    "Ok",
    "RequestContext",
    "Result",
    "Service",
    "ServiceError",
    "ServiceModule",
    "Settings",
    "bind",
    "endpoint",
    "setup_logging",
]
