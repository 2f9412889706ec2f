"""
ServiceModule — exposes methods of one service object as POST JSON endpoints.
Configure via .endpoint(...) or @endpoint on the methods; register with app.register(module).
"""
from __future__ import annotations

import logging
import re
from typing import Any

from postwire.core.app import Application
from postwire.core.module import Module
from postwire.service.protocol import Service

logger = logging.getLogger(__name__)


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def endpoint_method_names(service: Any) -> list[str]:
    """Methods to expose when none are listed: __endpoints__, else public methods marked with @endpoint."""
    if hasattr(service, "__endpoints__"):
        return list(service.__endpoints__)
    return [
        m for m in dir(service)
        if not m.startswith("_") and callable(getattr(service, m, None)) and hasattr(getattr(service, m), "__endpoint__")
    ]


class ServiceModule(Module):
    """
    One object = one exposed service. service: instance or class (then registered
    and resolved from the container). Each method is mounted at {prefix}/{method_name}.
    """

    def __init__(self, service: Any, prefix: str | None = None, *, tag: str | None = None) -> None:
        self._service = service
        self._prefix = prefix
        self._tag = tag
        self._endpoints: list[tuple[str, str | None]] = []

    def endpoint(self, method_name: str, path: str | None = None) -> ServiceModule:
        """Expose a method. path without leading slash is under the module prefix; default is the method name."""
        self._endpoints.append((method_name, path))
        return self

    @property
    def service_name(self) -> str:
        cls = self._service if isinstance(self._service, type) else type(self._service)
        return cls.__name__

    def prefix_for(self, instance: Any) -> str:
        if self._prefix is not None:
            return self._prefix
        if isinstance(instance, Service):
            return instance.endpoint_prefix()
        return f"/{_snake(self.service_name)}"

    def register_into(self, app: Application) -> None:
        if isinstance(self._service, type):
            app.container.register_class(self._service)
            instance = app.container.resolve(self._service)
        else:
            instance = self._service

        endpoints = self._endpoints or [(name, None) for name in endpoint_method_names(instance)]
        if not endpoints:
            logger.warning("%s exposes no endpoints", self.service_name)
            return

        prefix = self.prefix_for(instance).rstrip("/")
        for method_name, path in endpoints:
            p = path or method_name
            full_path = p if p.startswith("/") else f"{prefix}/{p}"
            app.add_endpoint(full_path, instance, method_name, tag=self._tag or self.service_name)
