"""Application — composed from modules via app.register(module). Backed by Starlette."""
from __future__ import annotations

import logging
from typing import Any

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.types import Receive, Scope, Send

from postwire.core.config import Settings
from postwire.core.container import Container
from postwire.core.module import Module
from postwire.core.openapi import build_openapi_spec
from postwire.dispatch.adapter import Binding, make_handler, resolve

logger = logging.getLogger(__name__)

# Endpoints accept every method so the adapter answers non-POST with 400 (not Starlette's 405).
ENDPOINT_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


class Application:
    """
    Application. Composed from modules via register(module).
    ASGI callable: run with uvicorn (app.run() or `uvicorn main:app`).
    """

    def __init__(self, config: Settings | None = None, *, authenticator: Any = None) -> None:
        self.config = config or Settings()
        self.authenticator = authenticator
        self._modules: list[Module] = []
        self._container = Container()
        self._routes: list[Route] = []
        self._endpoints: list[tuple[str, Binding, str | None]] = []
        self._openapi: tuple[str, str, str] | None = None
        self._asgi: Starlette | None = None
        self._container.register_instance(type(self.config), self.config)
        self._container.register_instance("config", self.config)

    def register(self, module: Module) -> Application:
        """Register a module (ServiceModule, ...). Returns self for chaining."""
        module.register_into(self)
        self._modules.append(module)
        return self

    def add_route(self, path: str, endpoint: Any, methods: list[str] | None = None) -> None:
        """Add a plain HTTP route."""
        self._routes.append(Route(path, endpoint, methods=methods or ["GET"]))
        self._asgi = None

    def add_endpoint(self, path: str, service: Any, method_name: str, *, tag: str | None = None) -> Binding:
        """
        Bind service.<method_name> and route path to it.
        BindingError propagates: an invalid method must stop startup.
        """
        binding = resolve(service, method_name, authenticator=self.authenticator)
        handler = make_handler(
            binding,
            max_body_bytes=self.config.max_body_bytes,
            log_bodies=self.config.log_bodies,
        )
        self.add_route(path, handler, methods=ENDPOINT_METHODS)
        self._endpoints.append((path, binding, tag))
        logger.info("POST %s -> %s.%s (%s)", path, type(service).__name__, method_name, binding.convention)
        return binding

    @property
    def endpoints(self) -> list[tuple[str, Binding, str | None]]:
        """(path, binding, tag) of every bound endpoint, in registration order."""
        return list(self._endpoints)

    def openapi(
        self,
        *,
        title: str = "API",
        version: str = "0.1.0",
        openapi_path: str = "/openapi.json",
    ) -> Application:
        """Serve an OpenAPI document of the bound endpoints at openapi_path."""
        self._openapi = (title, version, openapi_path)
        self._asgi = None
        return self

    def openapi_spec(self) -> dict[str, Any]:
        title, version, _ = self._openapi or ("API", "0.1.0", "")
        return build_openapi_spec(self._endpoints, title=title, version=version)

    @property
    def container(self) -> Container:
        """DI container: registration and resolution of dependencies."""
        return self._container

    def build(self) -> Starlette:
        """Starlette app with all routes registered so far."""
        if self._asgi is None:
            routes = list(self._routes)
            if self._openapi is not None:

                async def openapi_endpoint(request: Request) -> Response:
                    return JSONResponse(self.openapi_spec())

                routes.append(Route(self._openapi[2], openapi_endpoint, methods=["GET"]))
            self._asgi = Starlette(routes=routes)
        return self._asgi

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        await self.build()(scope, receive, send)

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Run HTTP server (blocks). host/port default to config (HOST, PORT env)."""
        import uvicorn

        uvicorn.run(
            self,
            host=host or self.config.host,
            port=port or self.config.port,
            log_config=None,
        )
