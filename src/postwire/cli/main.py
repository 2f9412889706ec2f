"""
CLI: list and serve the endpoints of an application or service.
TARGET is "module:attr" where attr is an Application, a module (ServiceModule, ...) or a service.
"""
import importlib
import json
import sys
from typing import Any, Optional

import typer

from postwire.core.app import Application
from postwire.core.config import Settings
from postwire.core.logging_config import setup_logging
from postwire.core.module import Module
from postwire.dispatch.errors import BindingError
from postwire.service.service_module import ServiceModule

app = typer.Typer(help="postwire: expose service methods as POST JSON endpoints.")


def load_target(target: str) -> Any:
    module_name, sep, attr = target.partition(":")
    if not sep or not attr:
        raise typer.BadParameter(f"expected module:attr, got {target!r}")
    if "." not in sys.path:
        sys.path.insert(0, ".")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"cannot import {module_name!r}: {e}") from e
    try:
        return getattr(module, attr)
    except AttributeError as e:
        raise typer.BadParameter(f"{module_name!r} has no attribute {attr!r}") from e


def build_application(obj: Any, settings: Optional[Settings] = None) -> Application:
    """Application for obj: returned as is, or built around a module or a service."""
    if isinstance(obj, Application):
        return obj
    application = Application(settings or Settings.from_env())
    if isinstance(obj, Module):
        return application.register(obj)
    return application.register(ServiceModule(obj))


def _application_or_exit(target: str, settings: Optional[Settings] = None) -> Application:
    try:
        return build_application(load_target(target), settings)
    except BindingError as e:
        typer.echo(f"error: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def routes(target: str = typer.Argument(..., help="module:attr of an Application, module or service")) -> None:
    """Print every bound endpoint: path, method and calling convention."""
    application = _application_or_exit(target)
    for path, binding, _ in application.endpoints:
        typer.echo(f"POST {path} -> {binding.name} ({binding.convention}, request={binding.request_type.__name__})")


@app.command()
def openapi(
    target: str = typer.Argument(..., help="module:attr of an Application, module or service"),
    title: str = typer.Option("API", "--title"),
    version: str = typer.Option("0.1.0", "--version"),
) -> None:
    """Print the OpenAPI document of the endpoints."""
    application = _application_or_exit(target).openapi(title=title, version=version)
    typer.echo(json.dumps(application.openapi_spec(), indent=2))


@app.command()
def serve(
    target: str = typer.Argument(..., help="module:attr of an Application, module or service"),
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default HOST or 127.0.0.1)"),
    port: Optional[int] = typer.Option(None, "--port", help="Port (default PORT or 8000)"),
) -> None:
    """Bind the endpoints and run the HTTP server."""
    settings = Settings.from_env()
    setup_logging(settings.log_level, settings.log_config)
    application = _application_or_exit(target, settings)
    application.run(host=host, port=port)


def main() -> None:
    """Entry point for the postwire console command."""
    app()


if __name__ == "__main__":
    main()
