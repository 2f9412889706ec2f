from postwire.core.app import Application
from postwire.core.config import Config, Settings
from postwire.core.container import Container
from postwire.core.logging_config import setup_logging
from postwire.core.module import Module
from postwire.core.request import RequestContext, new_context

__all__ = [
    "Application",
    "Config",
    "Container",
    "Module",
    "RequestContext",
    "Settings",
    "new_context",
    "setup_logging",
]
