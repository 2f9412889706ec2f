"""
Logging setup: YAML dictConfig file when given, built-in console config otherwise.
Records carry request_id / trace_id of the invocation in flight.
"""
from __future__ import annotations

import logging
import logging.config
import os
import string
from typing import Any

import yaml

from postwire.core.request import get_request_id, get_trace_id

DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(request_id)s] %(message)s"


class RequestContextFilter(logging.Filter):
    """Adds request_id and trace_id ("-" outside a request) to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = get_request_id() or "-"
        if not getattr(record, "trace_id", None):
            record.trace_id = get_trace_id() or "-"
        return True


def default_config(level: str = "INFO") -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_context": {"()": RequestContextFilter}},
        "formatters": {"default": {"format": DEFAULT_FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "filters": ["request_context"],
            },
        },
        "loggers": {"postwire": {"level": level, "handlers": ["console"], "propagate": False}},
    }


def load_config_file(config_path: str) -> dict[str, Any]:
    """Read a YAML dictConfig; ${VAR} placeholders are substituted from the environment."""
    with open(config_path, "r", encoding="utf-8") as f:
        template = string.Template(f.read())
    mapping = os.environ.copy()
    mapping.setdefault("LOG_LEVEL", "INFO")
    return yaml.safe_load(template.safe_substitute(mapping))


def setup_logging(level: str = "INFO", config_path: str | None = None) -> None:
    """Configure the postwire loggers. A missing config_path falls back to the default config."""
    if config_path and os.path.exists(config_path):
        logging.config.dictConfig(load_config_file(config_path))
        return
    logging.config.dictConfig(default_config(level.upper()))
    if config_path:
        logging.getLogger(__name__).warning("log config %s not found, using defaults", config_path)
