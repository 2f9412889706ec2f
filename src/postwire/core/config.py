"""Single config object: user passes it when creating the app; available via DI."""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

DEFAULT_MAX_BODY_BYTES = 1_048_576

_TRUE = {"1", "true", "yes", "on"}


class Config:
    """
    Application config. User creates their own class or instance
    and passes to Application(config=...); then available via container.resolve(Config).
    """

    @classmethod
    def load_from_env(cls, prefix: str = "POSTWIRE_", **defaults: Any) -> dict[str, Any]:
        """Load from os.environ with prefix and defaults. Returns dict for MyConfig(**Config.load_from_env())."""
        result = dict(defaults)
        for key, value in os.environ.items():
            if key.startswith(prefix):
                name = key[len(prefix):].lower()
                result[name] = value
        return result

    @staticmethod
    def services_from_env(suffix: str = "_SERVICE_URL") -> dict[str, str]:
        """
        Service name -> base URL map for EndpointClient.for_service().
        ORDERS_SERVICE_URL=http://orders:8000 -> {"orders": "http://orders:8000"}.
        """
        out: dict[str, str] = {}
        for key, value in os.environ.items():
            if not value.strip() or not key.endswith(suffix):
                continue
            name = key[: -len(suffix)].lower()
            if name:
                out[name] = value.strip()
        return out


@dataclass
class Settings(Config):
    """Adapter and server settings. Env: POSTWIRE_MAX_BODY_BYTES, POSTWIRE_LOG_LEVEL, ..."""

    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES
    log_level: str = "INFO"
    log_config: str | None = None
    log_bodies: bool = False
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls, prefix: str = "POSTWIRE_") -> Settings:
        raw = cls.load_from_env(prefix)
        max_body = int(raw.get("max_body_bytes", DEFAULT_MAX_BODY_BYTES))
        if max_body <= 0:
            raise ValueError(f"{prefix}MAX_BODY_BYTES must be positive, got {max_body}")
        return cls(
            max_body_bytes=max_body,
            log_level=str(raw.get("log_level", "INFO")).upper(),
            log_config=raw.get("log_config") or None,
            log_bodies=str(raw.get("log_bodies", "")).strip().lower() in _TRUE,
            host=os.environ.get("HOST", "127.0.0.1"),
            port=int(os.environ.get("PORT", "8000")),
        )
