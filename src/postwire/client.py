"""
EndpointClient — calls POST JSON endpoints exposed by postwire (HTTP + JSON via httpx).
Request values are encoded with the same codec; responses are decoded into the given type.
"""
from __future__ import annotations

from typing import Any

import httpx

from postwire.core.config import Config
from postwire.dispatch.codec import decode, encode
from postwire.dispatch.errors import PostwireError, RequestDecodeError


class EndpointError(PostwireError):
    """Endpoint answered with an error status, or its answer could not be decoded."""

    def __init__(self, status_code: int, code: str, message: str) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(f"{status_code} [{code}] {message}")


def _error_from(response: httpx.Response) -> EndpointError:
    try:
        data = response.json()
    except ValueError:
        data = None
    err = data.get("error") if isinstance(data, dict) else None
    if isinstance(err, dict):
        return EndpointError(response.status_code, str(err.get("code", "UNKNOWN")), str(err.get("message", err)))
    return EndpointError(response.status_code, "UNKNOWN", response.text or response.reason_phrase)


class EndpointClient:
    """
    Facade: call(path, request, response_type) -> decoded response or None.
    On error status: return None or raise EndpointError (see raise_on_error).
    """

    def __init__(
        self,
        base_url: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._timeout = timeout

    @classmethod
    def for_service(
        cls,
        name: str,
        services: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> EndpointClient:
        """Client for a named service; base URL from services or Config.services_from_env()."""
        urls = services if services is not None else Config.services_from_env()
        try:
            base_url = urls[name.lower()]
        except KeyError:
            raise LookupError(f"no URL for service {name!r} (set {name.upper()}_SERVICE_URL)") from None
        return cls(base_url, **kwargs)

    @property
    def base_url(self) -> str:
        return self._base_url

    async def call(
        self,
        path: str,
        request: Any = None,
        response_type: type | None = None,
        *,
        raise_on_error: bool = False,
    ) -> Any:
        body = encode(request if request is not None else {})
        async with httpx.AsyncClient(
            base_url=self._base_url,
            transport=self._transport,
            timeout=self._timeout,
        ) as client:
            r = await client.post(path, content=body, headers={"Content-Type": "application/json"})
        if r.status_code != 200:
            if raise_on_error:
                raise _error_from(r)
            return None
        if response_type is None:
            return r.json()
        try:
            return decode(r.content, response_type)
        except RequestDecodeError as e:
            if raise_on_error:
                raise EndpointError(r.status_code, "DECODE_ERROR", e.message) from e
            return None
