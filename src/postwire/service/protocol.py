"""Service protocol: objects whose methods are exposed as POST endpoints."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class Service(Protocol):
    """
    Optional protocol for exposed services. endpoint_prefix() gives the path prefix
    under which every endpoint of the service is mounted (e.g. "/api/orders").
    """

    def endpoint_prefix(self) -> str:
        ...
