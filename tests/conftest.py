import pytest
from starlette.applications import Starlette
from starlette.routing import Route
from starlette.testclient import TestClient

from postwire import bind
from tests.services import SubmitService


@pytest.fixture
def service() -> SubmitService:
    return SubmitService()


@pytest.fixture
def make_client(service):
    """Client for a Starlette app with one bound method at /call."""

    def _make(method_name: str, **kwargs) -> TestClient:
        handler = bind(service, method_name, **kwargs)
        methods = ["GET", "POST", "PUT", "DELETE"]
        return TestClient(Starlette(routes=[Route("/call", handler, methods=methods)]))

    return _make
