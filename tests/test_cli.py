import json

from typer.testing import CliRunner

from postwire import Application, ServiceModule
from postwire.cli.main import app, build_application
from tests.services import Catalog, SubmitService

runner = CliRunner()


def test_routes_lists_bound_endpoints():
    result = runner.invoke(app, ["routes", "tests.services:catalog"])

    assert result.exit_code == 0, result.output
    assert "POST /catalog/lookup -> lookup (2-in/2-out, request=Item)" in result.output
    assert "POST /catalog/reset -> reset (1-in/1-out, request=EmptyMessage)" in result.output


def test_openapi_prints_document():
    result = runner.invoke(app, ["openapi", "tests.services:Catalog", "--title", "Catalog"])

    assert result.exit_code == 0, result.output
    spec = json.loads(result.output)
    assert spec["info"]["title"] == "Catalog"
    assert set(spec["paths"]) == {"/catalog/lookup", "/catalog/reset"}


def test_bad_target():
    result = runner.invoke(app, ["routes", "no_colon"])
    assert result.exit_code != 0


def test_build_application_from_module_and_application():
    module = ServiceModule(SubmitService(), prefix="/s").endpoint("Submit")
    built = build_application(module)
    assert [path for path, _, _ in built.endpoints] == ["/s/Submit"]

    existing = Application()
    assert build_application(existing) is existing


def test_build_application_from_service_class():
    built = build_application(Catalog)
    assert len(built.endpoints) == 2
