import asyncio
import json
import logging

import pytest
from starlette.requests import Request

from postwire import MethodNotFound, bind
from postwire.core.logging_config import RequestContextFilter
from postwire.core.request import get_request_id
from postwire.dispatch.adapter import JSON_CONTENT_TYPE, MAX_BODY_BYTES


def test_submit_returns_response_value(make_client):
    response = make_client("Submit").post("/call", content=b'{"Name":"x"}')

    assert response.status_code == 200
    assert response.content == b'{"OK":true}\n'
    assert response.headers["content-type"] == JSON_CONTENT_TYPE


def test_truncated_json_is_unprocessable(make_client):
    response = make_client("Submit").post("/call", content=b'{"Name":')

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "UNPROCESSABLE"
    assert error["offset"] == 8
    assert "OK" not in response.json()


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
def test_non_post_is_bad_request_with_empty_body(make_client, method):
    response = make_client("Submit").request(method, "/call")

    assert response.status_code == 400
    assert response.content == b""
    assert response.headers["content-type"] == JSON_CONTENT_TYPE


def test_schema_mismatch_is_unprocessable(make_client):
    response = make_client("Submit").post("/call", content=b'{"Name": 5}')

    assert response.status_code == 422
    assert "cannot unmarshal number" in response.json()["error"]["message"]


def test_empty_body_is_unprocessable_when_method_takes_a_request(make_client):
    response = make_client("Submit").post("/call", content=b"")

    assert response.status_code == 422


def test_context_only_method_accepts_empty_body(make_client, service):
    response = make_client("Ping").post("/call", content=b"")

    assert response.status_code == 200
    assert response.json() is None
    assert service.pinged == 1


def test_context_only_method_accepts_empty_object(make_client):
    response = make_client("Status").post("/call", content=b"{}")

    assert response.status_code == 200
    assert response.json() == {"OK": True}


def test_error_return_is_internal_error_with_encoded_error(make_client):
    response = make_client("Fail").post("/call", content=b'{"Name":"x"}')

    assert response.status_code == 500
    assert response.json() == {"error": {"code": "REJECTED", "message": "cannot submit x"}}


def test_error_takes_precedence_over_response_value(make_client):
    # the response value is not JSON serializable; it must never be encoded
    response = make_client("Both").post("/call", content=b'{"Name":"x"}')

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "BOTH"


def test_raised_exception_is_internal_error(make_client):
    response = make_client("Explode").post("/call", content=b'{"Name":"x"}')

    assert response.status_code == 500
    assert response.json() == {"error": {"code": "INTERNAL", "message": "boom"}}


def test_unencodable_response_is_internal_error(make_client):
    response = make_client("Unencodable").post("/call", content=b"{}")

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "ENCODE_ERROR"


def test_async_method_with_result_and_nested_request(make_client, service):
    body = json.dumps(
        {"order_id": "o1", "items": [{"sku": "a", "quantity": 2}, {"sku": "b"}], "extra": True}
    ).encode()
    response = make_client("Place").post("/call", content=body)

    assert response.status_code == 200
    assert response.json() == {"order_id": "o1", "total_items": 3}
    # the method re-read the body through request.body()
    assert service.seen_bodies == [body]


def test_async_method_err_result(make_client):
    response = make_client("Place").post("/call", content=b'{"order_id": "o1"}')

    assert response.status_code == 500
    assert response.json()["error"] == {"code": "EMPTY_ORDER", "message": "order has no items"}


def test_output_parameter_method(make_client):
    body = b'{"order_id": "o2", "items": [{"sku": "a"}, {"sku": "b"}]}'
    response = make_client("Fill").post("/call", content=body)

    assert response.status_code == 200
    assert response.json() == {"order_id": "o2", "total_items": 2}


def test_two_megabyte_body_is_truncated_then_decoded(make_client):
    body = b'{"Name":"' + b"a" * 2_000_000 + b'"}'
    response = make_client("Submit").post("/call", content=body)

    # truncated prefix has no closing quote: decode error, not a size rejection
    assert response.status_code == 422
    assert response.json()["error"]["code"] == "UNPROCESSABLE"


def test_truncation_keeps_a_valid_prefix(make_client):
    body = b'{"Name":"x"}' + b" " * 100 + b"garbage"
    response = make_client("Submit", max_body_bytes=len(b'{"Name":"x"}')).post("/call", content=body)

    assert response.status_code == 200
    assert response.json() == {"OK": True}


def test_default_body_limit():
    assert MAX_BODY_BYTES == 1_048_576


def test_bind_unknown_method_fails(service):
    with pytest.raises(MethodNotFound):
        bind(service, "Missing")


def test_bind_non_callable_attribute_fails(service):
    with pytest.raises(MethodNotFound):
        bind(service, "pinged")


def test_read_failure_is_internal_error_with_empty_body(service):
    handler = bind(service, "Submit")

    async def receive():
        return {"type": "http.disconnect"}

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/call",
        "headers": [],
        "query_string": b"",
    }
    response = asyncio.run(handler(Request(scope, receive)))

    assert response.status_code == 500
    assert response.body == b""
    assert response.headers["content-type"] == JSON_CONTENT_TYPE


def test_handlers_do_not_share_request_state(make_client):
    client = make_client("Submit")
    first = client.post("/call", content=b'{"Name":"x"}')
    second = client.post("/call", content=b'{"Name":"y"}')

    assert first.json() == {"OK": True}
    assert second.json() == {"OK": False}


def test_deeply_nested_body_is_unprocessable(make_client):
    response = make_client("Submit").post("/call", content=b"[" * 200_000)

    assert response.status_code == 422
    error = response.json()["error"]
    assert error["code"] == "UNPROCESSABLE"
    assert error["message"] == "exceeded max nesting depth"
    assert error["offset"] == 199_999


def test_absent_fields_decode_to_zero_values(make_client):
    response = make_client("Submit").post("/call", content=b"{}")

    assert response.status_code == 200
    assert response.json() == {"OK": False}


def test_log_records_carry_request_ids(make_client, service, caplog):
    caplog.set_level(logging.INFO, logger="tests.services")
    caplog.handler.addFilter(RequestContextFilter())
    headers = {"X-Request-Id": "req-42", "X-Cloud-Trace-Context": "trace-7/1;o=1"}

    response = make_client("Logged").post("/call", content=b'{"Name":"x"}', headers=headers)

    assert response.status_code == 200
    records = [r for r in caplog.records if r.getMessage() == "logged x"]
    assert len(records) == 1
    assert records[0].request_id == "req-42"
    assert records[0].trace_id == "trace-7"
    assert service.seen_bodies == [b'{"Name":"x"}']
    assert get_request_id() is None
