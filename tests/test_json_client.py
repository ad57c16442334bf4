import httpx
import pytest
from pydantic import BaseModel

from arfacts.orchestrator.errors import ParseFailure, ServiceError, TransportFailure

from conftest import json_body


class Echo(BaseModel):
    value: int


@pytest.mark.asyncio
async def test_send_parses_response_model(mock_http):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["key"] = request.url.params.get("key")
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json_body(request)
        return httpx.Response(200, json={"value": 7, "extra": "ignored"})

    http = mock_http(handler)
    out = await http.send(
        "https://api.example.test/echo", {"q": "é"},
        response_model=Echo, headers={"Authorization": "Bearer t0k"}, params={"key": "abc"},
    )

    assert out == Echo(value=7)
    assert seen == {"method": "POST", "key": "abc", "auth": "Bearer t0k", "body": {"q": "é"}}


@pytest.mark.asyncio
async def test_http_error_status_becomes_service_error(mock_http):
    http = mock_http(lambda r: httpx.Response(403, text='{"error": {"message": "API key not valid"}}'))

    with pytest.raises(ServiceError) as exc:
        await http.send("https://api.example.test/x", {}, response_model=Echo)

    assert exc.value.status_code == 403
    assert "API key not valid" in exc.value.raw_body
    assert "403" in str(exc.value)


@pytest.mark.asyncio
async def test_connect_error_becomes_transport_failure(mock_http):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    http = mock_http(handler)
    with pytest.raises(TransportFailure):
        await http.send("https://api.example.test/x", {}, response_model=Echo)


@pytest.mark.asyncio
async def test_timeout_becomes_transport_failure(mock_http):
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    http = mock_http(handler, timeout=2.0)
    with pytest.raises(TransportFailure, match="timeout"):
        await http.send("https://api.example.test/x", {}, response_model=Echo)


@pytest.mark.asyncio
async def test_non_json_body_is_parse_failure(mock_http):
    http = mock_http(lambda r: httpx.Response(200, text="<html>gateway</html>"))
    with pytest.raises(ParseFailure):
        await http.send("https://api.example.test/x", {}, response_model=Echo)


@pytest.mark.asyncio
async def test_wrong_shape_is_parse_failure(mock_http):
    http = mock_http(lambda r: httpx.Response(200, json={"value": "not-a-number"}))
    with pytest.raises(ParseFailure):
        await http.send("https://api.example.test/x", {}, response_model=Echo)


@pytest.mark.asyncio
async def test_api_key_not_written_to_log(mock_http, status):
    http = mock_http(lambda r: httpx.Response(200, json={"value": 1}))
    await http.send("https://api.example.test/x", {}, response_model=Echo, params={"key": "secret-key"})
    assert not any("secret-key" in line for line in status.logs)
