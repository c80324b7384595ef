import asyncio
import json

import httpx
import pytest

from randcli.domain.models.common import DEFAULT_ENDPOINT
from randcli.domain.models.errors import MalformedResponse, TransportFailure
from randcli.infrastructure.rpc.transport import HttpxTransport

PAYLOAD = {"jsonrpc": "2.0", "method": "getUsage", "params": {"apiKey": "k"}, "id": 7}


def send(transport: HttpxTransport, payload=PAYLOAD):
    async def _run():
        try:
            return await transport.send(payload)
        finally:
            await transport.aclose()
    return asyncio.run(_run())


def test_send_posts_json_envelope():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["content_type"] = request.headers["content-type"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"jsonrpc": "2.0", "result": {"bitsLeft": 1, "requestsLeft": 2}, "id": 7})

    transport = HttpxTransport(http_transport=httpx.MockTransport(handler))
    response = send(transport)

    assert response["result"] == {"bitsLeft": 1, "requestsLeft": 2}
    assert seen["method"] == "POST"
    assert seen["url"] == DEFAULT_ENDPOINT
    assert seen["content_type"].startswith("application/json")
    assert seen["body"] == PAYLOAD


def test_http_error_status_is_transport_failure():
    transport = HttpxTransport(http_transport=httpx.MockTransport(lambda request: httpx.Response(503)))
    with pytest.raises(TransportFailure, match="503"):
        send(transport)


def test_connection_error_is_transport_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    transport = HttpxTransport(http_transport=httpx.MockTransport(handler))
    with pytest.raises(TransportFailure, match="Network error"):
        send(transport)


def test_timeout_is_transport_failure():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    transport = HttpxTransport(timeout_s=0.5, http_transport=httpx.MockTransport(handler))
    with pytest.raises(TransportFailure, match="timed out"):
        send(transport)


def test_non_json_body_is_malformed():
    transport = HttpxTransport(
        http_transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>oops</html>"))
    )
    with pytest.raises(MalformedResponse):
        send(transport)


def test_timeout_must_be_positive():
    with pytest.raises(ValueError):
        HttpxTransport(timeout_s=0)
