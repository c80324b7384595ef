import json

import httpx
import pytest
from typer.testing import CliRunner

from randcli.infrastructure.rpc.transport import HttpxTransport
from randcli.main import app

API_KEY = "00000000-0000-0000-0000-000000000000"


class ScriptedServer(list):
    """Decoded request bodies, in order, plus the replies still to serve."""

    def __init__(self):
        super().__init__()
        self.replies = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.append(json.loads(request.content))
        status, body = self.replies.pop(0)
        return httpx.Response(status, json=body)


@pytest.fixture
def server(mocker):
    """Routes HttpxTransport through an httpx.MockTransport backed by a ScriptedServer."""
    scripted = ScriptedServer()

    def make_transport(endpoint, timeout_s):
        return HttpxTransport(
            endpoint=endpoint, timeout_s=timeout_s, http_transport=httpx.MockTransport(scripted.handle)
        )

    mocker.patch("randcli.main.HttpxTransport", side_effect=make_transport)
    return scripted


def reply(server, body, status=200):
    server.replies.append((status, body))


def test_integers_command_flow(runner: CliRunner, server, generation_response):
    reply(server, generation_response([1, 5, 4, 6, 6]))

    result = runner.invoke(app, ["--api-key", API_KEY, "--plain", "integers", "5", "--min", "1", "--max", "6"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    assert result.stdout.split() == ["1", "5", "4", "6", "6"]
    sent = server[0]
    assert sent["jsonrpc"] == "2.0"
    assert sent["method"] == "generateIntegers"
    assert sent["params"] == {"apiKey": API_KEY, "n": 5, "min": 1, "max": 6, "replacement": True}


def test_uuids_command_flow(runner: CliRunner, server, generation_response):
    raw = ["47849fd4-b790-492e-8b93-d601f3f0e5ba", "d0c34a29-7e4b-4f4d-9e09-4b0f5f1a7c11"]
    reply(server, generation_response(raw))

    result = runner.invoke(app, ["--api-key", API_KEY, "--plain", "uuids", "2"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    assert result.stdout.split() == raw
    assert server[0]["params"] == {"apiKey": API_KEY, "n": 2}


def test_usage_command_flow(runner: CliRunner, server, usage_response):
    reply(server, usage_response(requests_left=321, bits_left=654))

    result = runner.invoke(app, ["--api-key", API_KEY, "--plain", "usage"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    assert "requestsLeft=321 bitsLeft=654" in result.stdout
    assert server[0]["method"] == "getUsage"


def test_rich_output_contains_values(runner: CliRunner, server, generation_response):
    reply(server, generation_response(["hello", "world"]))

    result = runner.invoke(app, ["--api-key", API_KEY, "strings", "2", "--length", "5", "-c", "dehlorw"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    assert "hello" in result.stdout
    assert "world" in result.stdout


def test_api_key_from_environment(runner: CliRunner, server, generation_response, monkeypatch):
    monkeypatch.setenv("RANDCLI_API_KEY", "env-key")
    reply(server, generation_response([0.5]))

    result = runner.invoke(app, ["--plain", "decimals", "1", "--places", "1"])

    assert result.exit_code == 0, f"CLI command failed: {result.stdout}"
    assert server[0]["params"]["apiKey"] == "env-key"


def test_invalid_arguments_fail_without_request(runner: CliRunner, server):
    result = runner.invoke(app, ["--api-key", API_KEY, "integers", "5", "--min", "6", "--max", "1"])

    assert result.exit_code == 1
    assert "Integers command failed" in result.stdout
    assert list(server) == []


def test_server_error_exits_with_failure(runner: CliRunner, server, error_response):
    reply(server, error_response(401, "The API key you specified is not running"))

    result = runner.invoke(app, ["--api-key", API_KEY, "uuids"])

    assert result.exit_code == 1
    assert "401" in result.stdout


def test_http_failure_exits_with_failure(runner: CliRunner, server):
    reply(server, {"detail": "unavailable"}, status=503)

    result = runner.invoke(app, ["--api-key", API_KEY, "usage"])

    assert result.exit_code == 1
    assert "503" in result.stdout


def test_missing_api_key_exits_with_usage_error(runner: CliRunner, server):
    result = runner.invoke(app, ["uuids"])

    assert result.exit_code == 2
    assert "No API key configured" in result.stdout
    assert list(server) == []


def test_help_needs_no_api_key(runner: CliRunner):
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for command in ("integers", "decimals", "gaussians", "strings", "uuids", "usage"):
        assert command in result.stdout
