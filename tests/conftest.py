import asyncio
import os
from typing import Any, Dict, List, Optional

import pytest
from typer.testing import CliRunner

from randcli.core.services.random_service import RandomService
from randcli.domain.interfaces.transport import RpcTransport
from randcli.domain.models.common import ApiKey, Milliseconds
from randcli.domain.models.session import ClientSession
from randcli.infrastructure.config import settings
from randcli.infrastructure.resilience.throttled_invoker import ThrottledInvoker

TEST_API_KEY = "00000000-0000-0000-0000-000000000000"


class FakeTransport(RpcTransport):
    """Scripted transport: returns (or raises) queued responses in order."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.responses = list(responses or [])
        self.payloads: List[Dict[str, Any]] = []
        self.closed = False

    def queue(self, *responses: Any) -> None:
        self.responses.extend(responses)

    async def send(self, payload: Dict[str, Any]) -> Any:
        self.payloads.append(payload)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {payload['method']}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response

    async def aclose(self) -> None:
        self.closed = True


class FakeClock:
    """Monotonic clock in seconds that only moves when told to."""

    def __init__(self, start_s: float = 1000.0):
        self.now_s = start_s

    def __call__(self) -> float:
        return self.now_s

    def advance_ms(self, ms: float) -> None:
        self.now_s += ms / 1000.0


def make_generation_response(
    data: List[Any],
    advisory_delay: Optional[float] = 1000,
    requests_left: int = 199_999,
    bits_left: int = 249_000,
) -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "random": {"data": data, "completionTime": "2014-05-19 14:26:14Z"},
        "bitsUsed": 16,
        "bitsLeft": bits_left,
        "requestsLeft": requests_left,
    }
    if advisory_delay is not None:
        result["advisoryDelay"] = advisory_delay
    return {"jsonrpc": "2.0", "result": result, "id": 42}


def make_usage_response(requests_left: int = 199_998, bits_left: int = 248_000) -> Dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "result": {
            "status": "running",
            "creationTime": "2013-02-01 17:53:40Z",
            "bitsLeft": bits_left,
            "requestsLeft": requests_left,
            "totalBits": 1_000,
            "totalRequests": 10,
        },
        "id": 43,
    }


def make_error_response(code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "error": {"code": code, "message": message, "data": None}, "id": 44}


@pytest.fixture
def generation_response():
    return make_generation_response


@pytest.fixture
def usage_response():
    return make_usage_response


@pytest.fixture
def error_response():
    return make_error_response


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def sleeps(fake_clock):
    """Records advisory waits (in seconds) and advances the fake clock instead of sleeping."""
    recorded: List[float] = []

    async def fake_sleep(seconds: float) -> None:
        recorded.append(seconds)
        fake_clock.advance_ms(seconds * 1000)
        await asyncio.sleep(0)

    fake_sleep.recorded = recorded
    return fake_sleep


@pytest.fixture
def events():
    return []


@pytest.fixture
def make_invoker(fake_transport, fake_clock, sleeps, events):
    def _make(max_blocking_time_ms: float = 3000) -> ThrottledInvoker:
        session = ClientSession(api_key=ApiKey(TEST_API_KEY), max_blocking_time_ms=Milliseconds(max_blocking_time_ms))
        return ThrottledInvoker(
            session,
            fake_transport,
            clock=fake_clock,
            sleep=sleeps,
            event_sink=events.append,
        )
    return _make


@pytest.fixture
def service(make_invoker) -> RandomService:
    return RandomService(make_invoker())


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Keeps user config files, .env files and RANDCLI_* variables out of tests."""
    for name in list(os.environ):
        if name.startswith(settings.ENV_PREFIX):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(settings, "DEFAULT_CONFIG_FILE", tmp_path / "no-config.yaml")
    monkeypatch.chdir(tmp_path)
    settings.reset_configuration()
    settings.clear_test_config()
    yield
    settings.reset_configuration()
    settings.clear_test_config()
