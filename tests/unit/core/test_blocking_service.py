import asyncio
import threading
import time
import uuid

import pytest

from randcli.core.services.blocking_service import BlockingRandomService
from randcli.core.services.random_service import RandomService
from randcli.domain.interfaces.transport import RpcTransport
from randcli.domain.models.common import ApiKey
from randcli.domain.models.errors import Interrupted, ThrottleExceeded
from randcli.domain.models.session import ClientSession
from randcli.infrastructure.resilience.throttled_invoker import ThrottledInvoker


class HangingTransport(RpcTransport):
    """Holds every request until the transport is closed."""

    def __init__(self, response):
        self.response = response
        self.started = threading.Event()
        self._release = None

    async def send(self, payload):
        self._release = asyncio.Event()
        self.started.set()
        await self._release.wait()
        return self.response

    async def aclose(self):
        if self._release is not None:
            self._release.set()


@pytest.fixture
def blocking(service):
    client = BlockingRandomService(service, poll_interval_ms=5)
    yield client
    client.close()


def test_calls_run_on_worker_loop(blocking, fake_transport, generation_response):
    fake_transport.queue(generation_response([2, 3]))

    assert blocking.generate_integers(2, 1, 6) == [2, 3]
    assert blocking.session.quota.requests_left == 199_999


def test_every_operation_is_exposed(blocking, fake_transport, generation_response, usage_response):
    raw_uuid = str(uuid.uuid4())
    fake_transport.queue(
        generation_response([0.5], advisory_delay=0),
        generation_response([1.25], advisory_delay=0),
        generation_response(["abc"], advisory_delay=0),
        generation_response([raw_uuid], advisory_delay=0),
        usage_response(requests_left=5, bits_left=600),
    )

    assert blocking.generate_decimal_fractions(1, 2) == [0.5]
    assert blocking.generate_gaussians(1, 0.0, 1.0, 3) == [1.25]
    assert blocking.generate_strings(1, 3, "abc") == ["abc"]
    assert blocking.generate_uuids(1) == [uuid.UUID(raw_uuid)]
    assert blocking.get_usage().bits_left == 600
    assert blocking.requests_left() == 5
    assert blocking.bits_left() == 600
    assert len(fake_transport.payloads) == 5


def test_errors_propagate_to_caller(blocking, fake_transport, generation_response):
    fake_transport.queue(generation_response([1], advisory_delay=10_000))
    blocking.generate_integers(1, 1, 6)

    with pytest.raises(ThrottleExceeded):
        blocking.generate_integers(1, 1, 6)


def test_interrupt_aborts_waiting_call(generation_response):
    transport = HangingTransport(generation_response([1]))
    invoker = ThrottledInvoker(ClientSession(api_key=ApiKey("k")), transport)
    client = BlockingRandomService(RandomService(invoker), poll_interval_ms=5)

    def interrupt_when_sent():
        transport.started.wait(timeout=5)
        client.interrupt()

    helper = threading.Thread(target=interrupt_when_sent)
    helper.start()
    try:
        with pytest.raises(Interrupted):
            client.generate_integers(1, 1, 6)
    finally:
        helper.join(timeout=5)
        client.close()


def test_interrupt_is_not_lost_when_another_call_starts(generation_response):
    transport = HangingTransport(generation_response([1]))
    invoker = ThrottledInvoker(ClientSession(api_key=ApiKey("k")), transport)
    client = BlockingRandomService(RandomService(invoker), poll_interval_ms=200)
    outcomes = {}

    def call(name):
        try:
            outcomes[name] = client.generate_integers(1, 1, 6)
        except Interrupted as e:
            outcomes[name] = e

    first = threading.Thread(target=call, args=("first",))
    first.start()
    assert transport.started.wait(timeout=5)
    client.interrupt()
    # Starts while the first caller has not yet seen its interrupt.
    second = threading.Thread(target=call, args=("second",))
    second.start()
    first.join(timeout=5)
    try:
        assert isinstance(outcomes.get("first"), Interrupted)
    finally:
        deadline = time.monotonic() + 5
        while second.is_alive() and time.monotonic() < deadline:
            client.interrupt()
            second.join(timeout=0.05)
        client.close()
    assert isinstance(outcomes["second"], Interrupted)


class SilentTransport(RpcTransport):
    """Never answers; records whether its pending request was cancelled."""

    def __init__(self):
        self.started = threading.Event()
        self.cancelled = False

    async def send(self, payload):
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise

    async def aclose(self):
        pass


def test_close_cancels_abandoned_requests():
    transport = SilentTransport()
    invoker = ThrottledInvoker(ClientSession(api_key=ApiKey("k")), transport)
    client = BlockingRandomService(RandomService(invoker), poll_interval_ms=5)

    def interrupt_when_sent():
        transport.started.wait(timeout=5)
        client.interrupt()

    helper = threading.Thread(target=interrupt_when_sent)
    helper.start()
    with pytest.raises(Interrupted):
        client.generate_uuids(1)
    helper.join(timeout=5)

    client.close()

    assert transport.cancelled
    assert not client._thread.is_alive()
    assert client._loop.is_closed()


def test_keyboard_interrupt_becomes_interrupted(blocking, fake_transport, generation_response, mocker):
    fake_transport.queue(generation_response([1]))
    mocker.patch(
        "randcli.core.services.blocking_service.concurrent.futures.wait",
        side_effect=KeyboardInterrupt,
    )

    with pytest.raises(Interrupted):
        blocking.generate_integers(1, 1, 6)


def test_close_closes_transport_and_rejects_calls(service, fake_transport):
    client = BlockingRandomService(service, poll_interval_ms=5)
    client.close()
    client.close()

    assert fake_transport.closed
    with pytest.raises(RuntimeError, match="closed"):
        client.generate_uuids(1)


def test_context_manager_closes(service, fake_transport):
    with BlockingRandomService(service) as client:
        assert isinstance(client, BlockingRandomService)
    assert fake_transport.closed


def test_poll_interval_must_be_positive(service):
    with pytest.raises(ValueError):
        BlockingRandomService(service, poll_interval_ms=0)
