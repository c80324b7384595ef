"""Application service exposing the random.org operations.

Each operation is a thin adapter: build the request, pass it through the
throttled invoker, extract the typed result. All validation happens in
the request builder, so invalid calls never reach the network.
"""

import logging
import uuid
from typing import Callable, List, Optional

from randcli.domain.interfaces.transport import RpcTransport
from randcli.domain.models.common import (
    ApiKey, DEFAULT_ENDPOINT, DEFAULT_MAX_BLOCKING_TIME_MS, DEFAULT_REQUEST_TIMEOUT_S, Milliseconds
)
from randcli.domain.models.errors import MalformedResponse
from randcli.domain.models.rpc import QuotaSnapshot
from randcli.domain.models.session import ClientSession
from randcli.infrastructure.resilience.throttled_invoker import EventSink, ThrottledInvoker
from randcli.infrastructure.rpc import request_builder
from randcli.infrastructure.rpc.request_builder import REPLACEMENT_DEFAULT
from randcli.infrastructure.rpc.result_extractor import (
    extract_floats, extract_ints, extract_quota, extract_strings, extract_uuids
)
from randcli.infrastructure.rpc.transport import HttpxTransport

logger = logging.getLogger(__name__)


class RandomService:
    """Async client for the random.org JSON-RPC API."""

    def __init__(self, invoker: ThrottledInvoker):
        self.invoker = invoker

    @property
    def session(self) -> ClientSession:
        return self.invoker.session

    @property
    def api_key(self) -> ApiKey:
        return self.session.api_key

    # --- Generation ---

    async def generate_integers(
        self, n: int, min_value: int, max_value: int, replacement: bool = REPLACEMENT_DEFAULT
    ) -> List[int]:
        """Generates true random integers within [min_value, max_value].

        Args:
            n: How many integers, within [1, 1e4].
            min_value: Lower boundary, within [-1e9, 1e9].
            max_value: Upper boundary, within [-1e9, 1e9].
            replacement: True allows duplicates (like dice rolls); False
                draws unique values (like raffle tickets).
        """
        method, params = request_builder.build_integers(self.api_key, n, min_value, max_value, replacement)
        response = await self.invoker.invoke(method, params)
        return extract_ints(response)

    async def generate_decimal_fractions(
        self, n: int, decimal_places: int, replacement: bool = REPLACEMENT_DEFAULT
    ) -> List[float]:
        """Generates decimal fractions uniformly distributed over [0, 1]."""
        method, params = request_builder.build_decimal_fractions(self.api_key, n, decimal_places, replacement)
        response = await self.invoker.invoke(method, params)
        return extract_floats(response)

    async def generate_gaussians(
        self, n: int, mean: float, standard_deviation: float, significant_digits: int
    ) -> List[float]:
        """Generates numbers from a Gaussian distribution."""
        method, params = request_builder.build_gaussians(
            self.api_key, n, mean, standard_deviation, significant_digits
        )
        response = await self.invoker.invoke(method, params)
        return extract_floats(response)

    async def generate_strings(
        self, n: int, length: int, characters: str, replacement: bool = REPLACEMENT_DEFAULT
    ) -> List[str]:
        """Generates random strings of `length` drawn from `characters`."""
        method, params = request_builder.build_strings(self.api_key, n, length, characters, replacement)
        response = await self.invoker.invoke(method, params)
        return extract_strings(response)

    async def generate_uuids(self, n: int) -> List[uuid.UUID]:
        """Generates version 4 UUIDs."""
        method, params = request_builder.build_uuids(self.api_key, n)
        response = await self.invoker.invoke(method, params)
        return extract_uuids(response)

    # --- Quota ---

    async def get_usage(self) -> QuotaSnapshot:
        """Queries the key's remaining quota. Leaves throttle state untouched."""
        method, params = request_builder.build_usage(self.api_key)
        response = await self.invoker.invoke(method, params)
        quota = extract_quota(response.result, self.invoker.now_ms())
        if quota is None:
            raise MalformedResponse("getUsage result lacks requestsLeft/bitsLeft")
        return quota

    async def _fresh_quota(self) -> QuotaSnapshot:
        if self.session.quota_is_stale(self.invoker.now_ms()):
            logger.debug("Quota snapshot missing or older than one hour; refreshing.")
            return await self.get_usage()
        return self.session.quota

    async def requests_left(self) -> int:
        """Remaining requests, refreshed when the last report is over an hour old."""
        return (await self._fresh_quota()).requests_left

    async def bits_left(self) -> int:
        """Remaining bits, refreshed when the last report is over an hour old."""
        return (await self._fresh_quota()).bits_left

    async def aclose(self) -> None:
        await self.invoker.aclose()


def create_random_service(
    api_key: str,
    max_blocking_time_ms: float = DEFAULT_MAX_BLOCKING_TIME_MS,
    endpoint: str = DEFAULT_ENDPOINT,
    request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S,
    transport: Optional[RpcTransport] = None,
    event_sink: Optional[EventSink] = None,
    clock: Optional[Callable[[], float]] = None,
) -> RandomService:
    """Wires a session, a transport and an invoker into a RandomService."""
    session = ClientSession(api_key=ApiKey(api_key), max_blocking_time_ms=Milliseconds(max_blocking_time_ms))
    effective_transport = transport or HttpxTransport(endpoint=endpoint, timeout_s=request_timeout_s)
    if clock is not None:
        invoker = ThrottledInvoker(session, effective_transport, clock=clock, event_sink=event_sink)
    else:
        invoker = ThrottledInvoker(session, effective_transport, event_sink=event_sink)
    return RandomService(invoker)
