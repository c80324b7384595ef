"""Throttled invocation of JSON-RPC calls.

Every generation response from random.org carries an `advisoryDelay`: the
number of milliseconds the client should wait before its next request.
The invoker enforces that delay, refuses calls whose wait would exceed the
session's blocking ceiling, sends the request, classifies the response and
then updates the session's throttle state. It never retries.
"""

import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Optional

from randcli.domain.events.api_events import (
    DomainEvent, ApiCallDeferred, ApiCallInitiated, ApiCallSucceeded, ApiCallFailed
)
from randcli.domain.interfaces.transport import RpcTransport
from randcli.domain.models.common import MethodName, Milliseconds, RpcParams
from randcli.domain.models.errors import RandomClientError, ThrottleExceeded, TransportFailure
from randcli.domain.models.rpc import RequestEnvelope, ResponseEnvelope
from randcli.domain.models.session import ClientSession
from randcli.infrastructure.rpc.response_classifier import classify
from randcli.infrastructure.rpc.result_extractor import extract_quota

logger = logging.getLogger(__name__)

EventSink = Callable[[DomainEvent], None]


def log_event(event: DomainEvent) -> None:
    """Default event sink: events only go to the debug log."""
    logger.debug(f"EVENT: {event}")


class ThrottledInvoker:
    """Sends requests for one ClientSession, honouring the advisory delay.

    Calls are serialized with an asyncio.Lock (FIFO), so the session's
    throttle state has a single writer. A cancelled call keeps the lock
    until its in-flight request settles, so requests never overlap and the
    abandoned response still sets the advisory delay. One invoker must be
    used from a single event loop.
    """

    def __init__(
        self,
        session: ClientSession,
        transport: RpcTransport,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        event_sink: Optional[EventSink] = None,
    ):
        """Initializes the invoker.

        Args:
            session: The session whose throttle state this invoker owns.
            transport: Delivers payloads to the server.
            clock: Monotonic clock in seconds.
            sleep: Coroutine used for the advisory wait (seconds).
            event_sink: Receives lifecycle events. Defaults to debug logging.
        """
        self.session = session
        self.transport = transport
        self._clock = clock
        self._sleep = sleep
        self._emit = event_sink or log_event
        self._lock = asyncio.Lock()
        self._lock_handed_off = False
        logger.info(
            f"ThrottledInvoker initialized: max_blocking_time={session.max_blocking_time_ms:.0f}ms"
        )

    def now_ms(self) -> Milliseconds:
        return Milliseconds(self._clock() * 1000.0)

    def required_wait_ms(self) -> Milliseconds:
        """Time still to wait before the next request may be sent."""
        return self.session.throttle.required_wait_ms(self.now_ms())

    async def invoke(self, method: MethodName, params: RpcParams) -> ResponseEnvelope:
        """Sends one request and returns the validated response.

        Args:
            method: The JSON-RPC method name.
            params: The parameter object, API key included.

        Returns:
            The ResponseEnvelope of a successful call.

        Raises:
            ThrottleExceeded: If the advisory wait exceeds the blocking ceiling.
                Raised before any network activity.
            TransportFailure, MalformedResponse, InvalidArgument, Unauthorized,
            ServerError: Propagated from the transport and the classifier.
            asyncio.CancelledError: If the caller is cancelled while waiting.
        """
        await self._lock.acquire()
        self._lock_handed_off = False
        try:
            return await self._invoke_locked(method, params)
        except RandomClientError as e:
            self._emit(ApiCallFailed(method=method, error_type=type(e).__name__, error_message=str(e)))
            raise
        finally:
            # An abandoned send keeps the session until it settles.
            if not self._lock_handed_off:
                self._lock.release()

    async def _invoke_locked(self, method: MethodName, params: RpcParams) -> ResponseEnvelope:
        # 1. Honour the advisory delay from the previous generation response
        wait_ms = self.required_wait_ms()
        if wait_ms > 0:
            if wait_ms > self.session.max_blocking_time_ms:
                logger.warning(
                    f"Refusing {method}: advised wait {wait_ms:.0f}ms exceeds "
                    f"max blocking time {self.session.max_blocking_time_ms:.0f}ms"
                )
                raise ThrottleExceeded(wait_ms, self.session.max_blocking_time_ms)
            self._emit(ApiCallDeferred(method=method, wait_time_ms=wait_ms))
            logger.debug(f"Waiting {wait_ms:.0f}ms before {method} (advisory delay)")
            await self._sleep(wait_ms / 1000.0)

        # 2. Dispatch. The send runs as its own task so a cancelled caller
        # leaves the request in flight; its values are then discarded.
        envelope = RequestEnvelope(method=method, params=params)
        self._emit(ApiCallInitiated(method=method, request_id=envelope.request_id))
        start_time = time.perf_counter()
        send_task = asyncio.ensure_future(self._send(envelope))
        try:
            raw = await asyncio.shield(send_task)
        except asyncio.CancelledError:
            logger.warning(f"Call to {method} was cancelled; the in-flight request will be discarded.")
            self._lock_handed_off = True
            send_task.add_done_callback(self._settle_abandoned)
            raise
        latency_ms = (time.perf_counter() - start_time) * 1000

        # 3. Classify and record; errors propagate without retry
        response = self._record(raw)

        logger.debug(
            f"{method} completed in {latency_ms:.2f}ms "
            f"(advisoryDelay={response.advisory_delay_ms}, request_id={envelope.request_id})"
        )
        self._emit(ApiCallSucceeded(
            method=method,
            latency_ms=latency_ms,
            advisory_delay_ms=response.advisory_delay_ms,
            request_id=envelope.request_id,
        ))
        return response

    def _record(self, raw: Any) -> ResponseEnvelope:
        """Classifies a raw response and updates the session from it.

        Every check runs before the session is touched, so a response that
        fails validation leaves throttle and quota state unchanged.
        """
        response = classify(raw)
        completed_at = self.now_ms()
        quota = extract_quota(response.result, completed_at)

        # Timestamp and delay are separate updates, both gated on the
        # advisoryDelay field (absent for getUsage).
        if response.advisory_delay_ms is not None:
            self.session.throttle.record_response_time(completed_at)
            self.session.throttle.record_advisory_delay(response.advisory_delay_ms)
        if quota is not None:
            self.session.quota = quota
        return response

    def _settle_abandoned(self, task: "asyncio.Task[Any]") -> None:
        # The caller is gone, but the server's advisory delay still applies
        # to whoever calls next.
        try:
            if task.cancelled():
                logger.debug("Abandoned request was cancelled before completing.")
            elif task.exception() is not None:
                exc = task.exception()
                logger.debug(f"Abandoned request finished with {type(exc).__name__}: {exc}")
            else:
                response = self._record(task.result())
                logger.debug(
                    f"Abandoned request finished; values discarded, "
                    f"advisoryDelay={response.advisory_delay_ms} recorded."
                )
        except RandomClientError as e:
            logger.debug(f"Abandoned request returned an unusable response: {e}")
        finally:
            self._lock_handed_off = False
            self._lock.release()

    async def _send(self, envelope: RequestEnvelope) -> Any:
        try:
            return await self.transport.send(envelope.to_payload())
        except RandomClientError:
            raise
        except Exception as e:
            logger.error(f"Unexpected transport error for {envelope.method}: {type(e).__name__} - {e}", exc_info=True)
            raise TransportFailure(f"Unexpected transport error: {e}") from e

    async def aclose(self) -> None:
        await self.transport.aclose()
