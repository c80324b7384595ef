"""Blocking facade over RandomService.

The async service runs on a private event loop owned by a daemon worker
thread, so callers that cannot (or must not) do network I/O on their own
thread still get plain blocking calls. The calling thread waits on the
submitted future with a short poll, which keeps it responsive to
`interrupt()` and to KeyboardInterrupt.
"""

import asyncio
import concurrent.futures
import logging
import threading
import uuid
from typing import Any, Coroutine, List, Optional, Set, TypeVar

from randcli.core.services.random_service import RandomService
from randcli.domain.models.common import DEFAULT_POLL_INTERVAL_MS
from randcli.domain.models.errors import Interrupted
from randcli.domain.models.rpc import QuotaSnapshot
from randcli.domain.models.session import ClientSession
from randcli.infrastructure.rpc.request_builder import REPLACEMENT_DEFAULT

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def _cancel_pending() -> int:
    """Cancels every other task on the running loop and waits for them."""
    current = asyncio.current_task()
    pending = [task for task in asyncio.all_tasks() if task is not current]
    for task in pending:
        task.cancel()
    await asyncio.gather(*pending, return_exceptions=True)
    return len(pending)


class BlockingRandomService:
    """Synchronous random.org client backed by a worker event loop."""

    def __init__(self, service: RandomService, poll_interval_ms: float = DEFAULT_POLL_INTERVAL_MS):
        """Starts the worker thread.

        Args:
            service: The async service to drive. It must not be used from
                any other event loop afterwards.
            poll_interval_ms: How often the waiting caller checks for
                completion or interruption.
        """
        if poll_interval_ms <= 0:
            raise ValueError("poll_interval_ms must be positive.")
        self.service = service
        self.poll_interval_s = poll_interval_ms / 1000.0
        self._waiters: Set[threading.Event] = set()
        self._waiters_lock = threading.Lock()
        self._closed = False
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, name="randcli-rpc", daemon=True)
        self._thread.start()
        logger.info(f"BlockingRandomService started (poll interval {poll_interval_ms:.0f}ms)")

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    @property
    def session(self) -> ClientSession:
        return self.service.session

    def interrupt(self) -> None:
        """Aborts every call currently being waited on, from any thread."""
        logger.debug("Interrupt requested.")
        with self._waiters_lock:
            for waiter in self._waiters:
                waiter.set()

    def _call(self, coro: Coroutine[Any, Any, T]) -> T:
        if self._closed:
            coro.close()
            raise RuntimeError("BlockingRandomService is closed.")
        # One event per call, so a new caller never clears another's interrupt.
        interrupted = threading.Event()
        with self._waiters_lock:
            self._waiters.add(interrupted)
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        try:
            while True:
                done, _ = concurrent.futures.wait([future], timeout=self.poll_interval_s)
                if done:
                    return future.result()
                if interrupted.is_set():
                    self._abandon(future)
                    raise Interrupted("Call interrupted while waiting for the server.")
        except KeyboardInterrupt as e:
            self._abandon(future)
            raise Interrupted("Call interrupted by keyboard interrupt.") from e
        finally:
            with self._waiters_lock:
                self._waiters.discard(interrupted)

    @staticmethod
    def _abandon(future: "concurrent.futures.Future[Any]") -> None:
        # Cancelling stops a pending advisory wait; a request already on the
        # wire is shielded by the invoker and settles in the background.
        future.cancel()
        logger.warning("Abandoned an in-progress call.")

    # --- Operations ---

    def generate_integers(
        self, n: int, min_value: int, max_value: int, replacement: bool = REPLACEMENT_DEFAULT
    ) -> List[int]:
        return self._call(self.service.generate_integers(n, min_value, max_value, replacement))

    def generate_decimal_fractions(
        self, n: int, decimal_places: int, replacement: bool = REPLACEMENT_DEFAULT
    ) -> List[float]:
        return self._call(self.service.generate_decimal_fractions(n, decimal_places, replacement))

    def generate_gaussians(
        self, n: int, mean: float, standard_deviation: float, significant_digits: int
    ) -> List[float]:
        return self._call(self.service.generate_gaussians(n, mean, standard_deviation, significant_digits))

    def generate_strings(
        self, n: int, length: int, characters: str, replacement: bool = REPLACEMENT_DEFAULT
    ) -> List[str]:
        return self._call(self.service.generate_strings(n, length, characters, replacement))

    def generate_uuids(self, n: int) -> List[uuid.UUID]:
        return self._call(self.service.generate_uuids(n))

    def get_usage(self) -> QuotaSnapshot:
        return self._call(self.service.get_usage())

    def requests_left(self) -> int:
        return self._call(self.service.requests_left())

    def bits_left(self) -> int:
        return self._call(self.service.bits_left())

    # --- Lifecycle ---

    def close(self, timeout_s: Optional[float] = 5.0) -> None:
        """Closes the transport and stops the worker thread.

        Abandoned requests still pending on the worker loop are cancelled
        before the loop is closed.
        """
        if self._closed:
            return
        try:
            self._call(self.service.aclose())
        finally:
            self._closed = True
            self._drain(timeout_s)
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout=timeout_s)
            if not self._thread.is_alive():
                self._loop.close()
            logger.info("BlockingRandomService closed.")

    def _drain(self, timeout_s: Optional[float]) -> None:
        future = asyncio.run_coroutine_threadsafe(_cancel_pending(), self._loop)
        try:
            cancelled = future.result(timeout=timeout_s)
        except concurrent.futures.TimeoutError:
            logger.warning("Timed out cancelling pending requests on close.")
            return
        if cancelled:
            logger.debug(f"Cancelled {cancelled} pending task(s) on close.")

    def __enter__(self) -> "BlockingRandomService":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
