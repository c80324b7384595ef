"""Client session state.

A session owns the API key, the blocking ceiling and the throttle state.
Only the throttled invoker writes to it, and it does so while holding the
session's call lock.
"""

from dataclasses import dataclass, field
from typing import Optional

from .common import ApiKey, DEFAULT_MAX_BLOCKING_TIME_MS, Milliseconds, QUOTA_MAX_AGE_MS
from .errors import InvalidArgument
from .rpc import QuotaSnapshot


@dataclass
class ThrottleState:
    """Last completed generation response time and the delay it advised."""
    advisory_delay_ms: Milliseconds = Milliseconds(0)
    last_response_received_ms: Optional[Milliseconds] = None

    def required_wait_ms(self, now_ms: float) -> Milliseconds:
        """Returns max(0, advisory_delay - (now - last_response_received))."""
        if self.last_response_received_ms is None:
            return Milliseconds(0)
        elapsed = now_ms - self.last_response_received_ms
        return Milliseconds(max(0.0, self.advisory_delay_ms - elapsed))

    def record_response_time(self, now_ms: float) -> None:
        self.last_response_received_ms = Milliseconds(now_ms)

    def record_advisory_delay(self, delay_ms: float) -> None:
        self.advisory_delay_ms = Milliseconds(delay_ms)


@dataclass(repr=False)
class ClientSession:
    """State shared by every call made through one client instance."""
    api_key: ApiKey
    max_blocking_time_ms: Milliseconds = DEFAULT_MAX_BLOCKING_TIME_MS
    throttle: ThrottleState = field(default_factory=ThrottleState)
    quota: Optional[QuotaSnapshot] = None

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str) or not self.api_key.strip():
            raise InvalidArgument("API key must be a non-empty string.")
        if self.max_blocking_time_ms < 0:
            raise InvalidArgument("max_blocking_time_ms must not be negative.")

    def quota_is_stale(self, now_ms: float) -> bool:
        """True when no quota is known or the snapshot is older than an hour."""
        if self.quota is None:
            return True
        return now_ms - self.quota.received_at_ms > QUOTA_MAX_AGE_MS

    def __repr__(self) -> str:
        # Keep the key out of logs and tracebacks.
        return (
            f"ClientSession(api_key='***', max_blocking_time_ms={self.max_blocking_time_ms}, "
            f"throttle={self.throttle!r}, quota={self.quota!r})"
        )
