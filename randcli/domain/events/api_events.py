"""Domain Events emitted by the throttled invoker.

Examples include events for when calls are deferred, dispatched, fail, or
succeed. Events are handed to an event sink; the default sink only logs them.
"""

from dataclasses import dataclass, field
import time
from typing import Optional

# Base Event Class
@dataclass
class DomainEvent:
    """Base class for domain events."""
    pass

# --- Specific API Events ---

@dataclass
class ApiCallDeferred(DomainEvent):
    """Event triggered when a call waits for the server's advisory delay."""
    method: str
    wait_time_ms: float
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallInitiated(DomainEvent):
    """Event triggered when a request is about to be sent."""
    method: str
    request_id: Optional[int] = None
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallSucceeded(DomainEvent):
    """Event triggered when a response was classified as success."""
    method: str
    latency_ms: float
    advisory_delay_ms: Optional[float] = None
    request_id: Optional[int] = None
    timestamp: float = field(default_factory=time.time)

@dataclass
class ApiCallFailed(DomainEvent):
    """Event triggered when a call aborts with an error."""
    method: str
    error_type: str
    error_message: str
    request_id: Optional[int] = None
    timestamp: float = field(default_factory=time.time)
