"""Domain models for the JSON-RPC envelopes exchanged with the server."""

import random
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .common import JSONRPC_VERSION, MethodName, Milliseconds, RequestId, RpcParams

# Signed 32-bit range, matching the tag width other random.org clients send.
_REQUEST_ID_MIN = -(2 ** 31)
_REQUEST_ID_MAX = 2 ** 31 - 1


def new_request_id() -> RequestId:
    """Generates a local request tag. Uniqueness is not required."""
    return RequestId(random.randint(_REQUEST_ID_MIN, _REQUEST_ID_MAX))


@dataclass(frozen=True)
class RequestEnvelope:
    """A single JSON-RPC request, immutable once built."""
    method: MethodName
    params: RpcParams
    request_id: RequestId = field(default_factory=new_request_id)
    jsonrpc: str = JSONRPC_VERSION

    def to_payload(self) -> Dict[str, Any]:
        """Returns the wire representation of the envelope."""
        return {
            "jsonrpc": self.jsonrpc,
            "method": self.method,
            "params": dict(self.params),
            "id": self.request_id,
        }


@dataclass(frozen=True)
class ResponseEnvelope:
    """A decoded, successful response.

    Error payloads never become envelopes; the classifier raises on them.
    """
    result: Optional[Dict[str, Any]] = None
    advisory_delay_ms: Optional[Milliseconds] = None  # Only for generation methods
    request_id: Optional[Any] = None


@dataclass(frozen=True)
class QuotaSnapshot:
    """Remaining quota as last reported by the server."""
    requests_left: int
    bits_left: int
    received_at_ms: Milliseconds  # Monotonic clock reading, not wall time
