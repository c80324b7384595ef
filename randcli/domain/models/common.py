"""Defines common Value Objects used across the client.

These objects represent simple values like API keys, method names and
durations, ensuring consistency and type safety.
"""

from typing import Any, Dict, NewType

# === Core Value Objects ===

# Using NewType for semantic clarity, although they are plain values at runtime.
ApiKey = NewType("ApiKey", str)                 # Opaque random.org API key
MethodName = NewType("MethodName", str)         # JSON-RPC method name
Milliseconds = NewType("Milliseconds", float)   # Durations and timestamps in ms
RequestId = NewType("RequestId", int)           # Local request tag, never correlated
RpcParams = NewType("RpcParams", Dict[str, Any])  # The "params" object of a request

# === Protocol Constants ===

JSONRPC_VERSION = "2.0"
DEFAULT_ENDPOINT = "https://api.random.org/json-rpc/1/invoke"
CONTENT_TYPE = "application/json"

INTEGER_METHOD = MethodName("generateIntegers")
DECIMAL_FRACTION_METHOD = MethodName("generateDecimalFractions")
GAUSSIAN_METHOD = MethodName("generateGaussians")
STRING_METHOD = MethodName("generateStrings")
UUID_METHOD = MethodName("generateUUIDs")
GET_USAGE_METHOD = MethodName("getUsage")

# === Client Defaults ===

DEFAULT_MAX_BLOCKING_TIME_MS = Milliseconds(3000)
DEFAULT_REQUEST_TIMEOUT_S = 30.0
DEFAULT_POLL_INTERVAL_MS = Milliseconds(50)
QUOTA_MAX_AGE_MS = Milliseconds(60 * 60 * 1000)  # One hour
