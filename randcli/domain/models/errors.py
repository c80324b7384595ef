"""Error taxonomy for the random.org client.

Every failure aborts the current call; nothing here is retried internally.
Server-reported faults are split by an explicit, closed table of known
client-fault codes. Anything outside the table is a ServerError.
"""

from enum import IntEnum
from typing import Optional


class RandomClientError(Exception):
    """Base class for every error raised by the client."""


class InvalidArgument(RandomClientError, ValueError):
    """A parameter was rejected, either locally or by the server.

    Attributes:
        code: The server error code, or None for local validation failures.
        server_message: The message reported by the server, if any.
    """

    def __init__(self, message: str, code: Optional[int] = None, server_message: Optional[str] = None):
        self.code = code
        self.server_message = server_message
        super().__init__(message)


class Unauthorized(InvalidArgument):
    """The server rejected the API key or the key's quota is exhausted."""


class ThrottleExceeded(RandomClientError):
    """The advisory wait is longer than the caller is willing to block."""

    def __init__(self, required_wait_ms: float, max_blocking_time_ms: float):
        self.required_wait_ms = required_wait_ms
        self.max_blocking_time_ms = max_blocking_time_ms
        super().__init__(
            f"Advised wait of {required_wait_ms:.0f}ms exceeds the maximum "
            f"blocking time of {max_blocking_time_ms:.0f}ms"
        )


class ServerError(RandomClientError):
    """The server reported an error code outside the known client-fault table."""

    def __init__(self, message: str, code: Optional[int] = None, server_message: Optional[str] = None):
        self.code = code
        self.server_message = server_message
        super().__init__(message)


class MalformedResponse(RandomClientError):
    """A response did not have the shape the protocol promises."""


class Interrupted(RandomClientError):
    """The caller's wait was interrupted; the call was abandoned."""


class TransportFailure(RandomClientError):
    """The HTTP round trip failed (connection, timeout, non-2xx status)."""


# --- Server Error Codes ---

class ClientFaultCode(IntEnum):
    """Server error codes caused by caller-supplied parameters or credentials."""
    PARAMETER_MALFORMED = 200
    PARAMETER_MISSING = 201
    PARAMETER_UNSUPPORTED = 202
    PARAMETER_TOO_LONG_OR_SHORT = 203
    PARAMETER_OUT_OF_RANGE = 204
    MIN_GREATER_THAN_MAX = 300
    NOT_ENOUGH_UNIQUE_VALUES = 301
    SEQUENCE_TOO_LONG = 302
    API_KEY_UNKNOWN = 400
    API_KEY_NOT_RUNNING = 401
    BIT_QUOTA_EXCEEDED = 402
    REQUEST_QUOTA_EXCEEDED = 403


CLIENT_FAULT_CODES = frozenset(int(code) for code in ClientFaultCode)

AUTHORIZATION_CODES = frozenset({
    int(ClientFaultCode.API_KEY_UNKNOWN),
    int(ClientFaultCode.API_KEY_NOT_RUNNING),
    int(ClientFaultCode.BIT_QUOTA_EXCEEDED),
    int(ClientFaultCode.REQUEST_QUOTA_EXCEEDED),
})


def format_server_error(code: int, message: str) -> str:
    """Renders a server error the same way for every category."""
    return f"Code: {code}. Message: {message}"


def error_for_code(code: int, message: str) -> RandomClientError:
    """Maps a server error code to the matching exception instance.

    Membership is checked exactly against the closed tables above.
    """
    text = format_server_error(code, message)
    if code in AUTHORIZATION_CODES:
        return Unauthorized(text, code=code, server_message=message)
    if code in CLIENT_FAULT_CODES:
        return InvalidArgument(text, code=code, server_message=message)
    return ServerError(text, code=code, server_message=message)
