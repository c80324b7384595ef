"""Classifies decoded JSON-RPC responses.

A response must carry exactly one of `result` and `error`. Error payloads
are mapped to the client's exception types through the closed code table
in `randcli.domain.models.errors`; successful payloads are wrapped in a
ResponseEnvelope together with the advisory delay, when the method sends one.
"""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from randcli.domain.models.common import Milliseconds
from randcli.domain.models.errors import MalformedResponse, error_for_code
from randcli.domain.models.rpc import ResponseEnvelope

logger = logging.getLogger(__name__)


def _parse_advisory_delay(result: Mapping) -> Optional[Milliseconds]:
    if "advisoryDelay" not in result:
        return None
    value = result["advisoryDelay"]
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise MalformedResponse(f"advisoryDelay must be a non-negative number, got {value!r}")
    return Milliseconds(value)


def classify(raw: Any) -> ResponseEnvelope:
    """Validates a decoded response and raises the matching error, if any.

    Args:
        raw: The decoded JSON document returned by the transport.

    Returns:
        A ResponseEnvelope holding the result and the advisory delay.

    Raises:
        MalformedResponse: If the envelope shape violates the protocol.
        InvalidArgument / Unauthorized: For known client-fault codes.
        ServerError: For any other server-reported code.
    """
    if not isinstance(raw, Mapping):
        raise MalformedResponse(f"Response must be a JSON object, got {type(raw).__name__}")

    has_result = "result" in raw and raw["result"] is not None
    has_error = "error" in raw and raw["error"] is not None
    if has_result == has_error:
        state = "both" if has_result else "neither"
        raise MalformedResponse(f"Response must contain exactly one of result/error, found {state}")

    if has_error:
        error = raw["error"]
        if not isinstance(error, Mapping):
            raise MalformedResponse("error must be a JSON object")
        code = error.get("code")
        message = error.get("message")
        if isinstance(code, bool) or not isinstance(code, int) or not isinstance(message, str):
            raise MalformedResponse(f"error must carry an integer code and a string message: {dict(error)!r}")
        exc = error_for_code(code, message)
        logger.warning(f"Server reported error {code} ({type(exc).__name__}): {message}")
        raise exc

    result = raw["result"]
    if not isinstance(result, Mapping):
        raise MalformedResponse(f"result must be a JSON object, got {type(result).__name__}")

    return ResponseEnvelope(
        result=dict(result),
        advisory_delay_ms=_parse_advisory_delay(result),
        request_id=raw.get("id"),
    )
