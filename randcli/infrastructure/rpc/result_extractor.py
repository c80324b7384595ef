"""Unwraps `result.random.data` into native Python values.

Extraction only runs on responses the classifier accepted. A missing level
or an element of the wrong type means the server and client disagree on
the protocol, so it raises MalformedResponse rather than a usage error.
"""

import re
import uuid
from collections.abc import Mapping
from typing import Any, Callable, List, Optional, TypeVar

from randcli.domain.models.common import Milliseconds
from randcli.domain.models.errors import MalformedResponse
from randcli.domain.models.rpc import QuotaSnapshot, ResponseEnvelope

T = TypeVar("T")

# Canonical 8-4-4-4-12 form only; uuid.UUID alone would also accept braces,
# urn prefixes and unhyphenated hex.
_UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


def unwrap_data(response: ResponseEnvelope) -> List[Any]:
    """Returns the raw list stored under result.random.data."""
    result = response.result
    if not isinstance(result, Mapping):
        raise MalformedResponse("Response has no result object")
    random_obj = result.get("random")
    if not isinstance(random_obj, Mapping):
        raise MalformedResponse("result.random is missing or not an object")
    data = random_obj.get("data")
    if not isinstance(data, list):
        raise MalformedResponse("result.random.data is missing or not a list")
    return data


def _to_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected an integer, got {value!r}")
    return value


def _to_float(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"expected a number, got {value!r}")
    return float(value)


def _to_str(value: Any) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected a string, got {value!r}")
    return value


def _to_uuid(value: Any) -> uuid.UUID:
    if not isinstance(value, str) or not _UUID_PATTERN.match(value):
        raise ValueError(f"expected an RFC 4122 UUID string, got {value!r}")
    return uuid.UUID(value)


def _extract(response: ResponseEnvelope, convert: Callable[[Any], T], kind: str) -> List[T]:
    values = []
    for index, raw in enumerate(unwrap_data(response)):
        try:
            values.append(convert(raw))
        except (TypeError, ValueError) as e:
            raise MalformedResponse(f"Element {index} of {kind} data is invalid: {e}") from e
    return values


def extract_ints(response: ResponseEnvelope) -> List[int]:
    return _extract(response, _to_int, "integer")


def extract_floats(response: ResponseEnvelope) -> List[float]:
    return _extract(response, _to_float, "decimal")


def extract_strings(response: ResponseEnvelope) -> List[str]:
    return _extract(response, _to_str, "string")


def extract_uuids(response: ResponseEnvelope) -> List[uuid.UUID]:
    return _extract(response, _to_uuid, "UUID")


def extract_quota(result: Any, received_at_ms: float) -> Optional[QuotaSnapshot]:
    """Reads requestsLeft/bitsLeft from a result object.

    Returns None when the result does not report quota at all; raises
    MalformedResponse when it does but the counters are not integers.
    """
    if not isinstance(result, Mapping) or "requestsLeft" not in result or "bitsLeft" not in result:
        return None
    try:
        requests_left = _to_int(result["requestsLeft"])
        bits_left = _to_int(result["bitsLeft"])
    except TypeError as e:
        raise MalformedResponse(f"Quota counters are invalid: {e}") from e
    return QuotaSnapshot(
        requests_left=requests_left,
        bits_left=bits_left,
        received_at_ms=Milliseconds(received_at_ms),
    )
