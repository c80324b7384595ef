"""Builds method names and parameter sets for every random.org call.

Each builder validates its arguments against the server's documented
bounds and raises InvalidArgument before anything touches the network.
Builders are pure: they return a (method, params) pair and keep no state.
"""

from typing import Any, Tuple

from randcli.domain.models.common import (
    ApiKey,
    MethodName,
    RpcParams,
    INTEGER_METHOD,
    DECIMAL_FRACTION_METHOD,
    GAUSSIAN_METHOD,
    STRING_METHOD,
    UUID_METHOD,
    GET_USAGE_METHOD,
)
from randcli.domain.models.errors import InvalidArgument

# --- Server Bounds (inclusive) ---
MAX_COUNT = 10_000
MAX_UUID_COUNT = 1_000
INTEGER_LIMIT = 1_000_000_000
MAX_DECIMAL_PLACES = 20
GAUSSIAN_LIMIT = 1_000_000
MIN_SIGNIFICANT_DIGITS = 2
MAX_SIGNIFICANT_DIGITS = 20
MAX_STRING_LENGTH = 20
MAX_CHARACTERS = 80

REPLACEMENT_DEFAULT = True

RpcCall = Tuple[MethodName, RpcParams]


# --- Validation Helpers ---

def _require_int(name: str, value: Any, low: int, high: int) -> int:
    # bool is an int subclass; True must not pass as 1.
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(f"{name} must be an integer, got {type(value).__name__}")
    if not low <= value <= high:
        raise InvalidArgument(f"{name} must be within [{low}, {high}], got {value}")
    return value


def _require_number(name: str, value: Any, low: float, high: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidArgument(f"{name} must be a number, got {type(value).__name__}")
    if not low <= value <= high:
        raise InvalidArgument(f"{name} must be within [{low:g}, {high:g}], got {value}")
    return value


def _require_bool(name: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise InvalidArgument(f"{name} must be a boolean, got {type(value).__name__}")
    return value


def _base_params(api_key: ApiKey) -> RpcParams:
    if not isinstance(api_key, str) or not api_key:
        raise InvalidArgument("API key must be a non-empty string")
    return RpcParams({"apiKey": api_key})


# --- Builders ---

def build_integers(
    api_key: ApiKey, n: int, min_value: int, max_value: int, replacement: bool = REPLACEMENT_DEFAULT
) -> RpcCall:
    """Parameters for generateIntegers.

    Args:
        api_key: The random.org API key.
        n: How many integers, within [1, 1e4].
        min_value: Lower bound of the range, within [-1e9, 1e9].
        max_value: Upper bound of the range, within [-1e9, 1e9].
        replacement: False asks for unique values, so the range must be
            large enough to supply n of them.
    """
    params = _base_params(api_key)
    params["n"] = _require_int("n", n, 1, MAX_COUNT)
    params["min"] = _require_int("min", min_value, -INTEGER_LIMIT, INTEGER_LIMIT)
    params["max"] = _require_int("max", max_value, -INTEGER_LIMIT, INTEGER_LIMIT)
    params["replacement"] = _require_bool("replacement", replacement)
    if min_value > max_value:
        raise InvalidArgument(f"min ({min_value}) must be less than or equal to max ({max_value})")
    if not replacement and n > max_value - min_value + 1:
        raise InvalidArgument(
            f"Cannot draw {n} unique integers from [{min_value}, {max_value}] without replacement"
        )
    return INTEGER_METHOD, params


def build_decimal_fractions(
    api_key: ApiKey, n: int, decimal_places: int, replacement: bool = REPLACEMENT_DEFAULT
) -> RpcCall:
    """Parameters for generateDecimalFractions (uniform over [0, 1])."""
    params = _base_params(api_key)
    params["n"] = _require_int("n", n, 1, MAX_COUNT)
    params["decimalPlaces"] = _require_int("decimalPlaces", decimal_places, 1, MAX_DECIMAL_PLACES)
    params["replacement"] = _require_bool("replacement", replacement)
    return DECIMAL_FRACTION_METHOD, params


def build_gaussians(
    api_key: ApiKey, n: int, mean: float, standard_deviation: float, significant_digits: int
) -> RpcCall:
    """Parameters for generateGaussians."""
    params = _base_params(api_key)
    params["n"] = _require_int("n", n, 1, MAX_COUNT)
    params["mean"] = _require_number("mean", mean, -GAUSSIAN_LIMIT, GAUSSIAN_LIMIT)
    params["standardDeviation"] = _require_number(
        "standardDeviation", standard_deviation, -GAUSSIAN_LIMIT, GAUSSIAN_LIMIT
    )
    params["significantDigits"] = _require_int(
        "significantDigits", significant_digits, MIN_SIGNIFICANT_DIGITS, MAX_SIGNIFICANT_DIGITS
    )
    return GAUSSIAN_METHOD, params


def build_strings(
    api_key: ApiKey, n: int, length: int, characters: str, replacement: bool = REPLACEMENT_DEFAULT
) -> RpcCall:
    """Parameters for generateStrings.

    All strings share the same length; characters is the allowed alphabet.
    """
    params = _base_params(api_key)
    params["n"] = _require_int("n", n, 1, MAX_COUNT)
    params["length"] = _require_int("length", length, 1, MAX_STRING_LENGTH)
    if not isinstance(characters, str):
        raise InvalidArgument(f"characters must be a string, got {type(characters).__name__}")
    if not 1 <= len(characters) <= MAX_CHARACTERS:
        raise InvalidArgument(
            f"characters must contain between 1 and {MAX_CHARACTERS} characters, got {len(characters)}"
        )
    params["characters"] = characters
    params["replacement"] = _require_bool("replacement", replacement)
    return STRING_METHOD, params


def build_uuids(api_key: ApiKey, n: int) -> RpcCall:
    """Parameters for generateUUIDs (version 4, RFC 4122 section 4.4)."""
    params = _base_params(api_key)
    params["n"] = _require_int("n", n, 1, MAX_UUID_COUNT)
    return UUID_METHOD, params


def build_usage(api_key: ApiKey) -> RpcCall:
    """Parameters for getUsage; only the API key is sent."""
    return GET_USAGE_METHOD, _base_params(api_key)
