"""
Value formatting for cache entries.

Structured values (dict, list, tuple, set) are stored as JSON text and decoded
again on read. Scalars are stored as they are, once orjson has confirmed it
can write them. Decoding only accepts JSON text whose top level is an object
or array, so scalar strings such as "42" or "true" are never turned into
numbers or booleans.
"""

from __future__ import annotations

from typing import Any

import orjson

from nest.exceptions import ValueFormatError

STRUCTURED_TYPES = (dict, list, tuple, set, frozenset)
PLAIN_TYPES = (str, bool, type(None))


def is_structured(value: Any) -> bool:
    """Check whether a value is stored in encoded form."""
    return isinstance(value, STRUCTURED_TYPES)


def _default(obj: Any) -> Any:
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    raise TypeError(f"Type is not JSON serializable: {type(obj).__name__}")


def _encode(value: Any) -> str:
    try:
        return orjson.dumps(value, default=_default, option=orjson.OPT_NON_STR_KEYS).decode("utf-8")
    except orjson.JSONEncodeError as e:
        raise ValueFormatError(
            "Cannot encode value", {"type": type(value).__name__, "error": str(e)}
        ) from e


def format_value(value: Any) -> Any:
    """Encode structured values to JSON text; return scalars unchanged.

    Raises:
        ValueFormatError: If the value (or anything it holds) cannot be written
            as JSON, e.g. bytes or arbitrary objects.
    """
    if is_structured(value):
        return _encode(value)
    if not isinstance(value, PLAIN_TYPES):
        _encode(value)
    return value


def parse_value(raw: Any) -> Any:
    """Decode a stored value produced by format_value."""
    if not isinstance(raw, str) or not raw.lstrip().startswith(("{", "[")):
        return raw

    try:
        decoded = orjson.loads(raw)
    except orjson.JSONDecodeError:
        return raw

    if isinstance(decoded, (dict, list)):
        return decoded
    return raw


def same_value(stored: Any, value: Any) -> bool:
    """Compare a stored (formatted) value with a new value before formatting.

    The stored value is decoded first, so ``"[1, 2]"`` stored as text matches
    the list ``[1, 2]``. Structures match when their encodings are identical,
    which keeps key order and the difference between ``true`` and ``1``.
    Scalars are compared type-strictly, and NaN matches NaN.

    Raises:
        ValueFormatError: If ``value`` cannot be encoded.
    """
    current = parse_value(stored)
    if is_structured(current) or is_structured(value):
        if not (is_structured(current) and is_structured(value)):
            return False
        return _encode(current) == format_value(value)

    if type(current) is not type(value):
        return False
    return current == value or (current != current and value != value)
