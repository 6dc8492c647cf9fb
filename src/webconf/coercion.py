"""Type coercion of raw environment strings.

Each raw value is converted to its most specific primitive type. Rules are
applied in order and the first match wins:

1. ``"true"`` / ``"false"`` (any case) become ``bool``
2. complete integer literals become ``int``; decimal literals become ``float``
3. comma-separated text without surrounding brackets or quotes becomes a
   ``list`` of stripped strings
4. anything else stays a ``str``

Example:
    >>> coerce_value("TRUE")
    True
    >>> coerce_value("3.5")
    3.5
    >>> coerce_value("a, b,c")
    ['a', 'b', 'c']
"""

import re
from typing import Any, Dict, List, Mapping, Union

TypedValue = Union[bool, int, float, List[str], str]

_INTEGER_PATTERN = re.compile(r"[+-]?\d+")
_DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+\.\d*|\.\d+)(?:[eE][+-]?\d+)?|[+-]?\d+[eE][+-]?\d+")

# Opening and closing markers of structured text that must not be split.
_STRUCTURE_MARKERS = {"[": "]", "{": "}", '"': '"', "'": "'"}


def _is_structured(value: str) -> bool:
    if not value:
        return False
    closing = _STRUCTURE_MARKERS.get(value[0])
    return closing is not None or value[-1] in _STRUCTURE_MARKERS.values()


def coerce_value(value: Any) -> Any:
    """Convert a raw environment value to its most specific type.

    Values that are already typed (bool, int, float, list) are returned
    unchanged, which makes the function idempotent.

    Args:
        value: Raw string or already-coerced value

    Returns:
        Typed value
    """
    if not isinstance(value, str):
        return value

    lowered = value.lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False

    if _INTEGER_PATTERN.fullmatch(value):
        return int(value)
    if _DECIMAL_PATTERN.fullmatch(value):
        return float(value)

    if "," in value and not _is_structured(value.strip()):
        return [part.strip() for part in value.split(",")]

    return value


def coerce_environment(values: Mapping[str, Any]) -> Dict[str, TypedValue]:
    """Coerce every value of a raw environment set.

    Args:
        values: Mapping of variable names to raw values

    Returns:
        New mapping of variable names to typed values
    """
    return {key: coerce_value(value) for key, value in values.items()}
