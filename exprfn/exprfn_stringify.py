"""
Canonical string conversion shared by every expression function.

Values are rendered the way the client script runtime renders them, so that
evaluated and compiled expressions produce the same text.
"""
import collections.abc
import json
import math
from decimal import Decimal
from typing import Any, Optional

_MAX_SAFE_INTEGER = 2 ** 53


def _number_to_str(value) -> str:
    if isinstance(value, int):
        if abs(value) <= _MAX_SAFE_INTEGER:
            return str(value)
        # The client has a single double-precision number type
        try:
            value = float(value)
        except OverflowError:
            value = math.inf if value > 0 else -math.inf
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if 'e' not in text:
        return text
    mantissa, exp = text.split('e')
    exponent = int(exp)
    if -7 < exponent < 21:
        # Positional notation in this range, exponent notation outside it
        return format(Decimal(text), 'f')
    sign = '+' if exponent > 0 else '-'
    return f"{mantissa}e{sign}{abs(exponent)}"


def _to_json(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        text = _number_to_str(value)
        return "null" if text in ("NaN", "Infinity", "-Infinity") else text
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    if isinstance(value, collections.abc.Mapping):
        items = (f"{json.dumps(str(k), ensure_ascii=False)}:{_to_json(v)}" for k, v in value.items())
        return "{" + ",".join(items) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(_to_json(v) for v in value) + "]"
    return json.dumps(stringify(value), ensure_ascii=False)


def stringify(value: Any) -> Optional[str]:
    """Converts a runtime value to its canonical string.

    None is returned unchanged as the null marker; each caller decides
    whether null renders as an empty string or is skipped.
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _number_to_str(value)
    if isinstance(value, (bytes, bytearray)):
        try:
            return value.decode('utf-8')
        except UnicodeDecodeError:
            return value.decode('utf-8', errors='replace')
    if isinstance(value, (collections.abc.Mapping, list, tuple)):
        return _to_json(value)
    return str(value)


__all__ = ["stringify"]
