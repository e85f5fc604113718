from __future__ import annotations

import math
import re
from typing import Any, Union

Scalar = Union[str, bool, int, float]

INT64_MIN, INT64_MAX = -(2**63), 2**63 - 1

_INT_LITERAL = re.compile(r"[+-]?(0|[1-9][0-9]*)")
_FLOAT_LITERAL = re.compile(r"[+-]?(?:(?:[0-9]+\.[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|[0-9]+[eE][+-]?[0-9]+)")


def is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, bool, int, float))


def coerce_value(raw: Any) -> Scalar:
    """Map a natively typed parsed value onto the document value types.

    Integers that do not fit a signed 64-bit long cannot be stored as
    numbers and are kept as their decimal text.
    """
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int):
        if INT64_MIN <= raw <= INT64_MAX:
            return raw
        return str(raw)
    if isinstance(raw, float):
        return raw
    if isinstance(raw, str):
        return raw
    return str(raw)


def coerce_text(text: str) -> Scalar:
    """Infer a typed value from literal text (XML content).

    Falls back to the unchanged text whenever it is not an exact boolean,
    integer or decimal literal, so ``"007"``, ``" 12"`` or ``"NaN"`` stay
    strings.
    """
    if text == "true":
        return True
    if text == "false":
        return False
    if _INT_LITERAL.fullmatch(text):
        value = int(text)
        if INT64_MIN <= value <= INT64_MAX:
            return value
        return text
    if _FLOAT_LITERAL.fullmatch(text):
        try:
            number = float(text)
        except ValueError:
            return text
        if math.isinf(number):
            return text
        return number
    return text

