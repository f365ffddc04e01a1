"""Ordering helpers shared by search, favorites and the specifications view."""
from __future__ import annotations

import re
from typing import Any, Tuple

_DIGITS = re.compile(r"(\d+)")
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def natural_key(text: Any) -> Tuple:
    """
    Numeric-aware, case-insensitive sort key: "A-2" < "A-10".

    re.split with a capturing group alternates text/digit parts, so the
    tuples always compare str with str and int with int.
    """
    s = "" if text is None else str(text)
    parts = _DIGITS.split(s.lower())
    key = tuple(int(p) if i % 2 else p for i, p in enumerate(parts))
    return (key, s)


def rfi_number_key(number: Any) -> Tuple:
    """Sort by the leading integer of an RFI number; non-numeric numbers go last."""
    s = "" if number is None else str(number)
    match = _LEADING_INT.match(s)
    if match:
        return (0, int(match.group(1)), natural_key(s))
    return (1, 0, natural_key(s))
