"""
app/parsers/numeric.py

Lenient numeric coercion for report cells.

Cells such as ``"$1,234.50"``, ``"₹ 87"``, ``"12.5%"`` or the ``"--"``
placeholder must never abort an import: anything that cannot be read
becomes ``0.0``.
"""

from __future__ import annotations

import math
import re
from typing import Any

_STRIP_PATTERN = re.compile(r"[$₹%\"',\s]")
_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


def parse_number(raw: Any) -> tuple[float, bool]:
    """
    Coerce *raw* to a float and report whether the whole cell was understood.

    The flag is ``False`` when trailing garbage was dropped or nothing
    numeric was found in a non-empty cell. Values that overflow a float
    (``1e999``) read as ``0.0`` and are flagged too. Empty cells and ``--``
    are clean zeros.
    """
    if raw is None:
        return 0.0, True
    text = _STRIP_PATTERN.sub("", str(raw)).replace("--", "0")
    if not text:
        return 0.0, True
    match = _NUMBER_PREFIX.match(text)
    if match is None:
        return 0.0, False
    try:
        value = float(match.group(0))
    except ValueError:
        return 0.0, False
    if not math.isfinite(value):
        return 0.0, False
    return value, match.end() == len(text)


def to_number(raw: Any) -> float:
    """
    Return *raw* as a float, or ``0.0`` when it cannot be parsed. Never raises.
    """
    return parse_number(raw)[0]
