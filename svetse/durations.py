"""Parsing of duration strings such as ``"300ms"``, ``"1.5h"`` or ``"2h45m"``."""

from __future__ import annotations

import re
from fractions import Fraction

_NANOSECONDS = {
    "ns": 1,
    "us": 1_000,
    "µs": 1_000,
    "μs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_NUMBER = r"(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)"
_UNIT = r"(?:ns|us|µs|μs|ms|s|m|h)"
_DURATION_RE = re.compile(rf"([-+]?)((?:{_NUMBER}{_UNIT})+)")
_PART_RE = re.compile(rf"({_NUMBER})({_UNIT})")
_MAX_NANOSECONDS = 2**63 - 1


def parse_duration(text: str) -> float:
    """Return the duration described by *text* in seconds.

    A duration is an optionally signed sequence of decimal numbers, each
    with an optional fraction and a unit suffix (``ns``, ``us``, ``ms``,
    ``s``, ``m``, ``h``). The bare string ``"0"`` is also accepted.
    Raises ``ValueError`` for anything else.
    """
    body = text[1:] if text[:1] in ("+", "-") else text
    if body == "0":
        return 0.0

    match = _DURATION_RE.fullmatch(text)
    if match is None:
        raise ValueError(f"invalid duration {text!r}")

    sign, parts = match.groups()
    total = sum(
        (Fraction(number) * _NANOSECONDS[unit] for number, unit in _PART_RE.findall(parts)),
        Fraction(0),
    )
    limit = _MAX_NANOSECONDS + (1 if sign == "-" else 0)
    if total > limit:
        raise ValueError(f"invalid duration {text!r}")
    if sign == "-":
        total = -total
    return float(total / 1_000_000_000)