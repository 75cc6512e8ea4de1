"""Parsing and formatting of durations such as "10m", "1h30m" or "5ms"."""

import math
import re
from datetime import timedelta
from fractions import Fraction

_NANOS_PER_UNIT = {
    "ns": 1,
    "us": 1_000,
    "\u00b5s": 1_000,
    "\u03bcs": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}

_TERM = re.compile(r"(\d*)(?:\.(\d*))?([^\d.]*)")

_MAX_NANOS = 2**63 - 1


def parse_duration(text):
    """Parse a duration string into a timedelta.

    A duration is an optionally signed sequence of decimal numbers, each with
    an optional fraction and a unit suffix (ns, us, µs, ms, s, m, h).
    Raises ValueError for malformed input.
    """
    if not isinstance(text, str):
        raise TypeError(f"duration must be a string, not {type(text).__name__}")
    rest = text
    negative = False
    if rest[:1] in ("+", "-"):
        negative = rest[0] == "-"
        rest = rest[1:]
    if rest == "0":
        return timedelta(0)
    if not rest:
        raise ValueError(f'time: invalid duration "{text}"')

    total = Fraction(0)
    pos = 0
    while pos < len(rest):
        match = _TERM.match(rest, pos)
        whole, frac, unit = match.groups()
        if not whole and not frac:
            raise ValueError(f'time: invalid duration "{text}"')
        if not unit:
            raise ValueError(f'time: missing unit in duration "{text}"')
        if unit not in _NANOS_PER_UNIT:
            raise ValueError(f'time: unknown unit "{unit}" in duration "{text}"')
        value = Fraction(int(whole or "0"))
        if frac:
            value += Fraction(int(frac), 10 ** len(frac))
        total += value * _NANOS_PER_UNIT[unit]
        pos = match.end()

    nanos = math.floor(total)
    limit = _MAX_NANOS + 1 if negative else _MAX_NANOS
    if nanos > limit:
        raise ValueError(f'time: invalid duration "{text}"')
    result = timedelta(microseconds=nanos // 1_000)
    return -result if negative else result


def _with_fraction(value, unit):
    whole, frac = divmod(value, unit)
    if not frac:
        return str(whole)
    width = len(str(unit)) - 1
    return f"{whole}.{str(frac).zfill(width).rstrip('0')}"


def format_duration(value):
    """Render a timedelta the canonical way, e.g. "10m0s", "1h0m0s", "1.5s"."""
    nanos = ((value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds) * 1_000
    if nanos == 0:
        return "0s"
    sign = "-" if nanos < 0 else ""
    nanos = abs(nanos)
    if nanos < 1_000_000_000:
        if nanos < 1_000:
            text = f"{nanos}ns"
        elif nanos < 1_000_000:
            text = _with_fraction(nanos, 1_000) + "\u00b5s"
        else:
            text = _with_fraction(nanos, 1_000_000) + "ms"
        return sign + text
    hours, remainder = divmod(nanos, 3600 * 1_000_000_000)
    minutes, remainder = divmod(remainder, 60 * 1_000_000_000)
    seconds = _with_fraction(remainder, 1_000_000_000) + "s"
    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}"
    if minutes:
        return f"{sign}{minutes}m{seconds}"
    return sign + seconds