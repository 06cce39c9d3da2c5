"""Duration strings such as ``"300ms"``, ``"-1.5h"`` or ``"2h45m"``.

Durations are plain integers counting nanoseconds. A duration string is an
optionally signed sequence of decimal numbers, each with an optional
fraction and a mandatory unit suffix. Valid units are ``ns``, ``us``
(or ``µs``), ``ms``, ``s``, ``m`` and ``h``. The formatter produces the
canonical form, e.g. ``"1m30s"`` or ``"1.5µs"``.
"""

from __future__ import annotations

NANOSECOND = 1
MICROSECOND = 1000 * NANOSECOND
MILLISECOND = 1000 * MICROSECOND
SECOND = 1000 * MILLISECOND
MINUTE = 60 * SECOND
HOUR = 60 * MINUTE

MAX_DURATION = (1 << 63) - 1
_MAX_WHOLE_DIGITS = len(str(MAX_DURATION))
_MAX_FRACTION_DIGITS = 18

UNITS = {
    "ns": NANOSECOND,
    "us": MICROSECOND,
    "µs": MICROSECOND,  # U+00B5 micro sign
    "μs": MICROSECOND,  # U+03BC Greek letter mu
    "ms": MILLISECOND,
    "s": SECOND,
    "m": MINUTE,
    "h": HOUR,
}


class DurationError(ValueError):
    """Raised when a duration string cannot be parsed."""


def parse_duration(text: str) -> int:
    """Parse a duration string into nanoseconds.

    Raises:
        DurationError: On empty input, a missing or unknown unit, a
            malformed number, or a value that overflows 63 bits.
    """
    s = text
    negative = False
    if s and s[0] in "+-":
        negative = s[0] == "-"
        s = s[1:]

    # Special case: a bare zero needs no unit.
    if s == "0":
        return 0
    if not s:
        raise DurationError(f"invalid duration {text!r}")

    total = 0
    while s:
        if not ("0" <= s[0] <= "9" or s[0] == "."):
            raise DurationError(f"invalid duration {text!r}")

        i = _scan_digits(s)
        whole, s = s[:i], s[i:]

        fraction = ""
        if s.startswith("."):
            s = s[1:]
            i = _scan_digits(s)
            fraction, s = s[:i], s[i:]

        if not whole and not fraction:
            raise DurationError(f"invalid duration {text!r}")

        i = 0
        while i < len(s) and s[i] != "." and not "0" <= s[i] <= "9":
            i += 1
        unit_name, s = s[:i], s[i:]
        if not unit_name:
            raise DurationError(f"missing unit in duration {text!r}")
        unit = UNITS.get(unit_name)
        if unit is None:
            raise DurationError(f"unknown unit {unit_name!r} in duration {text!r}")

        # Leading zeros are insignificant; more than 19 significant digits
        # cannot fit in 63 bits whatever the unit.
        whole = whole.lstrip("0")
        if len(whole) > _MAX_WHOLE_DIGITS:
            raise DurationError(f"invalid duration {text!r}")
        # Digits past the 18th are below a nanosecond even for hours.
        fraction = fraction[:_MAX_FRACTION_DIGITS]

        value = int(whole or "0") * unit
        if fraction:
            value += int(fraction) * unit // 10 ** len(fraction)
        total += value
        if total > MAX_DURATION:
            raise DurationError(f"invalid duration {text!r}")

    return -total if negative else total


def format_duration(nanoseconds: int) -> str:
    """Return the canonical string form of a duration.

    Sub-second values use the smallest fitting unit (``"1.5µs"``,
    ``"200ms"``); longer ones are split into hours, minutes and seconds
    with leading zero units dropped (``"1m30s"``, ``"2h0m0s"``). Zero is
    ``"0s"``.
    """
    if nanoseconds == 0:
        return "0s"

    sign = "-" if nanoseconds < 0 else ""
    u = abs(nanoseconds)

    if u < SECOND:
        if u < MICROSECOND:
            return f"{sign}{u}ns"
        if u < MILLISECOND:
            whole, frac = _split_fraction(u, 3)
            return f"{sign}{whole}{frac}µs"
        whole, frac = _split_fraction(u, 6)
        return f"{sign}{whole}{frac}ms"

    seconds, frac = _split_fraction(u, 9)
    parts = f"{seconds % 60}{frac}s"
    minutes = seconds // 60
    if minutes:
        parts = f"{minutes % 60}m{parts}"
        hours = minutes // 60
        if hours:
            parts = f"{hours}h{parts}"
    return sign + parts


def _scan_digits(s: str) -> int:
    i = 0
    while i < len(s) and "0" <= s[i] <= "9":
        i += 1
    return i


def _split_fraction(value: int, precision: int) -> tuple[int, str]:
    """Split off the last ``precision`` digits as a trimmed fraction."""
    scale = 10**precision
    digits = f"{value % scale:0{precision}d}".rstrip("0")
    return value // scale, f".{digits}" if digits else ""
