"""Best-effort numeric extraction from free-text answers.

Grammar (first match wins):

- an optional range ``A-B`` / ``A–B`` / ``A to B``; the lower bound is used
  and inherits the upper bound's magnitude suffix when it has none
  (``"20-50K"`` → 20000)
- a number may carry thousands separators and a decimal mark; a ``.`` or
  ``,`` followed by exactly three digits is a thousands separator, otherwise
  it is the decimal mark (``"2,000"`` → 2000, ``"3,5"`` → 3.5,
  ``"1.234,56"`` → 1234.56); a space separates thousands only before a
  three-digit group (``"10 000"`` → 10000)
- a ``k``/``m``/``mln``/``mio``/``b``/``bn`` suffix or the words
  ``thousand``/``million``/``billion`` multiply (``"€1.2M"`` → 1200000,
  ``"3 million"`` → 3000000); a suffix letter followed by another letter or
  a digit is not a suffix (``"8 months"`` → 8, ``"€500 B2B"`` → 500)

Anything without digits yields ``None``; callers skip their check then.
"""

from __future__ import annotations

import math
import re

_NUMBER = r"\d+(?:[.,]\d+|\s\d{3}(?!\d))*"


def _suffix(name: str) -> str:
    return rf"(?:\s*(?P<{name}>thousand|million|billion|bn|mln|mio|[kmb])(?![a-z0-9]))?"


_TOKEN_RE = re.compile(
    rf"(?P<first>{_NUMBER})(?!\d)" + _suffix("first_suffix")
    + rf"(?:\s*(?:-|–|to)\s*(?P<second>{_NUMBER})(?!\d)" + _suffix("second_suffix") + ")?",
    re.IGNORECASE,
)

_MULTIPLIERS = {
    "": 1,
    "k": 1_000,
    "m": 1_000_000,
    "mln": 1_000_000,
    "mio": 1_000_000,
    "b": 1_000_000_000,
    "bn": 1_000_000_000,
    "thousand": 1_000,
    "million": 1_000_000,
    "billion": 1_000_000_000,
}


def _to_float(token: str) -> float:
    token = token.replace(" ", "")
    parts = re.split(r"[.,]", token)
    if len(parts) == 1:
        return float(token)

    *head, last = parts
    if len(last) == 3 and head[0] != "0":
        # Every separator is a thousands separator
        return float("".join(parts))
    return float("".join(head) + "." + last)


def parse_number(value: object) -> float | None:
    """Extract the first number from *value*, or ``None`` if there is none."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)

    match = _TOKEN_RE.search(str(value))
    if match is None:
        return None

    suffix = (match.group("first_suffix") or "").lower()
    if not suffix and match.group("second"):
        suffix = (match.group("second_suffix") or "").lower()

    try:
        number = _to_float(match.group("first"))
    except ValueError:
        return None
    return number * _MULTIPLIERS.get(suffix, 1)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves upwards (``2.5`` → 3, ``0.125`` → 0.13 at two digits)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor
