"""
Normal-range evaluation for result parameters.

Supported range expressions are ``lo-hi``, ``<N`` and ``>N``. Anything else,
and any value without a leading number, is indeterminate and never flagged.
"""

import re
from typing import Optional

_NUMBER_PREFIX = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)")
_BETWEEN = re.compile(r"(\d+\.?\d*)\s*-\s*(\d+\.?\d*)")
_BELOW = re.compile(r"<\s*(\d+\.?\d*)")
_ABOVE = re.compile(r">\s*(\d+\.?\d*)")


def parse_leading_number(value: str) -> Optional[float]:
    """Numeric prefix of ``value`` ("12.5 mg" -> 12.5); None when there is none"""
    match = _NUMBER_PREFIX.match(value or "")
    if not match:
        return None
    return float(match.group(0))


def is_value_abnormal(value: str, normal_range: str) -> bool:
    if not value or not normal_range:
        return False

    number = parse_leading_number(str(value))
    if number is None:
        return False

    match = _BETWEEN.search(normal_range)
    if match:
        low, high = float(match.group(1)), float(match.group(2))
        return number < low or number > high

    match = _BELOW.search(normal_range)
    if match:
        return number >= float(match.group(1))

    match = _ABOVE.search(normal_range)
    if match:
        return number <= float(match.group(1))

    return False
