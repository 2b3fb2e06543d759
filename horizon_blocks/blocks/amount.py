"""Rendering of native-asset amounts stored as integer stroops."""

from __future__ import annotations

from decimal import Decimal

# 1 unit = 10^7 stroops
STROOPS_PER_UNIT = 10_000_000
_SEVEN_PLACES = Decimal("0.0000001")


def amount_string(stroops: int) -> str:
    """Render stroops as a decimal string with exactly seven fractional digits.

    >>> amount_string(1000000000000000000)
    '100000000000.0000000'
    >>> amount_string(12345)
    '0.0012345'
    """
    value = (Decimal(int(stroops)) / STROOPS_PER_UNIT).quantize(_SEVEN_PLACES)
    return f"{value:f}"


__all__ = ["STROOPS_PER_UNIT", "amount_string"]
