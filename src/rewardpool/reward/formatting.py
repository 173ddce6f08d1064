"""Currency display helpers."""

from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext

ZERO_REWARD = "$0"

# Enough significant digits to quantize any finite float to cents.
_DISPLAY_PRECISION = 400


def format_reward(amount: float) -> str:
    """Format a reward as dollars.

    Whole dollars for amounts of at least 1, cents below that. Halves round
    away from zero on the exact binary value, so ``2.5`` renders as ``$3``.
    Non-finite amounts render as ``$0``.

    >>> format_reward(2894.7368)
    '$2895'
    >>> format_reward(0.456)
    '$0.46'
    """
    if not math.isfinite(amount):
        return ZERO_REWARD
    places = Decimal("1") if amount >= 1 else Decimal("0.01")
    with localcontext() as ctx:
        ctx.prec = _DISPLAY_PRECISION
        value = Decimal(amount).quantize(places, rounding=ROUND_HALF_UP)
    return f"${value}"
