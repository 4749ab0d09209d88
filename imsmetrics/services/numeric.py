from __future__ import annotations

import math
from decimal import ROUND_HALF_UP, Decimal, localcontext


def clamp(value: float, low: float, high: float) -> float:
    # NaN has no position on the scale; it pins to the lower bound.
    if isinstance(value, float) and math.isnan(value):
        return low
    return max(low, min(high, value))


def finite_or(value: float, default: float = 0.0) -> float:
    # Ratios built from unbounded counters may overflow to inf; report the sentinel instead.
    if isinstance(value, float) and not math.isfinite(value):
        return default
    return value


def _quantize(value: float, places: int) -> Decimal:
    if isinstance(value, float) and not math.isfinite(value):
        raise ValueError(f"cannot round non-finite value {value!r}")
    number = Decimal(str(value))
    exponent = Decimal(1).scaleb(-places)
    # Precision must cover every integer digit plus the kept decimals.
    with localcontext() as ctx:
        ctx.prec = max(28, number.adjusted() + places + 2)
        return number.quantize(exponent, rounding=ROUND_HALF_UP)


def round_half_up(value: float) -> int:
    # Builtin round() is banker's rounding; displayed figures expect .5 to round up.
    return int(_quantize(value, 0))


def round_to(value: float, places: int = 2) -> float:
    # Quantize via the shortest decimal repr so 1.005 rounds the way it is written.
    return float(_quantize(value, places))
