"""Exact conversion between human decimal amounts and integer base units.

A token with ``decimals = 6`` represents ``1.5`` as ``1_500_000`` base units.
Conversions never round silently: a value with more fractional digits than the
token supports raises PrecisionLossError instead of being truncated.

Downstream price/profit arithmetic uses Decimal under PRICE_CONTEXT, never float.
"""

from __future__ import annotations

import math
from decimal import (
    MAX_EMAX,
    MAX_PREC,
    MIN_EMIN,
    ROUND_HALF_EVEN,
    Context,
    Decimal,
    InvalidOperation,
)

from pingpong.contracts.base import parse_decimal
from pingpong.errors import InvalidAmountError, InvalidDecimalsError, PrecisionLossError

# Scaling by a power of ten only moves the exponent; with unbounded precision
# the coefficient is never rounded.
_EXACT_CONTEXT = Context(prec=MAX_PREC, Emax=MAX_EMAX, Emin=MIN_EMIN, rounding=ROUND_HALF_EVEN)

# Context for ratios (prices, percentages). Division is the only inexact step.
PRICE_CONTEXT = Context(prec=50, rounding=ROUND_HALF_EVEN)

AmountLike = Decimal | int | str | float


def validate_decimals(decimals: object) -> int:
    """Return decimals as int, or raise InvalidDecimalsError.

    Accepts ints and integral finite floats/Decimals; rejects bools, negatives,
    fractions, NaN and infinities.
    """
    if isinstance(decimals, bool):
        raise InvalidDecimalsError(f"Decimals {decimals!r} is not an integer", decimals=decimals)
    if isinstance(decimals, int):
        value = decimals
    elif isinstance(decimals, float):
        if not math.isfinite(decimals):
            raise InvalidDecimalsError(f"Decimals {decimals!r} is not finite", decimals=decimals)
        if not decimals.is_integer():
            raise InvalidDecimalsError(f"Decimals {decimals!r} is not an integer", decimals=decimals)
        value = int(decimals)
    elif isinstance(decimals, Decimal):
        if not decimals.is_finite():
            raise InvalidDecimalsError(f"Decimals {decimals!r} is not finite", decimals=decimals)
        if decimals != decimals.to_integral_value():
            raise InvalidDecimalsError(f"Decimals {decimals!r} is not an integer", decimals=decimals)
        value = int(decimals)
    else:
        raise InvalidDecimalsError(
            f"Decimals {decimals!r} is not a number", decimals=type(decimals).__name__
        )

    if value < 0:
        raise InvalidDecimalsError(f"Decimals {decimals!r} is negative", decimals=value)
    return value


def _to_finite_decimal(value: AmountLike) -> Decimal:
    try:
        parsed = parse_decimal(value)
    except (ValueError, InvalidOperation) as e:
        raise InvalidAmountError(f"Value {value!r} is not a number") from e
    if not parsed.is_finite():
        raise InvalidAmountError(f"Value {value!r} is not finite")
    return parsed


def to_base_units(value: AmountLike, decimals: object) -> int:
    """Convert a human amount to integer base units.

    Raises:
        InvalidDecimalsError: decimals is not a finite non-negative integer.
        InvalidAmountError: value is not a finite number.
        PrecisionLossError: value * 10**decimals is not an integer.
    """
    d = validate_decimals(decimals)
    v = _to_finite_decimal(value)

    scaled = v.scaleb(d, context=_EXACT_CONTEXT)
    integral = scaled.to_integral_value(rounding=ROUND_HALF_EVEN, context=_EXACT_CONTEXT)
    if integral != scaled:
        raise PrecisionLossError(
            f"Value {value} cannot be converted to int with {d} decimals, "
            f"current result is {scaled}",
            value=str(value),
            decimals=d,
        )
    return int(integral)


def to_decimal_amount(value: AmountLike, decimals: object) -> Decimal:
    """Convert base units (or any exact amount) to a human Decimal amount."""
    d = validate_decimals(decimals)
    v = _to_finite_decimal(value)
    return v.scaleb(-d, context=_EXACT_CONTEXT)
