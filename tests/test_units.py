"""Tests for exact base-unit conversion.

Verifies:
- Round trip human -> base units -> human is exact
- Excess fractional precision raises instead of rounding
- Invalid decimals and non-finite values are rejected
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from pingpong.errors import (
    ErrorKind,
    InvalidAmountError,
    InvalidDecimalsError,
    PrecisionLossError,
)
from pingpong.units import to_base_units, to_decimal_amount, validate_decimals


class TestToBaseUnits:
    """Test human -> base unit conversion."""

    def test_whole_amount(self) -> None:
        assert to_base_units(Decimal("10"), 6) == 10_000000

    def test_fractional_amount(self) -> None:
        assert to_base_units("1.5", 6) == 1_500000

    def test_full_precision(self) -> None:
        assert to_base_units("0.000000001", 9) == 1

    def test_int_input(self) -> None:
        assert to_base_units(3, 9) == 3_000000000

    def test_float_input_uses_shortest_repr(self) -> None:
        """0.1 is converted through its string form, not its binary value."""
        assert to_base_units(0.1, 6) == 100000

    def test_zero_decimals(self) -> None:
        assert to_base_units("42", 0) == 42

    def test_trailing_zeros_beyond_decimals_are_exact(self) -> None:
        """Zeros past the token precision carry no information."""
        assert to_base_units("1.2300000000", 2) == 123

    def test_large_amount_is_exact(self) -> None:
        """Amounts beyond float and default Decimal precision stay exact."""
        value = "123456789012345678901234567890.123456789"
        assert to_base_units(value, 9) == 123456789012345678901234567890123456789

    def test_precision_loss_raises(self) -> None:
        """1.005 with 2 decimals must fail, not round."""
        with pytest.raises(PrecisionLossError):
            to_base_units(1.005, 2)

    def test_precision_loss_one_digit_over(self) -> None:
        with pytest.raises(PrecisionLossError):
            to_base_units("0.0000001", 6)

    def test_precision_loss_is_numeric_kind(self) -> None:
        with pytest.raises(PrecisionLossError) as exc_info:
            to_base_units("1.23", 1)
        assert exc_info.value.kind == ErrorKind.NUMERIC
        assert exc_info.value.is_recoverable is False

    def test_negative_amount(self) -> None:
        assert to_base_units("-2.5", 1) == -25

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "-Infinity", float("inf"), "abc"])
    def test_non_finite_or_invalid_value(self, value: object) -> None:
        with pytest.raises(InvalidAmountError):
            to_base_units(value, 6)  # type: ignore[arg-type]


class TestToDecimalAmount:
    """Test base unit -> human conversion."""

    def test_basic(self) -> None:
        assert to_decimal_amount(10_000000, 6) == Decimal("10")

    def test_smallest_unit(self) -> None:
        assert to_decimal_amount(1, 9) == Decimal("0.000000001")

    def test_large_value_is_exact(self) -> None:
        value = 123456789012345678901234567890123456789
        assert to_decimal_amount(value, 9) == Decimal("123456789012345678901234567890.123456789")

    def test_zero_decimals(self) -> None:
        assert to_decimal_amount(7, 0) == Decimal("7")

    def test_decimal_input(self) -> None:
        assert to_decimal_amount(Decimal("1500"), 3) == Decimal("1.5")


class TestRoundTrip:
    """toDecimalAmount(toBaseUnits(v, d), d) == v."""

    @pytest.mark.parametrize(
        ("value", "decimals"),
        [
            ("0", 6),
            ("1", 0),
            ("10", 6),
            ("0.000001", 6),
            ("95.95", 9),
            ("18446744073709551615.123456789", 9),
            ("-3.14", 2),
        ],
    )
    def test_round_trip(self, value: str, decimals: int) -> None:
        assert to_decimal_amount(to_base_units(value, decimals), decimals) == Decimal(value)


class TestValidateDecimals:
    """Test decimals validation."""

    @pytest.mark.parametrize("decimals", [0, 6, 9, 18, 6.0, Decimal("9")])
    def test_accepts_integral(self, decimals: object) -> None:
        assert validate_decimals(decimals) == int(decimals)  # type: ignore[call-overload]

    @pytest.mark.parametrize(
        "decimals",
        [-1, 6.5, Decimal("2.5"), float("nan"), float("inf"), Decimal("Infinity"), True, "6", None],
    )
    def test_rejects_invalid(self, decimals: object) -> None:
        with pytest.raises(InvalidDecimalsError):
            validate_decimals(decimals)

    def test_conversions_validate_decimals(self) -> None:
        with pytest.raises(InvalidDecimalsError):
            to_base_units("1", -2)
        with pytest.raises(InvalidDecimalsError):
            to_decimal_amount(1, 1.5)
