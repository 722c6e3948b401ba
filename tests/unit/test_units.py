"""
tests/unit/test_units.py - Tests for core/math.py

Covers base-unit conversion (both directions), safe Decimal parsing and
the CLMM tick / sqrt-price helpers.
"""

import pytest
from decimal import Decimal

from core.math import (
    from_base_units,
    ratio,
    safe_decimal,
    sqrt_price_x64_to_price,
    tick_index_to_price,
    to_base_units,
)


class TestToBaseUnits:
    """Human amount -> integer base units."""

    def test_whole_and_fractional(self):
        assert to_base_units("1.5", 6) == "1500000"
        assert to_base_units(Decimal("2"), 9) == "2000000000"
        assert to_base_units(1, 0) == "1"

    def test_rounds_half_up(self):
        assert to_base_units("0.0000005", 6) == "1"
        assert to_base_units("0.0000004", 6) == "0"

    def test_returns_string_for_large_magnitudes(self):
        result = to_base_units("123456789.123456789", 18)
        assert result == "123456789123456789000000000"
        assert isinstance(result, str)

    def test_float_goes_through_str(self):
        assert to_base_units(0.1, 18) == "100000000000000000"


class TestFromBaseUnits:
    """Integer base units -> human amount."""

    def test_basic(self):
        assert from_base_units(1_500_000, 6) == Decimal("1.5")
        assert from_base_units("2000000000", 9) == Decimal("2")

    @pytest.mark.parametrize("value", [None, "", "abc", "NaN", "Infinity", True])
    def test_garbage_yields_zero(self, value):
        assert from_base_units(value, 6) == Decimal("0")

    @pytest.mark.parametrize("decimals", [0, 5, 6, 9, 18])
    @pytest.mark.parametrize("raw", [0, 1, 999, 10**15 + 7, 2**64 - 1])
    def test_inverse_of_to_base_units(self, raw, decimals):
        """to_base_units(from_base_units(x, d), d) returns x."""
        assert int(to_base_units(from_base_units(raw, decimals), decimals)) == raw


class TestSafeDecimal:

    def test_default_on_bad_input(self):
        assert safe_decimal(None) == Decimal("0")
        assert safe_decimal("nope", Decimal("7")) == Decimal("7")
        assert safe_decimal(float("inf")) == Decimal("0")

    def test_bool_is_not_a_number(self):
        assert safe_decimal(True) == Decimal("0")

    def test_strips_whitespace(self):
        assert safe_decimal(" 1.25 ") == Decimal("1.25")

    def test_ratio_zero_denominator(self):
        assert ratio(5, 0) == Decimal("0")
        assert ratio(1, 4) == Decimal("0.25")


class TestTickMath:

    def test_tick_zero_same_decimals(self):
        assert tick_index_to_price(0, 6, 6) == Decimal("1")

    def test_tick_scales_by_decimals(self):
        assert tick_index_to_price(0, 9, 6) == Decimal("1000")

    def test_tick_direction(self):
        assert tick_index_to_price(10, 6, 6) > 1
        assert tick_index_to_price(-10, 6, 6) < 1
        assert tick_index_to_price(1, 6, 6) == Decimal("1.0001")

    def test_sqrt_price_unity(self):
        assert sqrt_price_x64_to_price(2**64, 6, 6) == Decimal("1")
        assert sqrt_price_x64_to_price(2**64, 9, 6) == Decimal("1000")

    def test_sqrt_price_squares(self):
        assert sqrt_price_x64_to_price(2 * 2**64, 6, 6) == Decimal("4")
