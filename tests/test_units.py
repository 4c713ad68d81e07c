"""Tests for quantity parsing."""

import pytest

from shoppinglist.normalize.units import (
    DEFAULT_QUANTITY,
    Quantity,
    format_amount,
    normalize_unit,
    parse_amount,
    parse_quantity,
)


class TestParseAmount:
    """Tests for the numeric part of a quantity."""

    def test_integer_and_decimal(self):
        """Test whole and decimal amounts."""
        assert parse_amount("2") == 2.0
        assert parse_amount("1.5") == 1.5
        assert parse_amount(".5") == 0.5

    def test_fractions(self):
        """Test simple and mixed fractions."""
        assert parse_amount("1/2") == 0.5
        assert parse_amount("1 1/2") == 1.5

    def test_range_returns_average(self):
        """Test that a range such as '2-3' averages its ends."""
        assert parse_amount("2-3") == 2.5

    def test_zero_denominator(self):
        """Test that a zero denominator is rejected."""
        with pytest.raises(ValueError):
            parse_amount("1/0")

    @pytest.mark.parametrize("amount", ["9" * 400, "1 " + "9" * 400 + "/1", "9" * 400 + "-1"])
    def test_too_large_for_float(self, amount):
        """Test that amounts beyond float range are rejected."""
        with pytest.raises(ValueError):
            parse_amount(amount)


class TestNormalizeUnit:
    """Tests for unit alias lookup."""

    @pytest.mark.parametrize(
        "alias,expected",
        [
            ("lbs", "lb"),
            ("Pounds", "lb"),
            ("ounces", "oz"),
            ("tablespoons", "tbsp"),
            ("each", "ea"),
            ("cans", "can"),
            ("fl oz", "fl oz"),
        ],
    )
    def test_known_aliases(self, alias, expected):
        """Test that aliases map to canonical short forms."""
        assert normalize_unit(alias) == expected

    def test_unknown_alias(self):
        """Test that unknown tokens are not normalized."""
        assert normalize_unit("handful") is None


class TestParseQuantity:
    """Tests for free-form quantity parsing."""

    def test_count(self):
        """Test a count quantity."""
        assert parse_quantity("3 ea") == Quantity(3.0, "ea")

    def test_alias_is_canonicalized(self):
        """Test that unit aliases are reduced to their short form."""
        assert parse_quantity("2 lbs") == Quantity(2.0, "lb")
        assert parse_quantity("1 1/2 cups") == Quantity(1.5, "cup")

    def test_number_without_unit_is_generic(self):
        """Test that a bare number counts as 'ea'."""
        assert parse_quantity("4") == Quantity(4.0, "ea")

    def test_bare_unit_implies_one(self):
        """Test that a unit without an amount means one of it."""
        assert parse_quantity("lb") == Quantity(1.0, "lb")

    def test_package_size_is_skipped(self):
        """Test that a parenthesized package size does not become the unit."""
        assert parse_quantity("2 (12 oz) cans") == Quantity(2.0, "can")

    def test_unknown_unit_kept_literally(self):
        """Test that an unknown unit token is kept as written."""
        assert parse_quantity("2 handfuls") == Quantity(2.0, "handfuls")

    @pytest.mark.parametrize("qty", ["", "   ", None, "some", "1/0 cups", "9" * 400 + " g"])
    def test_unreadable_falls_back_to_default(self, qty):
        """Test that unreadable text becomes one 'ea'."""
        assert parse_quantity(qty) == DEFAULT_QUANTITY
        assert DEFAULT_QUANTITY == Quantity(1.0, "ea")


class TestQuantityArithmetic:
    """Tests for adding and displaying quantities."""

    def test_add_same_unit(self):
        """Test that equal units sum."""
        assert Quantity(3.0, "ea") + Quantity(4.0, "ea") == Quantity(7.0, "ea")

    def test_add_different_units_fails(self):
        """Test that different units are never added."""
        with pytest.raises(ValueError):
            Quantity(1.0, "lb") + Quantity(2.0, "oz")

    def test_display_string(self):
        """Test rendering without trailing zeros."""
        assert Quantity(7.0, "ea").to_display_string() == "7 ea"
        assert Quantity(1.5, "lb").to_display_string() == "1.5 lb"

    def test_format_amount(self):
        """Test amount formatting."""
        assert format_amount(2.0) == "2"
        assert format_amount(0.25) == "0.25"
        assert format_amount(1.333333) == "1.33"
        assert format_amount(float("inf")) == "inf"
