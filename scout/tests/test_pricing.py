"""
Tests for price range normalization.
"""
import pytest

from scout.pipeline.pricing import (
    DEFAULT_PRICE_RANGE,
    find_price_numbers,
    normalize_price_range,
    parse_price_amount,
)


class TestParsePriceAmount:
    """Tests for single price parsing."""

    def test_currency_prefix_and_separators(self):
        """Test that currency text and thousands separators are stripped."""
        assert parse_price_amount("US $1,234.50") == 1234.50

    def test_unparseable_returns_none(self):
        """Test that text without a number yields None."""
        assert parse_price_amount("Best offer") is None
        assert parse_price_amount("") is None
        assert parse_price_amount(None) is None

    def test_multiple_dots_returns_none(self):
        """Test that malformed numbers are rejected rather than guessed."""
        assert parse_price_amount("1.2.3") is None

    def test_range_text_uses_first_amount(self):
        """Test that a two-price string is not glued into one number."""
        assert parse_price_amount("US $10.00 to US $20.00") == 10.0

    def test_trailing_period(self):
        assert parse_price_amount("Sold for $1,000.") == 1000.0


class TestNormalizePriceRange:
    """Tests for the {min, max, avg} triple."""

    def test_no_numbers_uses_default(self):
        """Test the policy fallback when no number is present."""
        result = normalize_price_range("N/A")

        assert result.min == 30
        assert result.max == 150
        assert result.avg == 90

    def test_default_is_not_shared(self):
        """Test that callers cannot mutate the module default."""
        result = normalize_price_range("")
        result.min = 1

        assert DEFAULT_PRICE_RANGE.min == 30

    @pytest.mark.parametrize("text, price", [
        ("around $75", 75.0),
        ("120 USD", 120.0),
        ("Typically sells for $1,000.", 1000.0),
    ])
    def test_single_number_is_widened(self, text, price):
        """Test that one number p becomes [0.8p, 1.2p] with avg p."""
        result = normalize_price_range(text)

        assert result.min == pytest.approx(0.8 * price)
        assert result.max == pytest.approx(1.2 * price)
        assert result.avg == price

    @pytest.mark.parametrize("text", [
        "$50 - $100",
        "$100 - $50 USD",
        "between 1,200 and 950",
        "$19.99-$49.99!!",
    ])
    def test_two_numbers_midpoint(self, text):
        """Test min <= avg <= max and avg is the midpoint."""
        result = normalize_price_range(text)

        assert result.min <= result.avg <= result.max
        assert result.avg == pytest.approx((result.min + result.max) / 2)

    def test_many_numbers_use_extremes(self):
        """Test that all numbers contribute to min and max."""
        result = normalize_price_range("$40, $55, $120 and $35")

        assert result.min == 35
        assert result.max == 120
        assert result.avg == pytest.approx(77.5)

    def test_non_string_input(self):
        """Test that the function is total over odd input."""
        assert normalize_price_range(None) == DEFAULT_PRICE_RANGE
        assert find_price_numbers(42) == []
