"""
Tests for aggregation of comparable items.
"""
import itertools

import pytest

from scout.models import NOT_AVAILABLE, ComparableItem, MarketData
from scout.pipeline.market import (
    MarketAggregator,
    complete_market_data,
    summarize_comparables,
)


def make_item(item_id: str, price: str, condition: str = "Used", title: str = "Camera") -> ComparableItem:
    return ComparableItem(
        item_id=item_id,
        title=title,
        price=price,
        condition=condition,
        listing_url=f"https://www.ebay.com/itm/{item_id}",
        sold_date="2024-05-01",
    )


@pytest.fixture
def sample_items() -> list[ComparableItem]:
    """Three comparables with two used and one new."""
    return [
        make_item("1", "US $50", "Used", "Vintage Canon AE-1 Camera"),
        make_item("2", "US $150", "Used", "Canon AE-1 Program Camera with Lens"),
        make_item("3", "US $90", "New", "Canon Camera Body for Parts"),
    ]


class TestSummarizeComparables:
    """Tests for price range, condition, and keyword aggregation."""

    def test_empty_input(self):
        """Test sentinel output for no comparables."""
        summary = summarize_comparables([])

        assert summary.price_range == NOT_AVAILABLE
        assert summary.condition_summary == NOT_AVAILABLE
        assert summary.keywords == []

    def test_price_range_and_condition(self, sample_items):
        """Test the documented example."""
        summary = summarize_comparables(sample_items)

        assert summary.price_range == "$50.00 - $150.00 USD"
        assert summary.condition_summary == "Used"

    def test_unparseable_prices(self):
        """Test N/A when no price parses."""
        summary = summarize_comparables([make_item("1", "Best offer"), make_item("2", "")])

        assert summary.price_range == NOT_AVAILABLE
        assert summary.condition_summary == "Used"

    def test_range_priced_comparable_counts(self):
        """Test that an item priced as a range contributes its first amount."""
        items = [make_item("1", "US $10.00 to US $20.00"), make_item("2", "US $35.00")]

        assert summarize_comparables(items).price_range == "$10.00 - $35.00 USD"

    def test_keywords_by_frequency(self, sample_items):
        """Test that frequent tokens win and stopwords/short tokens are dropped."""
        summary = summarize_comparables(sample_items)

        assert summary.keywords[:3] == ["canon", "camera", "ae-1"]
        assert "with" not in summary.keywords
        assert "for" not in summary.keywords
        assert len(summary.keywords) == 5

    def test_keyword_limit(self, sample_items):
        """Test a custom keyword limit."""
        assert len(MarketAggregator(keyword_limit=2).summarize(sample_items).keywords) == 2

    def test_order_independent(self, sample_items):
        """Test identical output for every presentation order."""
        expected = summarize_comparables(sample_items)

        for permutation in itertools.permutations(sample_items):
            assert summarize_comparables(list(permutation)) == expected

    def test_condition_tie_uses_canonical_order(self):
        """Test that a tie resolves the same way regardless of input order."""
        items = [make_item("b", "$10", "New"), make_item("a", "$20", "Used")]

        assert summarize_comparables(items).condition_summary == "Used"
        assert summarize_comparables(list(reversed(items))).condition_summary == "Used"


class TestCompleteMarketData:
    """Tests for filling missing research from comparables."""

    def test_fills_sentinels(self, sample_items):
        """Test that N/A fields are derived from comparables."""
        market = complete_market_data(MarketData(), sample_items)

        assert market.price_range == "$50.00 - $150.00 USD"
        assert market.condition_summary == "Used"
        assert market.keywords

    def test_keeps_research_verbatim(self, sample_items):
        """Test that present research values are not re-derived."""
        research = MarketData(price_range="$60 - $80 USD", condition_summary="Mint", keywords=["rare"])

        assert complete_market_data(research, sample_items) == research

    def test_no_comparables(self):
        """Test that nothing changes without comparables."""
        research = MarketData()
        assert complete_market_data(research, []) is research
