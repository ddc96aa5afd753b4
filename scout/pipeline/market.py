"""
Market aggregator - derive price range, dominant condition, and keywords
from comparable items.
"""
import logging
from typing import Iterable

import numpy as np

from ..models.listing import ComparableItem
from ..models.market import NOT_AVAILABLE, MarketData, MarketSummary, is_available
from .pricing import parse_price_amount


logger = logging.getLogger(__name__)


STOPWORDS = frozenset({"a", "an", "the", "for", "and", "with", "in", "of"})
MIN_KEYWORD_LENGTH = 3


def canonical_order(items: Iterable[ComparableItem]) -> list[ComparableItem]:
    """Sort items so aggregation does not depend on presentation order."""
    return sorted(
        items,
        key=lambda item: (item.item_id, item.title, item.price, item.condition, item.sold_date),
    )


def format_price_range(low: float, high: float) -> str:
    return f"${low:.2f} - ${high:.2f} USD"


class MarketAggregator:
    """
    Summarizes a group of comparable items.
    Ties in condition and keyword counts go to the first item seen in
    canonical order.
    """

    def __init__(self, keyword_limit: int = 5):
        """
        Args:
            keyword_limit: Number of top keywords to return
        """
        self.keyword_limit = keyword_limit

    def summarize(self, items: Iterable[ComparableItem]) -> MarketSummary:
        ordered = canonical_order(items)
        if not ordered:
            return MarketSummary()

        return MarketSummary(
            price_range=self.price_range(ordered),
            condition_summary=self.dominant_condition(ordered),
            keywords=self.top_keywords(ordered),
        )

    def price_range(self, items: list[ComparableItem]) -> str:
        prices = []
        for item in items:
            price = parse_price_amount(item.price)
            if price is None:
                logger.debug(f"No price for comparable {item.item_id}: {item.price!r}")
                continue
            prices.append(price)
        if not prices:
            return NOT_AVAILABLE
        prices_array = np.array(prices)
        return format_price_range(float(np.min(prices_array)), float(np.max(prices_array)))

    def dominant_condition(self, items: list[ComparableItem]) -> str:
        counts: dict[str, int] = {}
        for item in items:
            condition = item.condition.strip()
            if condition:
                counts[condition] = counts.get(condition, 0) + 1

        best = NOT_AVAILABLE
        best_count = 0
        # dicts keep first-seen order, so strict > keeps the earliest on ties
        for condition, count in counts.items():
            if count > best_count:
                best, best_count = condition, count
        return best

    def top_keywords(self, items: list[ComparableItem]) -> list[str]:
        counts: dict[str, int] = {}
        for item in items:
            for token in item.title.lower().split():
                if len(token) < MIN_KEYWORD_LENGTH or token in STOPWORDS:
                    continue
                counts[token] = counts.get(token, 0) + 1

        first_seen = {token: index for index, token in enumerate(counts)}
        ranked = sorted(counts, key=lambda token: (-counts[token], first_seen[token]))
        return ranked[: self.keyword_limit]


def summarize_comparables(items: Iterable[ComparableItem], keyword_limit: int = 5) -> MarketSummary:
    """Price range, dominant condition, and top keywords of the items."""
    return MarketAggregator(keyword_limit=keyword_limit).summarize(items)


def complete_market_data(
    market: MarketData,
    items: Iterable[ComparableItem],
    keyword_limit: int = 5,
) -> MarketData:
    """
    Fill sentinel or empty MarketData fields from the comparables.
    Fields that already carry research data are kept verbatim.
    """
    items = list(items)
    if not items:
        return market
    if market.has_price_range and market.has_condition_summary and market.keywords:
        return market

    summary = summarize_comparables(items, keyword_limit=keyword_limit)
    updates = {}
    if not market.has_price_range and is_available(summary.price_range):
        updates["price_range"] = summary.price_range
    if not market.has_condition_summary and is_available(summary.condition_summary):
        updates["condition_summary"] = summary.condition_summary
    if not market.keywords and summary.keywords:
        updates["keywords"] = summary.keywords

    if updates:
        logger.info(f"Filled market fields from comparables: {sorted(updates)}")
        return market.model_copy(update=updates)
    return market
