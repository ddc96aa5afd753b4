"""
Simulated sold listings for when the eBay Browse API cannot be used.

Without an App ID a single generic placeholder is returned. With one, a few
plausible sold listings are generated around the researched price range.
"""
import logging
import random
import uuid
from datetime import date, timedelta
from typing import Optional

from ..models.listing import ComparableItem
from ..models.market import MarketData
from ..pipeline.pricing import normalize_price_range


logger = logging.getLogger(__name__)


GENERIC_TITLE_PATTERNS = [
    "Vintage {ITEM} Rare!",
    "{ITEM} Used Good Condition",
    "Tested {ITEM} Works Great",
    "New {ITEM} In Box",
]

CONDITIONS = ["Used", "Used - Good", "Used - Excellent", "New", "New - Open Box"]

PRICE_DEVIATION = 0.15
SOLD_WITHIN_DAYS = 30


class SimulatedSoldListings:
    """Generates comparable sold items from market hints."""

    def __init__(
        self,
        detailed: bool = True,
        count: int = 3,
        title_max_length: int = 80,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            detailed: Generate priced listings from hints; otherwise one placeholder
            count: Listings to generate in detailed mode
            title_max_length: Marketplace title limit
            rng: Random source
        """
        self.detailed = detailed
        self.count = count
        self.title_max_length = title_max_length
        self.rng = rng or random.Random()

    async def find_comparables(self, query: str, market_hints: MarketData) -> list[ComparableItem]:
        if not self.detailed:
            logger.warning("eBay App ID is missing. Using generic placeholder sold listing.")
            return [self._generic_item(query)]
        return self._generate(query, market_hints)

    def _generic_item(self, query: str) -> ComparableItem:
        return ComparableItem(
            item_id="gen_9999",
            title=f'Generic item similar to "{query}"',
            price="US $49.99",
            shipping_cost="US $7.99",
            image_url="https://via.placeholder.com/100x100?text=Generic+Item",
            listing_url="https://www.ebay.com/",
            condition="Used",
            sold_date="2024-01-01",
        )

    def _generate(self, query: str, market_hints: MarketData) -> list[ComparableItem]:
        bounds = normalize_price_range(market_hints.price_range)
        condition = self.rng.choice(CONDITIONS)
        first_word = query.split()[0] if query.split() else "Item"
        batch = uuid.uuid4().hex[:10]

        items = []
        for i in range(self.count):
            item_id = f"mock_{batch}_{i}"
            sold_on = date.today() - timedelta(days=self.rng.randrange(SOLD_WITHIN_DAYS))
            items.append(ComparableItem(
                item_id=item_id,
                title=self._title(query, market_hints),
                price=self._price(bounds.avg, bounds.min, bounds.max),
                shipping_cost=f"US ${5 + self.rng.random() * 10:.2f}",
                image_url=f"https://via.placeholder.com/100x100?text=Sold+{first_word}_{i + 1}",
                listing_url=f"https://www.ebay.com/itm/{item_id}",
                condition=condition,
                sold_date=sold_on.isoformat(),
            ))
        logger.info(f"Simulated {len(items)} sold listings for {query!r}")
        return items

    def _price(self, base: float, low: float, high: float) -> str:
        deviation = base * PRICE_DEVIATION
        price = base + (self.rng.random() * deviation * 2 - deviation)
        price = max(low * 0.9, price)
        price = min(high * 1.1, price)
        return f"US ${price:.2f}"

    def _title(self, query: str, market_hints: MarketData) -> str:
        words = [w for w in query.split() if len(w) > 3]
        keywords = (list(market_hints.keywords) + words)[:3]
        patterns = market_hints.title_patterns or GENERIC_TITLE_PATTERNS

        subject = " ".join(keywords + [query]) if keywords else query
        title = self.rng.choice(patterns).replace("{ITEM}", subject)
        title = " ".join(title.split())
        if len(title) > self.title_max_length:
            title = title[: self.title_max_length - 3] + "..."
        return title
