"""
Price range normalizer - turn any price-range text into a numeric triple.
"""
import logging
import re
from typing import Any, Optional

import numpy as np

from ..models.market import PriceRange


logger = logging.getLogger(__name__)


# Optional currency symbol, then digits with thousands separators / decimals
PRICE_TOKEN_PATTERN = re.compile(r"\$?\d[\d,.]*")

DEFAULT_PRICE_RANGE = PriceRange(min=30.0, max=150.0, avg=90.0)

SINGLE_PRICE_LOW = 0.8
SINGLE_PRICE_HIGH = 1.2


def parse_price_amount(text: Any) -> Optional[float]:
    """
    Parse a single price string ("US $1,234.50") into a float.
    Only the first numeric token counts, so "US $10.00 to US $20.00" is 10.0.
    Returns None when nothing parses.
    """
    if not isinstance(text, str):
        return None
    match = PRICE_TOKEN_PATTERN.search(text)
    if match is None:
        return None
    cleaned = re.sub(r"[^0-9.]", "", match.group(0)).rstrip(".")
    try:
        return float(cleaned)
    except ValueError:
        logger.debug(f"Unparseable price: {text!r}")
        return None


def find_price_numbers(text: Any) -> list[float]:
    """All parseable numeric tokens in order of appearance."""
    if not isinstance(text, str):
        return []
    numbers = []
    for token in PRICE_TOKEN_PATTERN.findall(text):
        value = parse_price_amount(token)
        if value is not None:
            numbers.append(value)
    return numbers


def normalize_price_range(
    text: Any,
    default: PriceRange = DEFAULT_PRICE_RANGE,
) -> PriceRange:
    """
    Convert a price-range string into {min, max, avg}.

    Examples: "$50 - $100", "around $75", "1,200 USD".
    - no numbers: the default triple
    - one number p: p widened to [0.8p, 1.2p]
    - two or more: min and max of all numbers, avg is their midpoint
    """
    numbers = find_price_numbers(text)

    if not numbers:
        return default.model_copy()

    if len(numbers) == 1:
        price = numbers[0]
        return PriceRange(
            min=price * SINGLE_PRICE_LOW,
            max=price * SINGLE_PRICE_HIGH,
            avg=price,
        )

    prices = np.array(numbers)
    low = float(np.min(prices))
    high = float(np.max(prices))
    return PriceRange(min=low, max=high, avg=(low + high) / 2)
