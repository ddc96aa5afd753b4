"""Listing draft pipeline modules."""

from .extraction import coerce_market_data, extract_market_data
from .pricing import normalize_price_range, parse_price_amount
from .market import MarketAggregator, complete_market_data, summarize_comparables
from .fallback import FallbackDraftSynthesizer
from .orchestrator import ListingPipeline, PipelineState

__all__ = [
    "coerce_market_data",
    "extract_market_data",
    "normalize_price_range",
    "parse_price_amount",
    "MarketAggregator",
    "complete_market_data",
    "summarize_comparables",
    "FallbackDraftSynthesizer",
    "ListingPipeline",
    "PipelineState",
]
