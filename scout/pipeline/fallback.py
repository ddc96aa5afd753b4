"""
Fallback draft synthesizer - build a listing draft from templates when no
generative drafting backend is configured.
"""
import logging
import random
import re
from datetime import date
from typing import Optional

from ..models.identification import ItemIdentification
from ..models.listing import ComparableItem, ListingDraft
from ..models.market import NOT_AVAILABLE, MarketData, is_available
from .market import summarize_comparables


logger = logging.getLogger(__name__)


ITEM_PLACEHOLDER = "{ITEM}"
DEFAULT_CONDITION = "Used"
UNTITLED = "Untitled Item"

# Dashes only split when spaced, so "Pre-owned" stays one clause
_CLAUSE_SPLIT = re.compile(r"[,;]|\s+[-–—]+\s+")


def first_clause(text: str) -> str:
    """First comma, semicolon, or dash delimited clause of the text."""
    for clause in _CLAUSE_SPLIT.split(text or ""):
        clause = clause.strip()
        if clause:
            return clause
    return ""


def suggest_condition(condition_summary: str) -> str:
    """Leading clause of a condition summary, "Used" when there is none."""
    if not is_available(condition_summary):
        return DEFAULT_CONDITION
    return first_clause(condition_summary) or DEFAULT_CONDITION


def fit_title(title: str, max_length: int = 80) -> str:
    title = " ".join(title.split())
    if len(title) > max_length:
        title = title[: max_length - 3].rstrip() + "..."
    return title or UNTITLED


class FallbackDraftSynthesizer:
    """
    Deterministic listing drafts from identification text, market data, and
    comparables. Title pattern selection uses the injected random source.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        title_max_length: int = 80,
        keyword_limit: int = 5,
    ):
        self.rng = rng or random.Random()
        self.title_max_length = title_max_length
        self.keyword_limit = keyword_limit

    def synthesize(
        self,
        identification: ItemIdentification,
        market: Optional[MarketData] = None,
        comparables: Optional[list[ComparableItem]] = None,
        image_url: Optional[str] = None,
    ) -> ListingDraft:
        market = market or MarketData()
        comparables = list(comparables or [])
        description = identification.description.strip()
        condition = suggest_condition(market.condition_summary)

        draft = ListingDraft(
            item_description=self.build_description(identification, market, comparables),
            suggested_title=self.build_title(description, market, condition),
            suggested_category=identification.category.strip() or NOT_AVAILABLE,
            suggested_price_range=self.price_range(market, comparables),
            suggested_condition=condition,
            example_sold_listings=comparables,
            generated_date=date.today().isoformat(),
            image_url=image_url,
            grounding_sources=list(market.sources),
        )
        logger.info(f"Synthesized fallback draft: {draft.suggested_title!r}")
        return draft

    def build_title(self, description: str, market: MarketData, condition: str) -> str:
        patterns = [p for p in market.title_patterns if p.strip()]
        if patterns:
            pattern = self.rng.choice(patterns)
            title = pattern.replace(ITEM_PLACEHOLDER, description)
        elif description:
            title = f"{description} - {condition} Condition!"
        else:
            title = ""
        return fit_title(title, self.title_max_length)

    def price_range(self, market: MarketData, comparables: list[ComparableItem]) -> str:
        if market.has_price_range:
            return market.price_range
        return summarize_comparables(comparables, keyword_limit=self.keyword_limit).price_range

    def build_description(
        self,
        identification: ItemIdentification,
        market: MarketData,
        comparables: list[ComparableItem],
    ) -> str:
        description = identification.description.strip() or "this item"
        category = identification.category.strip() or NOT_AVAILABLE
        condition_summary = market.condition_summary.strip() or NOT_AVAILABLE

        sentences = [
            f"For sale: {description}.",
            f"Listed in {category}.",
            f"Condition: {condition_summary}.",
        ]
        if market.keywords:
            sentences.append(f"Highlights: {', '.join(market.keywords)}.")
        price_range = self.price_range(market, comparables)
        if is_available(price_range):
            sentences.append(f"Comparable items have recently sold in the {price_range} range.")
        if comparables:
            sentences.append(f"Priced with reference to {len(comparables)} comparable sold listings.")
        sentences.append("Please review the photos carefully and message with any questions before purchasing.")
        return " ".join(sentences)
