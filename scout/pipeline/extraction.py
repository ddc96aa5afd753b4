"""
Market text extraction - parse free-form research text into MarketData.

The research backend answers in prose such as:

    **Price Range:** $50 - $120 USD
    **Condition Summary:** Mostly used, some new in box
    **Keywords:** vintage, rare, tested
    **Common Title Patterns:**
    - Vintage {ITEM} Tested Works
    - {ITEM} Excellent Condition

Each field is handled by an independent labeled matcher. A matcher finds the
first occurrence of one of its labels and reads the segment up to the next
recognized label (of any field) or the end of the text.
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError

from ..models.listing import GroundingSource
from ..models.market import NOT_AVAILABLE, GroundingResponse, MarketData
from .pricing import find_price_numbers


logger = logging.getLogger(__name__)


PRICE_LABELS = ("price range", "typical price", "average price", "median price", "sold for")
CONDITION_LABELS = ("condition summary", "common conditions", "typical condition")
KEYWORD_LABELS = ("keywords", "popular search terms")
TITLE_PATTERN_LABELS = ("common title patterns", "title patterns", "title examples")

# Markdown decoration and separator that may follow a label: "**Price Range:**"
_LABEL_SUFFIX = r"(?:[ \t]*[*_#]*[ \t]*[:\-–—])?[ \t]*[*_]*"

_KEYWORD_SPLIT = re.compile(r"[,\n]|-|–|—")
_TITLE_SPLIT = re.compile(r"[\n;]")
_BULLET_PREFIX = re.compile(r"^(?:[-*•]+|\d+[.)])\s*")
_TOKEN_STRIP = " \t\r*•'\"`#.:"
_QUOTES = "'\"“”‘’`"

MIN_KEYWORD_LENGTH = 3
MIN_TITLE_PATTERN_LENGTH = 6


def _label_regex(labels: tuple[str, ...]) -> re.Pattern:
    # Longest first so "common title patterns" wins over "title patterns"
    ordered = sorted(labels, key=len, reverse=True)
    alternatives = "|".join(
        r"\s+".join(re.escape(word) for word in label.split()) for label in ordered
    )
    return re.compile(rf"(?<!\w)(?:{alternatives})(?!\w){_LABEL_SUFFIX}", re.IGNORECASE)


_ANY_LABEL = _label_regex(PRICE_LABELS + CONDITION_LABELS + KEYWORD_LABELS + TITLE_PATTERN_LABELS)


def find_segment(text: str, labels: tuple[str, ...]) -> Optional[str]:
    """
    Text following the first occurrence of any of the labels, up to the next
    recognized label or end of text. None when no label occurs.
    """
    match = _label_regex(labels).search(text)
    if match is None:
        return None
    start = match.end()
    boundary = _ANY_LABEL.search(text, start)
    end = boundary.start() if boundary else len(text)
    return text[start:end]


def format_amount(value: float) -> str:
    """Render a price without a trailing .00 when integral."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def _parse_price_range(segment: str) -> str:
    lines = [line for line in segment.splitlines() if line.strip()]
    if not lines:
        return NOT_AVAILABLE
    numbers = find_price_numbers(lines[0])[:2]
    if not numbers:
        return NOT_AVAILABLE
    if len(numbers) == 1:
        return f"${format_amount(numbers[0])} USD"
    low, high = min(numbers), max(numbers)
    return f"${format_amount(low)} - ${format_amount(high)} USD"


def _parse_condition_summary(segment: str) -> str:
    collapsed = " ".join(segment.split()).strip(" *_#:-")
    return collapsed or NOT_AVAILABLE


def _parse_keywords(segment: str) -> list[str]:
    keywords = []
    seen = set()
    for token in _KEYWORD_SPLIT.split(segment):
        keyword = token.strip(_TOKEN_STRIP)
        if len(keyword) < MIN_KEYWORD_LENGTH:
            continue
        folded = keyword.casefold()
        if folded in seen:
            continue
        seen.add(folded)
        keywords.append(keyword)
    return keywords


def _parse_title_patterns(segment: str) -> list[str]:
    patterns = []
    for phrase in _TITLE_SPLIT.split(segment):
        pattern = _BULLET_PREFIX.sub("", phrase.strip()).strip().strip(_QUOTES).strip()
        if len(pattern) >= MIN_TITLE_PATTERN_LENGTH:
            patterns.append(pattern)
    return patterns


@dataclass(frozen=True)
class LabeledMatcher:
    """Extracts one MarketData field from the segment following its labels."""
    field: str
    labels: tuple[str, ...]
    parse: Callable[[str], Any]
    default: Callable[[], Any]

    def extract(self, text: str) -> Any:
        segment = find_segment(text, self.labels)
        if segment is None:
            return self.default()
        return self.parse(segment)


PRICE_RANGE_MATCHER = LabeledMatcher("price_range", PRICE_LABELS, _parse_price_range, lambda: NOT_AVAILABLE)
CONDITION_MATCHER = LabeledMatcher("condition_summary", CONDITION_LABELS, _parse_condition_summary, lambda: NOT_AVAILABLE)
KEYWORDS_MATCHER = LabeledMatcher("keywords", KEYWORD_LABELS, _parse_keywords, list)
TITLE_PATTERNS_MATCHER = LabeledMatcher("title_patterns", TITLE_PATTERN_LABELS, _parse_title_patterns, list)

MATCHERS = (
    PRICE_RANGE_MATCHER,
    CONDITION_MATCHER,
    KEYWORDS_MATCHER,
    TITLE_PATTERNS_MATCHER,
)


def extract_price_range(text: str) -> str:
    return PRICE_RANGE_MATCHER.extract(text or "")


def extract_condition_summary(text: str) -> str:
    return CONDITION_MATCHER.extract(text or "")


def extract_keywords(text: str) -> list[str]:
    return KEYWORDS_MATCHER.extract(text or "")


def extract_title_patterns(text: str) -> list[str]:
    return TITLE_PATTERNS_MATCHER.extract(text or "")


def extract_market_data(
    text: Optional[str],
    sources: Optional[list[GroundingSource]] = None,
) -> MarketData:
    """
    Parse research text into MarketData. Never raises: text without
    recognizable structure yields sentinel and empty defaults.
    """
    if not isinstance(text, str):
        text = ""
    fields = {matcher.field: matcher.extract(text) for matcher in MATCHERS}
    return MarketData(**fields, sources=list(sources or []))


# Keys used by earlier research payloads
_LEGACY_KEYS = {
    "marketTitlePatterns": "titlePatterns",
    "groundingSources": "sources",
}


def coerce_market_data(
    response: Any,
    sources: Optional[list[GroundingSource]] = None,
) -> MarketData:
    """
    Accept any research response shape and return MarketData.

    Structured responses (MarketData, mappings) are used as given; text
    responses (str, GroundingResponse) go through extract_market_data.
    Malformed structured data degrades to defaults.
    """
    if isinstance(response, MarketData):
        return response

    if isinstance(response, GroundingResponse):
        return extract_market_data(response.text, sources or response.sources)

    if isinstance(response, str):
        return extract_market_data(response, sources)

    if isinstance(response, Mapping):
        data = dict(response)
        for legacy, current in _LEGACY_KEYS.items():
            if legacy in data and current not in data:
                data[current] = data.pop(legacy)
        try:
            market = MarketData.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Malformed structured market data, using defaults: {e}")
            return MarketData(sources=list(sources or []))
        if sources and not market.sources:
            market = market.model_copy(update={"sources": list(sources)})
        return market

    logger.warning(f"Unsupported research response type: {type(response).__name__}")
    return MarketData(sources=list(sources or []))
