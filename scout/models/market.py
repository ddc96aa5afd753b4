"""
Market models - research results and derived price information.
"""
from pydantic import Field

from .base import CamelModel
from .listing import GroundingSource


# Placeholder meaning "no data available"
NOT_AVAILABLE = "N/A"


class MarketData(CamelModel):
    """Market research for an item. Missing signals use the N/A sentinel."""
    price_range: str = Field(default=NOT_AVAILABLE, description="Canonical form: '$<min> - $<max> USD'")
    condition_summary: str = NOT_AVAILABLE
    keywords: list[str] = Field(default_factory=list)
    title_patterns: list[str] = Field(default_factory=list)
    sources: list[GroundingSource] = Field(default_factory=list)

    @property
    def has_price_range(self) -> bool:
        return is_available(self.price_range)

    @property
    def has_condition_summary(self) -> bool:
        return is_available(self.condition_summary)


class GroundingResponse(CamelModel):
    """Free-text research answer with the sources it was grounded on."""
    text: str = ""
    sources: list[GroundingSource] = Field(default_factory=list)


class PriceRange(CamelModel):
    """Numeric price triple."""
    min: float
    max: float
    avg: float


class MarketSummary(CamelModel):
    """Market signals derived from comparable items."""
    price_range: str = NOT_AVAILABLE
    condition_summary: str = NOT_AVAILABLE
    keywords: list[str] = Field(default_factory=list)


def is_available(value: str) -> bool:
    """True when the value carries data rather than the sentinel or blank text."""
    if not value:
        return False
    stripped = value.strip()
    return bool(stripped) and stripped.upper() != NOT_AVAILABLE
