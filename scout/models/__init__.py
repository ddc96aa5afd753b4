"""
Pydantic models for Item Scout.
All data contracts are defined here for strict validation.
"""

from .identification import ItemIdentification
from .listing import ComparableItem, GroundingSource, ListingDraft
from .market import (
    NOT_AVAILABLE,
    GroundingResponse,
    MarketData,
    MarketSummary,
    PriceRange,
    is_available,
)
from .credentials import CredentialSet, LEGACY_EBAY_KEY_FIELD

__all__ = [
    # Identification
    "ItemIdentification",
    # Listing
    "ComparableItem",
    "GroundingSource",
    "ListingDraft",
    # Market
    "NOT_AVAILABLE",
    "GroundingResponse",
    "MarketData",
    "MarketSummary",
    "PriceRange",
    "is_available",
    # Credentials
    "CredentialSet",
    "LEGACY_EBAY_KEY_FIELD",
]
