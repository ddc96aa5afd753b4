"""
Interfaces of the external collaborators the pipeline consumes.
Concrete adapters live in scout.ai, scout.client, and scout.storage.
"""
from typing import Callable, Optional, Protocol, Union

from ..models.identification import ItemIdentification
from ..models.listing import ComparableItem, ListingDraft
from ..models.market import GroundingResponse, MarketData


ResearchResponse = Union[str, GroundingResponse, MarketData, dict]


class Identifier(Protocol):
    async def identify(self, image: bytes, mime_type: str) -> ItemIdentification:
        """Raises IdentificationError when the response has no description and category."""
        ...


class MarketResearcher(Protocol):
    async def research(self, query: str) -> ResearchResponse:
        ...


class MarketplaceSearch(Protocol):
    async def find_comparables(self, query: str, market_hints: MarketData) -> list[ComparableItem]:
        """May return an empty list."""
        ...


class Drafter(Protocol):
    async def draft(
        self,
        identification: ItemIdentification,
        market: MarketData,
        comparables: list[ComparableItem],
        image_url: Optional[str] = None,
    ) -> ListingDraft:
        """Raises DraftingError on malformed backend output."""
        ...


# Builds a drafter for a drafting-backend API key
DrafterFactory = Callable[[str], Drafter]
