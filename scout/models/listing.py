"""
Listing models - comparable sold items, provenance, and listing drafts.
"""
from datetime import date
from typing import Any, Literal, Optional

from pydantic import ConfigDict, Field, field_validator

from .base import CamelModel


class GroundingSource(CamelModel):
    """Provenance record for market research."""
    type: Literal["googleSearch", "webSearch", "marketplace"] = "webSearch"
    uri: str
    title: Optional[str] = None


class ComparableItem(CamelModel):
    """A previously sold or listed item used as a pricing and condition reference."""
    model_config = ConfigDict(frozen=True)

    item_id: str
    title: str
    price: str = Field(description="Currency and amount as free text, e.g. 'US $19.99'")
    shipping_cost: Optional[str] = None
    image_url: str = ""
    listing_url: str = ""
    condition: str = ""
    sold_date: str = ""


class ListingDraft(CamelModel):
    """
    A generated marketplace listing draft.
    Drafts are values: editing produces a new draft via with_edits().
    """
    item_description: str
    suggested_title: str = Field(min_length=1)
    suggested_category: str
    suggested_price_range: str
    suggested_condition: str
    example_sold_listings: list[ComparableItem] = Field(default_factory=list)
    generated_date: str = Field(
        default_factory=lambda: date.today().isoformat(),
        min_length=1,
    )
    image_url: Optional[str] = None
    grounding_sources: Optional[list[GroundingSource]] = None

    @field_validator("suggested_title", "generated_date", mode="after")
    @classmethod
    def require_text(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v

    @field_validator("example_sold_listings", mode="before")
    @classmethod
    def default_listings(cls, v: Any) -> Any:
        return [] if v is None else v

    def with_edits(self, **changes: Any) -> "ListingDraft":
        """Return a new, validated draft with the given fields replaced."""
        data = self.model_dump()
        data.update(changes)
        return ListingDraft.model_validate(data)
