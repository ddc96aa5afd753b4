"""
Generative drafting - listing drafts written by an OpenAI chat model.
"""
import logging
from datetime import date
from typing import Any, Optional

from pydantic import ValidationError

from ..errors import DraftingError, MalformedResponseError
from ..models.identification import ItemIdentification
from ..models.listing import ComparableItem, ListingDraft
from ..models.market import MarketData
from .llm_client import LLMClient


logger = logging.getLogger(__name__)


DRAFTING_SYSTEM_PROMPT = """You are an expert eBay listing assistant. Your goal is to generate a comprehensive, attractive, and well-priced eBay listing draft based on an item description, market research data, and similar sold listings.
The output MUST be a JSON object with these string fields:

{
    "itemDescription": "...",
    "suggestedTitle": "...",
    "suggestedCategory": "...",
    "suggestedPriceRange": "...",
    "suggestedCondition": "..."
}

For 'suggestedPriceRange', use the provided market price range or infer it from the sold listings (e.g., "$75 - $100 USD").
For 'suggestedCondition', use the provided market condition summary or infer from the item description and sold listings.
'itemDescription' should be a detailed, SEO-friendly description suitable for an eBay listing, incorporating the provided market keywords and any unique selling points.
'suggestedTitle' should be catchy, include important keywords, and stay within 80 characters."""


DRAFTING_USER_PROMPT_TEMPLATE = """I need an eBay listing draft for the following item:
Item identified: {description}
Suggested Category by image: {category}

Market Research Data:
- Typical Price Range: {price_range}
- Common Condition Summary: {condition_summary}
- Key Descriptive Keywords: {keywords}

Here are some similar items that recently sold on eBay:
{sold_listings}

Please generate the listing draft JSON. Ensure all fields are populated based on the provided information, prioritizing market research data where available.
Do not include any other text or formatting, just the JSON object."""


REQUIRED_FIELDS = (
    "itemDescription",
    "suggestedTitle",
    "suggestedCategory",
    "suggestedPriceRange",
    "suggestedCondition",
)


def format_sold_listings(comparables: list[ComparableItem]) -> str:
    if not comparables:
        return "No comparable sold listings found."
    return "\n".join(
        f"- {item.title} (Sold for {item.price} on {item.sold_date}, Condition: {item.condition})"
        for item in comparables
    )


def build_user_prompt(
    identification: ItemIdentification,
    market: MarketData,
    comparables: list[ComparableItem],
) -> str:
    return DRAFTING_USER_PROMPT_TEMPLATE.format(
        description=identification.description,
        category=identification.category,
        price_range=market.price_range,
        condition_summary=market.condition_summary,
        keywords=", ".join(market.keywords),
        sold_listings=format_sold_listings(comparables),
    )


def parse_draft_fields(data: dict[str, Any]) -> dict[str, str]:
    """
    Pick the generated text fields out of the model's JSON.

    Raises:
        DraftingError: If a required field is missing or not text
    """
    missing = [
        name for name in REQUIRED_FIELDS
        if not isinstance(data.get(name), str) or not data[name].strip()
    ]
    if missing:
        raise DraftingError(f"Drafting response is missing required fields: {', '.join(missing)}")
    return {name: data[name].strip() for name in REQUIRED_FIELDS}


class ChatDrafter:
    """
    Writes listing drafts with an OpenAI chat model in JSON mode.
    Comparables, date, image, and sources are attached here, not generated.
    """

    def __init__(self, llm_client: LLMClient):
        self.llm_client = llm_client

    async def draft(
        self,
        identification: ItemIdentification,
        market: MarketData,
        comparables: list[ComparableItem],
        image_url: Optional[str] = None,
    ) -> ListingDraft:
        user_prompt = build_user_prompt(identification, market, comparables)

        try:
            data = await self.llm_client.call_json(DRAFTING_SYSTEM_PROMPT, user_prompt)
        except DraftingError:
            raise
        except MalformedResponseError as e:
            raise DraftingError("Drafting backend returned an unusable response", cause=e) from e

        fields = parse_draft_fields(data)

        try:
            draft = ListingDraft.model_validate({
                **fields,
                "exampleSoldListings": comparables,
                "generatedDate": date.today().isoformat(),
                "imageUrl": image_url,
                "groundingSources": list(market.sources),
            })
        except ValidationError as e:
            raise DraftingError("Drafting response failed validation", cause=e) from e

        logger.info(f"Drafted listing: {draft.suggested_title!r}")
        return draft


def chat_drafter_factory(api_key: str) -> ChatDrafter:
    """Drafter factory for ListingPipeline: one client per API key."""
    return ChatDrafter(LLMClient(api_key=api_key))
