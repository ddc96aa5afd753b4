"""
Vision identification - describe and categorize the item in a photo.
"""
import base64
import logging
import re
from typing import Optional

from ..errors import IdentificationError
from ..models.identification import ItemIdentification
from .llm_client import LLMClient


logger = logging.getLogger(__name__)


IDENTIFY_PROMPT = (
    "Analyze this image. Describe the item in detail, including any specific alphanumeric "
    "identifiers like model numbers, serial numbers, or product codes visible on labels or "
    "the item itself. Then, identify its primary category suitable for an online listing. "
    'Format your response exactly as: "Item: [Detailed Description including identifiers]\n'
    'Category: [Primary Category]".'
)

_ITEM_PATTERN = re.compile(r"^[ \t*_]*Item[ \t*_]*:[ \t*_]*(.+)$", re.IGNORECASE | re.MULTILINE)
_CATEGORY_PATTERN = re.compile(r"^[ \t*_]*Category[ \t*_]*:[ \t*_]*(.+)$", re.IGNORECASE | re.MULTILINE)


def parse_identification(text: Optional[str]) -> ItemIdentification:
    """
    Split an "Item: ...\\nCategory: ..." response into an ItemIdentification.

    Raises:
        IdentificationError: If either part is missing or empty
    """
    text = text or ""
    item_match = _ITEM_PATTERN.search(text)
    category_match = _CATEGORY_PATTERN.search(text)

    description = item_match.group(1).strip().strip(" *_") if item_match else ""
    category = category_match.group(1).strip().strip(" *_") if category_match else ""

    if not description or not category:
        logger.error(f"Vision response format issue: {text!r}")
        raise IdentificationError("Could not parse the vision response into description and category.")

    return ItemIdentification(description=description, category=category)


def image_to_data_url(image: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(image).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


class VisionIdentifier:
    """Identifies items from photos with an OpenAI vision model."""

    def __init__(self, llm_client: LLMClient, model: Optional[str] = None):
        self.llm_client = llm_client
        self.model = model

    async def identify(self, image: bytes, mime_type: str) -> ItemIdentification:
        response = await self.llm_client.call_with_image(
            IDENTIFY_PROMPT,
            image_to_data_url(image, mime_type),
            model=self.model,
        )
        identification = parse_identification(response)
        logger.info(f"Identified item: {identification.description!r} ({identification.category})")
        return identification
