"""
Market research - sold-listing pricing, condition, keywords, and title
patterns, grounded on web search results.
"""
import logging
from typing import Optional

from ..models.listing import GroundingSource
from ..models.market import GroundingResponse
from .llm_client import LLMClient


logger = logging.getLogger(__name__)


RESEARCH_PROMPT_TEMPLATE = """Research eBay sold listings for "{query}": pricing, condition, popular keywords, and title examples.

Answer using exactly these labeled sections:
Price Range: $<low> - $<high> USD
Condition Summary: <most common conditions of sold items>
Keywords: <comma-separated descriptive search keywords>
Common Title Patterns:
- <title pattern, use {{ITEM}} where the item name goes>
- <title pattern>"""


class WebMarketResearcher:
    """Market research via the OpenAI web search tool."""

    def __init__(self, llm_client: LLMClient, model: Optional[str] = None):
        self.llm_client = llm_client
        self.model = model

    async def research(self, query: str) -> GroundingResponse:
        prompt = RESEARCH_PROMPT_TEMPLATE.format(query=query)
        text, citations = await self.llm_client.web_search(prompt, model=self.model)

        sources = []
        seen = set()
        for url, title in citations:
            if not url or url in seen:
                continue
            seen.add(url)
            sources.append(GroundingSource(type="webSearch", uri=url, title=title or ""))

        logger.info(f"Market research for {query!r}: {len(text)} chars, {len(sources)} sources")
        return GroundingResponse(text=text, sources=sources)


class StaticMarketResearcher:
    """Serves prepared research text, e.g. saved from an earlier run."""

    def __init__(self, text: str):
        self.text = text

    async def research(self, query: str) -> str:
        return self.text
