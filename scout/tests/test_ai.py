"""
Tests for the OpenAI-backed identifier, researcher, and drafter.
The OpenAI SDK is replaced with mocks.
"""
import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import OpenAIError

from scout.ai import ChatDrafter, LLMClient, VisionIdentifier, WebMarketResearcher, parse_identification
from scout.ai.drafting import parse_draft_fields
from scout.errors import (
    DraftingError,
    IdentificationError,
    MalformedResponseError,
    MissingCredentialError,
    UpstreamCallError,
)
from scout.models import ComparableItem, GroundingSource, ItemIdentification, MarketData


CAMERA = ItemIdentification(description="Canon AE-1", category="Cameras")

DRAFT_JSON = {
    "itemDescription": "Classic 35mm SLR in working order.",
    "suggestedTitle": "Canon AE-1 35mm Film Camera Tested",
    "suggestedCategory": "Film Cameras",
    "suggestedPriceRange": "$75 - $100 USD",
    "suggestedCondition": "Used",
}


def chat_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def make_llm(content=None, error=None) -> LLMClient:
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=chat_response(content), side_effect=error)
    return LLMClient(api_key="sk-test", client=client)


class TestParseIdentification:
    """Tests for splitting vision responses."""

    def test_plain(self):
        identification = parse_identification("Item: Canon AE-1 camera, serial 12345\nCategory: Cameras")

        assert identification.description == "Canon AE-1 camera, serial 12345"
        assert identification.category == "Cameras"

    def test_markdown(self):
        identification = parse_identification("Here you go.\n**Item:** Nikon FM2\n**Category:** Film Cameras")

        assert identification.description == "Nikon FM2"
        assert identification.category == "Film Cameras"

    def test_missing_category(self):
        with pytest.raises(IdentificationError):
            parse_identification("Item: Canon AE-1")

    def test_empty(self):
        with pytest.raises(IdentificationError):
            parse_identification(None)


class TestLLMClient:
    """Tests for the OpenAI wrapper."""

    def test_call_json(self):
        llm = make_llm(json.dumps({"a": 1}))
        assert asyncio.run(llm.call_json("system", "user")) == {"a": 1}

    def test_call_json_invalid(self):
        llm = make_llm("not json")
        with pytest.raises(MalformedResponseError):
            asyncio.run(llm.call_json("system", "user"))

    def test_call_json_not_object(self):
        llm = make_llm("[1, 2]")
        with pytest.raises(MalformedResponseError):
            asyncio.run(llm.call_json("system", "user"))

    def test_upstream_error(self):
        llm = make_llm(error=OpenAIError("connection reset"))
        with pytest.raises(UpstreamCallError):
            asyncio.run(llm.call_raw("system", "user"))

    def test_missing_key(self):
        llm = LLMClient(api_key="")

        assert not llm.is_available()
        with pytest.raises(MissingCredentialError):
            asyncio.run(llm.call_raw("system", "user"))

    def test_web_search_citations(self):
        annotation = SimpleNamespace(type="url_citation", url="https://example.com/a", title="A")
        response = SimpleNamespace(
            output_text="Price Range: $5 - $10",
            output=[
                SimpleNamespace(type="web_search_call"),
                SimpleNamespace(type="message", content=[SimpleNamespace(annotations=[annotation])]),
            ],
        )
        client = MagicMock()
        client.responses.create = AsyncMock(return_value=response)

        text, citations = asyncio.run(LLMClient(api_key="sk-test", client=client).web_search("prompt"))

        assert text == "Price Range: $5 - $10"
        assert citations == [("https://example.com/a", "A")]
        assert client.responses.create.call_args.kwargs["tools"] == [{"type": "web_search_preview"}]


class TestVisionIdentifier:
    def test_identify(self):
        llm = MagicMock()
        llm.call_with_image = AsyncMock(return_value="Item: Canon AE-1\nCategory: Cameras")

        identification = asyncio.run(VisionIdentifier(llm).identify(b"\x89PNG", "image/png"))

        assert identification == CAMERA
        assert llm.call_with_image.call_args.args[1].startswith("data:image/png;base64,")


class TestWebMarketResearcher:
    def test_sources_deduplicated(self):
        llm = MagicMock()
        llm.web_search = AsyncMock(return_value=(
            "Price Range: $5 - $10",
            [("https://a.com", "A"), ("https://a.com", "A again"), ("", "blank"), ("https://b.com", None)],
        ))

        response = asyncio.run(WebMarketResearcher(llm).research("Canon AE-1"))

        assert response.text == "Price Range: $5 - $10"
        assert [s.uri for s in response.sources] == ["https://a.com", "https://b.com"]
        assert all(s.type == "webSearch" for s in response.sources)
        assert "Canon AE-1" in llm.web_search.call_args.args[0]


class TestChatDrafter:
    """Tests for generative drafting."""

    def test_draft(self):
        llm = MagicMock()
        llm.call_json = AsyncMock(return_value=DRAFT_JSON)
        comparables = [ComparableItem(item_id="1", title="Canon AE-1", price="US $80")]
        market = MarketData(price_range="$75 - $100 USD", sources=[GroundingSource(uri="https://a.com")])

        draft = asyncio.run(ChatDrafter(llm).draft(CAMERA, market, comparables, image_url="file:///a.jpg"))

        assert draft.suggested_title == DRAFT_JSON["suggestedTitle"]
        assert draft.example_sold_listings == comparables
        assert draft.image_url == "file:///a.jpg"
        assert draft.grounding_sources == market.sources
        prompt = llm.call_json.call_args.args[1]
        assert "Canon AE-1 (Sold for US $80" in prompt
        assert "$75 - $100 USD" in prompt

    def test_missing_fields(self):
        with pytest.raises(DraftingError, match="suggestedTitle"):
            parse_draft_fields({**DRAFT_JSON, "suggestedTitle": ""})

    def test_malformed_json_is_drafting_error(self):
        llm = MagicMock()
        llm.call_json = AsyncMock(side_effect=MalformedResponseError("OpenAI returned invalid JSON"))

        with pytest.raises(DraftingError):
            asyncio.run(ChatDrafter(llm).draft(CAMERA, MarketData(), []))

    def test_upstream_error_propagates(self):
        llm = MagicMock()
        llm.call_json = AsyncMock(side_effect=UpstreamCallError("OpenAI request failed"))

        with pytest.raises(UpstreamCallError):
            asyncio.run(ChatDrafter(llm).draft(CAMERA, MarketData(), []))
