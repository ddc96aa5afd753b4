"""
Tests for data models and the error types.
"""
import pytest
from pydantic import ValidationError

from scout.errors import PipelineError, ScoutError, UpstreamCallError
from scout.models import (
    ComparableItem,
    CredentialSet,
    GroundingSource,
    ItemIdentification,
    ListingDraft,
    MarketData,
    is_available,
)


@pytest.fixture
def draft() -> ListingDraft:
    return ListingDraft(
        item_description="A camera",
        suggested_title="Canon AE-1 Camera",
        suggested_category="Cameras",
        suggested_price_range="$50 - $100 USD",
        suggested_condition="Used",
        example_sold_listings=[ComparableItem(item_id="1", title="Canon", price="US $60")],
        grounding_sources=[GroundingSource(type="googleSearch", uri="https://example.com")],
    )


class TestListingDraft:
    """Tests for the listing draft model."""

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError):
            ListingDraft(
                item_description="x",
                suggested_title="   ",
                suggested_category="x",
                suggested_price_range="x",
                suggested_condition="x",
            )

    def test_defaults(self, draft):
        assert draft.generated_date
        assert draft.image_url is None

    def test_with_edits_returns_new_draft(self, draft):
        edited = draft.with_edits(suggested_title="Edited title")

        assert edited.suggested_title == "Edited title"
        assert draft.suggested_title == "Canon AE-1 Camera"
        assert edited.example_sold_listings == draft.example_sold_listings

    def test_with_edits_validates(self, draft):
        with pytest.raises(ValidationError):
            draft.with_edits(suggested_title="")

    def test_storage_uses_camel_case(self, draft):
        data = draft.to_storage()

        assert data["suggestedTitle"] == "Canon AE-1 Camera"
        assert data["exampleSoldListings"][0]["itemId"] == "1"
        assert data["groundingSources"][0]["type"] == "googleSearch"
        assert "imageUrl" not in data

    def test_reads_camel_case(self, draft):
        assert ListingDraft.model_validate(draft.to_storage()) == draft

    def test_null_listings_become_empty(self):
        draft = ListingDraft.model_validate({
            "itemDescription": "x",
            "suggestedTitle": "Title",
            "suggestedCategory": "x",
            "suggestedPriceRange": "x",
            "suggestedCondition": "x",
            "exampleSoldListings": None,
        })
        assert draft.example_sold_listings == []


class TestSmallModels:
    """Tests for identification, comparables, credentials, and market data."""

    def test_identification_complete(self):
        assert ItemIdentification(description="Camera", category="Cameras").is_complete
        assert not ItemIdentification(description="Camera", category="").is_complete

    def test_comparable_is_frozen(self):
        item = ComparableItem(item_id="1", title="Canon", price="US $60")
        with pytest.raises(ValidationError):
            item.price = "US $70"

    def test_credentials_non_strings(self):
        credentials = CredentialSet.model_validate({"chatGptApiKey": None, "ebayAppId": 5})

        assert credentials.chat_gpt_api_key == ""
        assert credentials.ebay_app_id == ""

    def test_has_ebay_oauth(self):
        assert CredentialSet(ebay_oauth_token="tok").has_ebay_oauth
        assert CredentialSet(ebay_app_id="id", ebay_client_secret="secret").has_ebay_oauth
        assert not CredentialSet(ebay_app_id="id").has_ebay_oauth

    def test_market_data_defaults(self):
        market = MarketData()

        assert market.price_range == "N/A"
        assert not market.has_price_range
        assert market.keywords == []

    def test_is_available(self):
        assert is_available("$5 USD")
        assert not is_available("n/a")
        assert not is_available("  ")


class TestErrors:
    """Tests for error messages."""

    def test_cause_in_message(self):
        error = ScoutError("Upload failed", cause=ValueError("bad"))
        assert str(error) == "Upload failed (caused by: bad)"

    def test_pipeline_error_message(self):
        error = PipelineError("retrieving_comparables", UpstreamCallError("timeout"))

        assert str(error) == "Retrieving comparables failed: timeout"
        assert error.stage == "retrieving_comparables"
        assert isinstance(error.cause, UpstreamCallError)
