"""
eBay Browse API client returning ComparableItem models.
"""
import asyncio
import base64
import logging
import random
from typing import Any, Optional

import requests

from ..config import EbayConfig, get_config
from ..errors import MalformedResponseError, MissingCredentialError, UpstreamCallError
from ..models.credentials import CredentialSet
from ..models.listing import ComparableItem
from ..models.market import MarketData
from ..pipeline.pricing import normalize_price_range
from .simulated import SimulatedSoldListings


logger = logging.getLogger(__name__)


SEARCH_PATH = "/buy/browse/v1/item_summary/search"
TOKEN_PATH = "/identity/v1/oauth2/token"


def format_amount(amount: Any) -> Optional[str]:
    """Browse API {"value", "currency"} -> "US $19.99" style text."""
    if not isinstance(amount, dict) or amount.get("value") in (None, ""):
        return None
    currency = amount.get("currency") or "USD"
    try:
        value = f"{float(amount['value']):.2f}"
    except (TypeError, ValueError):
        value = str(amount["value"])
    if currency == "USD":
        return f"US ${value}"
    return f"{currency} {value}"


class EbayClient:
    """
    Searches eBay item summaries as comparables for pricing.

    Authenticates with the stored bearer token, or fetches an application
    token with the client-credentials grant from App ID + secret. Requests
    run in a worker thread so the event loop is never blocked.
    """

    def __init__(
        self,
        credentials: CredentialSet,
        config: Optional[EbayConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        self.credentials = credentials
        self.config = config or get_config().ebay
        self.session = session or requests.Session()
        self._app_token: Optional[str] = None
        logger.info("EbayClient initialized")

    async def find_comparables(self, query: str, market_hints: MarketData) -> list[ComparableItem]:
        return await asyncio.to_thread(self.search, query, market_hints)

    def search(self, query: str, market_hints: Optional[MarketData] = None) -> list[ComparableItem]:
        """
        Search item summaries for the query.

        Args:
            query: Search term
            market_hints: Research result; its price range narrows the search

        Returns:
            List of ComparableItem objects (possibly empty)
        """
        logger.info(f"Searching eBay for: {query}")

        params = {"q": query, "limit": str(self.config.result_limit)}
        if market_hints is not None and market_hints.has_price_range:
            bounds = normalize_price_range(market_hints.price_range)
            params["filter"] = f"price:[{bounds.min:.2f}..{bounds.max:.2f}],priceCurrency:USD"

        headers = {
            "Authorization": f"Bearer {self._access_token()}",
            "X-EBAY-C-MARKETPLACE-ID": self.config.marketplace_id,
        }

        try:
            response = self.session.get(
                self.config.api_base_url + SEARCH_PATH,
                params=params,
                headers=headers,
                timeout=self.config.request_timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error(f"eBay search failed: {e}")
            raise UpstreamCallError("eBay search failed", cause=e) from e

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError("eBay search returned invalid JSON", cause=e) from e

        summaries = data.get("itemSummaries", []) if isinstance(data, dict) else []
        items = [item for item in (self._to_comparable(raw) for raw in summaries) if item]
        logger.info(f"eBay search completed: {len(items)} items")
        return items

    def _access_token(self) -> str:
        token = self.credentials.ebay_oauth_token.strip()
        if token:
            return token
        if self._app_token:
            return self._app_token

        app_id = self.credentials.ebay_app_id.strip()
        secret = self.credentials.ebay_client_secret.strip()
        if not app_id or not secret:
            raise MissingCredentialError("eBay OAuth token or App ID and client secret required")

        basic = base64.b64encode(f"{app_id}:{secret}".encode()).decode("ascii")
        try:
            response = self.session.post(
                self.config.api_base_url + TOKEN_PATH,
                headers={
                    "Authorization": f"Basic {basic}",
                    "Content-Type": "application/x-www-form-urlencoded",
                },
                data={"grant_type": "client_credentials", "scope": self.config.oauth_scope},
                timeout=self.config.request_timeout,
            )
            response.raise_for_status()
            self._app_token = response.json()["access_token"]
        except requests.RequestException as e:
            raise UpstreamCallError("eBay OAuth token request failed", cause=e) from e
        except (ValueError, KeyError, TypeError) as e:
            raise MalformedResponseError("eBay OAuth token response had no access_token", cause=e) from e

        return self._app_token

    def _to_comparable(self, raw: Any) -> Optional[ComparableItem]:
        """Map one item summary; None when it lacks an id or title."""
        if not isinstance(raw, dict) or not raw.get("itemId") or not raw.get("title"):
            return None

        shipping_cost = None
        shipping_options = raw.get("shippingOptions") or []
        if shipping_options and isinstance(shipping_options[0], dict):
            shipping_cost = format_amount(shipping_options[0].get("shippingCost"))

        sold_date = raw.get("itemEndDate") or raw.get("itemCreationDate") or ""

        return ComparableItem(
            item_id=str(raw["itemId"]),
            title=raw["title"],
            price=format_amount(raw.get("price")) or "",
            shipping_cost=shipping_cost,
            image_url=(raw.get("image") or {}).get("imageUrl", ""),
            listing_url=raw.get("itemWebUrl", ""),
            condition=raw.get("condition", ""),
            sold_date=sold_date[:10],
        )


def build_marketplace(
    credentials: CredentialSet,
    config: Optional[EbayConfig] = None,
    rng: Optional[random.Random] = None,
):
    """
    Pick the marketplace search for the credentials: the Browse API when
    OAuth is possible, simulated listings otherwise.
    """
    if credentials.has_ebay_oauth:
        return EbayClient(credentials, config=config)
    detailed = bool(credentials.ebay_app_id.strip())
    return SimulatedSoldListings(detailed=detailed, rng=rng)
