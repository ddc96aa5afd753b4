"""Marketplace search clients."""

from .ebay import EbayClient, build_marketplace
from .simulated import SimulatedSoldListings

__all__ = ["EbayClient", "SimulatedSoldListings", "build_marketplace"]
