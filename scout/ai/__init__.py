"""AI collaborators: identification, market research, and drafting."""

from .llm_client import LLMClient
from .vision import VisionIdentifier, parse_identification
from .research import StaticMarketResearcher, WebMarketResearcher
from .drafting import ChatDrafter, chat_drafter_factory

__all__ = [
    "LLMClient",
    "VisionIdentifier",
    "parse_identification",
    "StaticMarketResearcher",
    "WebMarketResearcher",
    "ChatDrafter",
    "chat_drafter_factory",
]
