"""
Draft history - most-recent-first list of generated listing drafts.
"""
import json
import logging

from pydantic import ValidationError

from ..models.listing import ListingDraft
from .kv import KeyValueStore


logger = logging.getLogger(__name__)


LISTINGS_STORAGE_KEY = "generated_listings"


class DraftHistoryStore:
    """Append/clear-only history persisted as one JSON list."""

    def __init__(self, store: KeyValueStore, key: str = LISTINGS_STORAGE_KEY):
        self.store = store
        self.key = key

    def save(self, draft: ListingDraft) -> None:
        """Prepend the draft and persist the whole list in one write."""
        drafts = self.load_all()
        drafts.insert(0, draft)
        payload = json.dumps([d.to_storage() for d in drafts], ensure_ascii=False)
        self.store.set(self.key, payload)
        logger.info(f"Saved draft to history ({len(drafts)} total)")

    def load_all(self) -> list[ListingDraft]:
        raw = self.store.get(self.key)
        if not raw:
            return []
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Draft history is not valid JSON, ignoring it: {e}")
            return []
        if not isinstance(entries, list):
            logger.warning("Draft history is not a list, ignoring it")
            return []

        drafts = []
        for entry in entries:
            try:
                drafts.append(ListingDraft.model_validate(entry))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable history entry: {e}")
        return drafts

    def clear(self) -> None:
        self.store.remove(self.key)
        logger.info("Cleared draft history")
