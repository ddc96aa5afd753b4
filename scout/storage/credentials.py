"""
Credential persistence with migration of the legacy single eBay key.
"""
import json
import logging
from typing import Any

from ..errors import StorageError
from ..models.credentials import LEGACY_EBAY_KEY_FIELD, CredentialSet
from .kv import KeyValueStore


logger = logging.getLogger(__name__)


API_KEYS_STORAGE_KEY = "api_keys"


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _stored_app_id(data: dict) -> str:
    return _text(data.get("ebayAppId", data.get("ebay_app_id")))


def migrate_credentials(data: Any) -> CredentialSet:
    """
    Build a CredentialSet from a stored blob of any age.

    The legacy "ebayApiKey" value becomes "ebayAppId" when no App ID is
    stored or the stored one is blank. Every missing or non-string field
    becomes "".
    """
    if not isinstance(data, dict):
        return CredentialSet()

    data = dict(data)
    legacy_value = _text(data.pop(LEGACY_EBAY_KEY_FIELD, None))
    if legacy_value.strip() and not _stored_app_id(data).strip():
        data.pop("ebay_app_id", None)
        data["ebayAppId"] = legacy_value

    fields = {}
    for name, field in CredentialSet.model_fields.items():
        alias = field.alias or name
        fields[name] = _text(data.get(alias, data.get(name, "")))
    return CredentialSet(**fields)


class CredentialStore:
    """Loads and saves the CredentialSet under one storage key."""

    def __init__(self, store: KeyValueStore, key: str = API_KEYS_STORAGE_KEY):
        self.store = store
        self.key = key

    def save(self, credentials: CredentialSet) -> None:
        self.store.set(self.key, json.dumps(credentials.to_storage()))

    def load(self) -> CredentialSet:
        raw = self.store.get(self.key)
        if not raw:
            return CredentialSet()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Stored credentials are not valid JSON, using empty defaults: {e}")
            return CredentialSet()

        credentials = migrate_credentials(data)
        if not isinstance(data, dict) or LEGACY_EBAY_KEY_FIELD not in data:
            return credentials

        legacy_value = _text(data[LEGACY_EBAY_KEY_FIELD])
        if legacy_value.strip() and credentials.ebay_app_id != legacy_value:
            # Stored App ID wins; the legacy value stays on disk untouched
            logger.warning("Stored eBay App ID differs from the legacy eBay key, not rewriting credentials")
            return credentials

        logger.info("Migrated legacy eBay key to App ID")
        try:
            self.save(credentials)
        except StorageError as e:
            logger.warning(f"Could not persist migrated credentials: {e}")
        return credentials
