"""Persistence for drafts and credentials."""

from .kv import JsonFileStore, KeyValueStore, MemoryStore
from .history import DraftHistoryStore
from .credentials import CredentialStore, migrate_credentials

__all__ = [
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "DraftHistoryStore",
    "CredentialStore",
    "migrate_credentials",
]
