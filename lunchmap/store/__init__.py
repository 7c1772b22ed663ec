"""
Persistence layer.

Responsibilities:
- Load and save the whole dataset (teams, users, restaurants, reviews) as one JSON document.
- Bootstrap the default team on first use and migrate older documents.
- Expose the active store as a FastAPI dependency that tests can replace.
"""

from __future__ import annotations

from ..config import DEFAULT_APP_CONFIG
from .json_store import InMemoryStore, JsonFileStore, Store

_store: Store | None = None


def get_store() -> Store:
    """Return the process-wide store, creating the JSON file store on first call."""
    global _store
    if _store is None:
        _store = JsonFileStore(DEFAULT_APP_CONFIG.data_path)
    return _store


def set_store(store: Store | None) -> None:
    """Replace the active store. ``None`` resets to the configured JSON file."""
    global _store
    _store = store


__all__ = ["InMemoryStore", "JsonFileStore", "Store", "get_store", "set_store"]
