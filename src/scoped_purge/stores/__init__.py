"""
Store adapters for the purge engine.
"""

__all__ = [
    "InMemoryStore",
    "PostgRESTStore",
    "PurgeStore",
    "SQLiteStore",
    "StoreError",
]

from scoped_purge.stores.base import PurgeStore, StoreError
from scoped_purge.stores.memory import InMemoryStore
from scoped_purge.stores.postgrest import PostgRESTStore
from scoped_purge.stores.sqlite import SQLiteStore
