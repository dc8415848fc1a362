"""Ports between the board core and its backing store.

The core talks to a CacheProvider for reads and a DatabaseProvider for
writes; the adapters package holds the implementations.
"""

from boardcore.ports.cache import CACHED_COLLECTIONS, CacheProvider, RawRecord
from boardcore.ports.database import DatabaseProvider, QueryResult

__all__ = [
    "CACHED_COLLECTIONS",
    "CacheProvider",
    "DatabaseProvider",
    "QueryResult",
    "RawRecord",
]
