"""
Storage implementations for CodeGraph.

Available backends:
- InMemoryKeyValueStore: process-local dict
- SQLiteKeyValueStore: durable local storage (aiosqlite)
- SnapshotStore: filesystem CodeGraph snapshots
"""

from codegraph.core.store.base import KeyValueStore
from codegraph.core.store.memory_store import InMemoryKeyValueStore
from codegraph.core.store.snapshot_store import SnapshotStore
from codegraph.core.store.sqlite_store import SQLiteKeyValueStore

__all__ = [
    "KeyValueStore",
    "InMemoryKeyValueStore",
    "SQLiteKeyValueStore",
    "SnapshotStore",
]
