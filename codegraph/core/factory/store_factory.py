"""
Factory for creating key-value and snapshot stores.
"""

from codegraph.config import SnapshotConfig, StoreConfig
from codegraph.core.store.base import KeyValueStore
from codegraph.core.store.memory_store import InMemoryKeyValueStore
from codegraph.core.store.snapshot_store import SnapshotStore
from codegraph.core.store.sqlite_store import SQLiteKeyValueStore
from codegraph.utils.exceptions import ConfigurationError


class StoreFactory:
    """Factory for creating stores from configuration."""

    @staticmethod
    def create(config: StoreConfig) -> KeyValueStore:
        """
        Create key-value store from configuration.

        Args:
            config: Store configuration

        Returns:
            KeyValueStore instance

        Raises:
            ConfigurationError: If backend is not supported
        """
        if config.backend == "sqlite":
            return SQLiteKeyValueStore(db_path=config.db_path)
        elif config.backend == "memory":
            return InMemoryKeyValueStore()
        else:
            raise ConfigurationError(f"Unsupported store backend: {config.backend}")

    @staticmethod
    def create_snapshot_store(config: SnapshotConfig) -> SnapshotStore:
        """Create the filesystem snapshot store."""
        return SnapshotStore(base_dir=config.base_dir)
