"""
Base interface for key-value storage.

Records, chat sessions and messages are persisted as JSON strings under
slash-separated keys scoped by user and project, e.g.
``analysis/<user_id>/<project_id>``.
"""

from abc import ABC, abstractmethod


class KeyValueStore(ABC):
    """Abstract base class for key-value storage implementations."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the store (create tables/schema)."""
        pass

    @abstractmethod
    async def get(self, key: str) -> str | None:
        """
        Retrieve a value.

        Args:
            key: Full key

        Returns:
            Stored value or None if absent
        """
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> None:
        """
        Store a value, replacing any previous one.

        A write either fully succeeds or leaves the previous value untouched.

        Args:
            key: Full key
            value: Serialized value
        """
        pass

    @abstractmethod
    async def list(self, prefix: str) -> list[tuple[str, str]]:
        """
        List entries whose key starts with prefix.

        Args:
            prefix: Key prefix

        Returns:
            (key, value) pairs ordered by key
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """
        Delete a key.

        Args:
            key: Full key

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close any open connections."""
        pass
