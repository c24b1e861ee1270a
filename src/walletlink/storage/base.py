"""Base interface for key-value storage.

The adapter owns the key names and the string encoding of every value;
a backend only stores and returns strings.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorage(ABC):
    """Abstract string key-value store."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Get a stored value.

        Args:
            key: Storage key

        Returns:
            Stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove a key. Missing keys are ignored."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every key owned by this store."""
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
