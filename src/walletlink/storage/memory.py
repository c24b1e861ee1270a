"""In-memory storage backend."""

from typing import Optional

from walletlink.storage.base import KeyValueStorage


class MemoryStorage(KeyValueStorage):
    """Dict-backed storage. Contents live as long as the instance."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def keys(self) -> list[str]:
        return list(self._items)
