"""Scoped view over another storage backend.

Keys are stored as ``-<scope>:<key>`` so several adapters (or a relay and an
adapter) can share one backend without collisions.
"""

from typing import Optional

from walletlink.storage.base import KeyValueStorage


class ScopedStorage(KeyValueStorage):
    """Prefixes keys with a scope before delegating."""

    def __init__(self, scope: str, backend: KeyValueStorage):
        self.scope = scope
        self.backend = backend
        self._scoped_keys: set[str] = set()

    def scoped_key(self, key: str) -> str:
        return f"-{self.scope}:{key}"

    def get_item(self, key: str) -> Optional[str]:
        return self.backend.get_item(self.scoped_key(key))

    def set_item(self, key: str, value: str) -> None:
        self._scoped_keys.add(key)
        self.backend.set_item(self.scoped_key(key), value)

    def remove_item(self, key: str) -> None:
        self._scoped_keys.discard(key)
        self.backend.remove_item(self.scoped_key(key))

    def clear(self) -> None:
        """Remove keys written through this view.

        Keys persisted by an earlier process are removed too when the backend
        can list its keys.
        """
        prefix = self.scoped_key("")
        keys = getattr(self.backend, "keys", None)
        if callable(keys):
            for full_key in keys():
                if full_key.startswith(prefix):
                    self.backend.remove_item(full_key)
        for key in list(self._scoped_keys):
            self.backend.remove_item(self.scoped_key(key))
        self._scoped_keys.clear()

    def __repr__(self) -> str:
        return f"ScopedStorage(scope={self.scope!r}, backend={self.backend!r})"
