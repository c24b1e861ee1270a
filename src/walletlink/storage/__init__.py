"""Key-value storage backends for persisted session state.

- MemoryStorage: process-local dict (tests, short-lived sessions)
- JsonFileStorage: single JSON document on disk
- ScopedStorage: prefixes every key with a scope, like browser localStorage
"""

from walletlink.storage.base import KeyValueStorage
from walletlink.storage.file import JsonFileStorage
from walletlink.storage.memory import MemoryStorage
from walletlink.storage.scoped import ScopedStorage

__all__ = [
    "KeyValueStorage",
    "JsonFileStorage",
    "MemoryStorage",
    "ScopedStorage",
]
