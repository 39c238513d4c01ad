"""
Key-value store factory (config-driven).
"""

from __future__ import annotations

from typing import Optional

from titan_terminal.config import Settings, settings as default_settings
from titan_terminal.infrastructure.storage.file_store import JsonFileKeyValueStore
from titan_terminal.infrastructure.storage.memory_store import InMemoryKeyValueStore
from titan_terminal.infrastructure.storage.redis_store import RedisKeyValueStore
from titan_terminal.infrastructure.storage.types import KeyValueStore


def get_key_value_store(config: Optional[Settings] = None) -> KeyValueStore:
    config = config or default_settings
    backend = (config.STORAGE_BACKEND or "").lower()
    if backend == "redis":
        return RedisKeyValueStore(url=config.REDIS_URL, prefix=config.REDIS_PREFIX)
    if backend == "file":
        return JsonFileKeyValueStore(config.STORAGE_FILE)
    if backend in ("", "memory"):
        return InMemoryKeyValueStore()
    raise ValueError(f"Unknown storage backend: {config.STORAGE_BACKEND}")
