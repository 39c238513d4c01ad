from titan_terminal.infrastructure.storage.factory import get_key_value_store
from titan_terminal.infrastructure.storage.file_store import JsonFileKeyValueStore
from titan_terminal.infrastructure.storage.memory_store import InMemoryKeyValueStore
from titan_terminal.infrastructure.storage.redis_store import RedisKeyValueStore
from titan_terminal.infrastructure.storage.types import KeyValueStore

__all__ = [
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "RedisKeyValueStore",
    "get_key_value_store",
]
