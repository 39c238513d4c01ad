"""
Redis-backed key-value store for position blobs.
"""

from __future__ import annotations

import logging
from typing import Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

logger = logging.getLogger(__name__)


class RedisKeyValueStore:
    """
    Thin wrapper over ``redis.asyncio``.

    Errors propagate; the position store decides how to degrade.
    """

    def __init__(self, url: str, prefix: str = "titan:"):
        self._client = redis.Redis.from_url(url, decode_responses=True)
        self._prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        return await self._client.get(self._key(key))

    async def set(self, key: str, value: str) -> None:
        await self._client.set(self._key(key), value)

    async def close(self) -> None:
        try:
            await self._client.aclose()
        except RedisError as exc:
            logger.debug("Redis close failed: %s", exc)
