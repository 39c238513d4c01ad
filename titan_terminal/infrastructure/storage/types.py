"""
Key-value persistence protocol for type hints.

Backends holding connections may also expose ``async close()``; the runtime
calls it on shutdown when present.
"""

from __future__ import annotations

from typing import Optional, Protocol


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Optional[str]:
        ...

    async def set(self, key: str, value: str) -> None:
        ...
