"""Protocol for the shared key/value store injected into request handlers."""

from __future__ import annotations

from typing import Any, Protocol


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any, ttl_seconds: float | None = None) -> None: ...

    async def increment(self, key: str, amount: int = 1, ttl_seconds: float | None = None) -> int: ...
