"""A thread-safe map that spreads keys over independently locked shards."""

from __future__ import annotations

import threading
from collections.abc import Hashable
from typing import Any

_FNV64_OFFSET = 0xCBF29CE484222325
_FNV64_PRIME = 0x100000001B3
_MASK64 = 0xFFFFFFFFFFFFFFFF


def hash_key(key: Hashable) -> int:
    """Return the 64-bit FNV-1a hash of the key's text form."""
    value = _FNV64_OFFSET
    for byte in str(key).encode("utf-8"):
        value ^= byte
        value = (value * _FNV64_PRIME) & _MASK64
    return value


class _Shard:
    __slots__ = ("lock", "data")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.data: dict[Hashable, Any] = {}


class ShardedMap:
    """Concurrent map; each key lives in the shard chosen by its FNV hash."""

    def __init__(self, num_shards: int) -> None:
        if num_shards < 1:
            raise ValueError("num_shards must be at least 1")
        self.num_shards = num_shards
        self._shards = [_Shard() for _ in range(num_shards)]

    def shard_index(self, key: Hashable) -> int:
        """Return the index of the shard that holds ``key``."""
        return hash_key(key) % self.num_shards

    def _shard(self, key: Hashable) -> _Shard:
        return self._shards[self.shard_index(key)]

    def get(self, key: Hashable, default: Any = None) -> Any:
        """Return the value for ``key``, or ``default`` if absent."""
        shard = self._shard(key)
        with shard.lock:
            return shard.data.get(key, default)

    def set(self, key: Hashable, value: Any) -> None:
        """Insert or replace the value for ``key``."""
        shard = self._shard(key)
        with shard.lock:
            shard.data[key] = value

    def delete(self, key: Hashable) -> None:
        """Remove ``key``; does nothing if it is absent."""
        shard = self._shard(key)
        with shard.lock:
            shard.data.pop(key, None)

    def keys(self) -> list[Hashable]:
        """Return a snapshot of all keys, in no particular order."""
        result: list[Hashable] = []
        for shard in self._shards:
            with shard.lock:
                result.extend(shard.data)
        return result

    def __contains__(self, key: Hashable) -> bool:
        shard = self._shard(key)
        with shard.lock:
            return key in shard.data

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.data)
        return total