"""
Key-Value Store Repository In-Memory Implementation

Keeps entries in a process-local dict. Used for development and tests.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from kv_gateway.common.time import expires_at_from_ttl, to_epoch_seconds, utc_now_naive
from kv_gateway.domain.kv_store import KeyListing, ListedKey, StoredEntry
from kv_gateway.repositories.kv_store_repo import (
    KVStoreRepository,
    M,
    decode_cursor,
    deserialize_model,
    encode_cursor,
)


@dataclass
class _Entry:
    value: bytes
    metadata: Optional[Any] = None
    expires_at: Optional[datetime] = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now


class MemoryKVStoreRepository(KVStoreRepository):
    """
    Key-Value Store Repository In-Memory Implementation

    Entries are replaced as a whole under a lock, so a value is never
    observed without the metadata it was written with.
    """

    def __init__(self):
        self._entries: dict[str, _Entry] = {}
        self._lock = asyncio.Lock()

    def _live(self, key: str) -> Optional[_Entry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(utc_now_naive()):
            del self._entries[key]
            return None
        return entry

    async def list_keys(
        self, limit: int, prefix: str = "", cursor: Optional[str] = None
    ) -> KeyListing:
        """Enumerate live keys in lexicographic order"""
        after = decode_cursor(cursor) if cursor else None
        now = utc_now_naive()
        async with self._lock:
            names = sorted(
                name
                for name, entry in self._entries.items()
                if name.startswith(prefix)
                and not entry.is_expired(now)
                and (after is None or name > after)
            )
            page = names[:limit]
            keys = [
                ListedKey(
                    name=name,
                    expiration=to_epoch_seconds(self._entries[name].expires_at),
                    metadata=self._entries[name].metadata,
                )
                for name in page
            ]

        if len(names) > limit:
            return KeyListing(keys=keys, list_complete=False, cursor=encode_cursor(page[-1]))
        return KeyListing(keys=keys, list_complete=True)

    async def put_bytes(self, key: str, value: bytes, metadata: dict[str, Any]) -> None:
        """Store raw bytes with a metadata record"""
        async with self._lock:
            self._entries[key] = _Entry(value=bytes(value), metadata=dict(metadata))

    async def put_serialized(
        self, key: str, value: BaseModel, ttl_seconds: Optional[int] = None
    ) -> None:
        """Store a model as JSON with optional TTL"""
        data = value.model_dump_json().encode("utf-8")
        async with self._lock:
            self._entries[key] = _Entry(value=data, expires_at=expires_at_from_ttl(ttl_seconds))

    async def get_with_metadata(self, key: str) -> StoredEntry:
        """Get value and metadata, both None if not found or expired"""
        async with self._lock:
            entry = self._live(key)
            if entry is None:
                return StoredEntry()
            return StoredEntry(value=entry.value, metadata=entry.metadata)

    async def get_deserialized(self, key: str, model: type[M]) -> Optional[M]:
        """Get a value deserialized as model, None if not found or expired"""
        async with self._lock:
            entry = self._live(key)
        if entry is None:
            return None
        return deserialize_model(entry.value, model)

    async def delete(self, key: str) -> None:
        """Delete a key"""
        async with self._lock:
            self._entries.pop(key, None)

    async def cleanup_expired(self) -> int:
        """Drop expired entries"""
        now = utc_now_naive()
        async with self._lock:
            expired = [name for name, entry in self._entries.items() if entry.is_expired(now)]
            for name in expired:
                del self._entries[name]
        return len(expired)

    def inject_raw(
        self,
        key: str,
        value: bytes,
        metadata: Optional[Any] = None,
        expires_at: Optional[datetime] = None,
    ) -> None:
        """
        Place an entry without going through the write operations.

        Simulates writers outside the gateway (missing metadata, foreign payloads).
        """
        self._entries[key] = _Entry(value=value, metadata=metadata, expires_at=expires_at)
