"""
Key-Value Store Repository Redis Implementation

Provides concrete Redis operation implementation for KV Store.
Each key is a Redis hash holding the value and its metadata record, so the
two are written and read together. Uses Redis native TTL for expiration.
"""

import json
import re
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from pydantic import BaseModel
from redis.asyncio import Redis
from redis.exceptions import RedisError

from kv_gateway.common.time import utc_now
from kv_gateway.domain.kv_store import KeyListing, ListedKey, StoredEntry
from kv_gateway.repositories.kv_store_repo import (
    KVStoreError,
    KVStoreRepository,
    M,
    decode_cursor,
    deserialize_model,
    encode_cursor,
)

VALUE_FIELD = "value"
METADATA_FIELD = "metadata"
# Redis rejects EXPIRE values whose millisecond deadline overflows a signed 64-bit int
MAX_EXPIRE_SECONDS = 10**15

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


@contextmanager
def _store_errors() -> Iterator[None]:
    """Re-raise Redis failures as KVStoreError"""
    try:
        yield
    except RedisError as e:
        raise KVStoreError(str(e)) from e


def _decode_metadata(raw: Optional[bytes]) -> Optional[Any]:
    """
    Decode a stored metadata field.

    Undecodable content is passed through as text so callers can tell it
    apart from a missing record.
    """
    if raw is None:
        return None
    text = raw.decode("utf-8", errors="replace")
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


class RedisKVStoreRepository(KVStoreRepository):
    """
    Key-Value Store Repository Redis Implementation

    Leverages Redis native TTL for automatic key expiration,
    eliminating the need for scheduled cleanup tasks.
    """

    def __init__(self, client: Redis, key_prefix: str = ""):
        """
        Initialize Repository

        Args:
            client: Async Redis client instance (decode_responses=False)
            key_prefix: Namespace prepended to every key
        """
        self.client = client
        self.key_prefix = key_prefix

    def _redis_key(self, key: str) -> str:
        return f"{self.key_prefix}{key}"

    def _match_pattern(self, prefix: str) -> str:
        return _GLOB_SPECIAL.sub(r"\\\1", self._redis_key(prefix)) + "*"

    async def list_keys(
        self, limit: int, prefix: str = "", cursor: Optional[str] = None
    ) -> KeyListing:
        """
        Enumerate keys ordered by name

        SCAN has no ordering, so every matching key is collected and sorted
        before the page is cut.
        """
        after = decode_cursor(cursor) if cursor else None
        strip = len(self.key_prefix)

        with _store_errors():
            names = []
            async for raw_key in self.client.scan_iter(match=self._match_pattern(prefix)):
                name = raw_key.decode("utf-8")[strip:]
                if after is None or name > after:
                    names.append(name)
            names.sort()
            page = names[:limit]

            async with self.client.pipeline(transaction=False) as pipe:
                for name in page:
                    pipe.ttl(self._redis_key(name))
                    pipe.hget(self._redis_key(name), METADATA_FIELD)
                replies = await pipe.execute()

        now = int(utc_now().timestamp())
        keys = []
        for i, name in enumerate(page):
            ttl, raw_metadata = replies[2 * i], replies[2 * i + 1]
            if ttl == -2:
                # Expired or deleted after the SCAN
                continue
            keys.append(
                ListedKey(
                    name=name,
                    expiration=now + ttl if ttl and ttl > 0 else None,
                    metadata=_decode_metadata(raw_metadata),
                )
            )

        if len(names) > limit:
            return KeyListing(keys=keys, list_complete=False, cursor=encode_cursor(page[-1]))
        return KeyListing(keys=keys, list_complete=True)

    async def put_bytes(self, key: str, value: bytes, metadata: dict[str, Any]) -> None:
        """Replace the hash with value and metadata in one transaction"""
        redis_key = self._redis_key(key)
        with _store_errors():
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.delete(redis_key)
                pipe.hset(
                    redis_key,
                    mapping={VALUE_FIELD: value, METADATA_FIELD: json.dumps(metadata)},
                )
                await pipe.execute()

    async def put_serialized(
        self, key: str, value: BaseModel, ttl_seconds: Optional[int] = None
    ) -> None:
        """Replace the hash with a JSON value and optional TTL"""
        redis_key = self._redis_key(key)
        data = value.model_dump_json().encode("utf-8")
        with _store_errors():
            async with self.client.pipeline(transaction=True) as pipe:
                pipe.delete(redis_key)
                pipe.hset(redis_key, mapping={VALUE_FIELD: data})
                if ttl_seconds is not None and ttl_seconds > 0:
                    pipe.expire(redis_key, min(ttl_seconds, MAX_EXPIRE_SECONDS))
                await pipe.execute()

    async def get_with_metadata(self, key: str) -> StoredEntry:
        """Get value and metadata with one HMGET"""
        with _store_errors():
            value, raw_metadata = await self.client.hmget(
                self._redis_key(key), [VALUE_FIELD, METADATA_FIELD]
            )
        if value is None:
            return StoredEntry()
        return StoredEntry(value=value, metadata=_decode_metadata(raw_metadata))

    async def get_deserialized(self, key: str, model: type[M]) -> Optional[M]:
        """Get a value deserialized as model, None if not found or expired"""
        with _store_errors():
            value = await self.client.hget(self._redis_key(key), VALUE_FIELD)
        if value is None:
            return None
        return deserialize_model(value, model)

    async def delete(self, key: str) -> None:
        """Delete a key"""
        with _store_errors():
            await self.client.delete(self._redis_key(key))

    async def cleanup_expired(self) -> int:
        """
        No-op for Redis backend.

        Redis manages key expiration natively via TTL,
        so no manual cleanup is needed.
        """
        return 0
