"""
Key-Value Store Repository SQLAlchemy Implementation

Provides concrete database operation implementation for KV Store.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Optional

from pydantic import BaseModel
from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from kv_gateway.common.time import expires_at_from_ttl, to_epoch_seconds, utc_now_naive
from kv_gateway.db.models import KeyValueEntry
from kv_gateway.domain.kv_store import KeyListing, ListedKey, StoredEntry
from kv_gateway.repositories.kv_store_repo import (
    KVStoreError,
    KVStoreRepository,
    M,
    decode_cursor,
    deserialize_model,
    encode_cursor,
)


@contextmanager
def _store_errors() -> Iterator[None]:
    """Re-raise SQLAlchemy failures as KVStoreError"""
    try:
        yield
    except SQLAlchemyError as e:
        raise KVStoreError(str(e)) from e


class SQLAlchemyKVStoreRepository(KVStoreRepository):
    """
    Key-Value Store Repository SQLAlchemy Implementation

    Uses SQLAlchemy ORM to implement database operations for KV Store.
    Expired rows are hidden from reads and removed by cleanup_expired().
    """

    def __init__(self, session: AsyncSession):
        """
        Initialize Repository

        Args:
            session: Async database session
        """
        self.session = session

    @staticmethod
    def _not_expired():
        return or_(
            KeyValueEntry.expires_at.is_(None),
            KeyValueEntry.expires_at > utc_now_naive(),
        )

    async def _get_live(self, key: str) -> Optional[KeyValueEntry]:
        result = await self.session.execute(
            select(KeyValueEntry).where(KeyValueEntry.key == key, self._not_expired())
        )
        return result.scalar_one_or_none()

    async def _upsert(
        self,
        key: str,
        value: bytes,
        metadata: Optional[Any],
        expires_at,
    ) -> None:
        result = await self.session.execute(
            select(KeyValueEntry).where(KeyValueEntry.key == key)
        )
        entity = result.scalar_one_or_none()

        if entity:
            # Replace wholesale: metadata and expiration are never merged
            entity.value = value
            entity.entry_metadata = metadata
            entity.expires_at = expires_at
        else:
            entity = KeyValueEntry(
                key=key,
                value=value,
                entry_metadata=metadata,
                expires_at=expires_at,
            )
            self.session.add(entity)

        await self.session.commit()

    async def list_keys(
        self, limit: int, prefix: str = "", cursor: Optional[str] = None
    ) -> KeyListing:
        """Enumerate live keys ordered by name"""
        stmt = select(KeyValueEntry).where(self._not_expired())
        if prefix:
            # LIKE is case-insensitive on SQLite; compare the leading characters instead
            stmt = stmt.where(func.substr(KeyValueEntry.key, 1, len(prefix)) == prefix)
        if cursor:
            stmt = stmt.where(KeyValueEntry.key > decode_cursor(cursor))
        # One extra row tells whether another page follows
        stmt = stmt.order_by(KeyValueEntry.key).limit(limit + 1)

        with _store_errors():
            result = await self.session.execute(stmt)
            entities = list(result.scalars().all())

        page = entities[:limit]
        keys = [
            ListedKey(
                name=entity.key,
                expiration=to_epoch_seconds(entity.expires_at),
                metadata=entity.entry_metadata,
            )
            for entity in page
        ]
        if len(entities) > limit:
            return KeyListing(keys=keys, list_complete=False, cursor=encode_cursor(page[-1].key))
        return KeyListing(keys=keys, list_complete=True)

    async def put_bytes(self, key: str, value: bytes, metadata: dict[str, Any]) -> None:
        """Store raw bytes with a metadata record in one row"""
        with _store_errors():
            await self._upsert(key, value, metadata, None)

    async def put_serialized(
        self, key: str, value: BaseModel, ttl_seconds: Optional[int] = None
    ) -> None:
        """Store a model as JSON with optional TTL"""
        data = value.model_dump_json().encode("utf-8")
        with _store_errors():
            await self._upsert(key, data, None, expires_at_from_ttl(ttl_seconds))

    async def get_with_metadata(self, key: str) -> StoredEntry:
        """Get value and metadata from a single row"""
        with _store_errors():
            entity = await self._get_live(key)
        if not entity:
            return StoredEntry()
        return StoredEntry(value=entity.value, metadata=entity.entry_metadata)

    async def get_deserialized(self, key: str, model: type[M]) -> Optional[M]:
        """Get a value deserialized as model, None if not found or expired"""
        with _store_errors():
            entity = await self._get_live(key)
        if not entity:
            return None
        return deserialize_model(entity.value, model)

    async def delete(self, key: str) -> None:
        """Delete a key"""
        with _store_errors():
            await self.session.execute(delete(KeyValueEntry).where(KeyValueEntry.key == key))
            await self.session.commit()

    async def cleanup_expired(self) -> int:
        """Delete all expired rows"""
        now = utc_now_naive()

        with _store_errors():
            result = await self.session.execute(
                delete(KeyValueEntry).where(
                    KeyValueEntry.expires_at.isnot(None),
                    KeyValueEntry.expires_at <= now,
                )
            )
            await self.session.commit()
        return result.rowcount
