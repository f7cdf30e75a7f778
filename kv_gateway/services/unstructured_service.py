"""
Unstructured Value Service Module

Stores arbitrary bytes together with a content-type metadata record.
"""

import logging
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError

from kv_gateway.common.errors import (
    IntegrityFaultError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from kv_gateway.domain.kv_store import (
    KeyListing,
    MetadataLookup,
    MetadataState,
    UnstructuredMetadata,
)
from kv_gateway.repositories.kv_store_repo import (
    KVCursorError,
    KVStoreError,
    KVStoreRepository,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "data/binary"


def read_metadata(raw: Optional[Any]) -> MetadataLookup:
    """
    Interpret a stored metadata record

    Args:
        raw: Metadata as returned by the store, None when the entry has none

    Returns:
        MetadataLookup: PRESENT with the parsed record, ABSENT, or MALFORMED
    """
    if raw is None:
        return MetadataLookup(state=MetadataState.ABSENT)
    try:
        metadata = UnstructuredMetadata.model_validate(raw)
    except PydanticValidationError:
        return MetadataLookup(state=MetadataState.MALFORMED)
    return MetadataLookup(state=MetadataState.PRESENT, metadata=metadata)


def store_failure(operation: str, key: Optional[str], exc: KVStoreError) -> StoreError:
    """Log a store failure and build the error reported to the caller"""
    logger.error("KV store %s failed (key=%r): %s", operation, key, exc)
    return StoreError(details={"operation": operation, "reason": str(exc)})


class UnstructuredValueService:
    """
    Unstructured Value Service

    Handles list, get, put and delete of raw values with content-type metadata.
    """

    def __init__(
        self,
        repo: KVStoreRepository,
        default_content_type: str = DEFAULT_CONTENT_TYPE,
    ):
        """
        Initialize Service

        Args:
            repo: KV store repository
            default_content_type: Content type recorded when the caller sends none
        """
        self.repo = repo
        self.default_content_type = default_content_type

    async def list_keys(
        self, limit: int, prefix: str = "", cursor: Optional[str] = None
    ) -> KeyListing:
        """
        List Keys

        Args:
            limit: Maximum number of keys, already resolved by the caller
            prefix: Key prefix filter
            cursor: Continuation token from a previous listing

        Returns:
            KeyListing: The store's listing, unchanged

        Raises:
            ValidationError: The cursor could not be decoded
            StoreError: The store failed
        """
        try:
            return await self.repo.list_keys(limit=limit, prefix=prefix, cursor=cursor)
        except KVCursorError as e:
            raise ValidationError(
                message="invalid cursor",
                code="invalid_cursor",
                details={"reason": str(e)},
            )
        except KVStoreError as e:
            raise store_failure("list", None, e)

    async def put(self, key: str, body: bytes, content_type: Optional[str] = None) -> None:
        """
        Store a Value

        Value and metadata are written together; any previous entry is replaced.

        Raises:
            StoreError: The store failed
        """
        metadata = UnstructuredMetadata(content_type=content_type or self.default_content_type)
        try:
            await self.repo.put_bytes(key, body, metadata.model_dump())
        except KVStoreError as e:
            raise store_failure("put", key, e)
        logger.debug("Stored %d bytes under %r as %s", len(body), key, metadata.content_type)

    async def get(self, key: str) -> tuple[bytes, UnstructuredMetadata]:
        """
        Get a Value and its Metadata

        Returns:
            tuple: (value bytes, metadata)

        Raises:
            NotFoundError: Key does not exist
            IntegrityFaultError: Value exists without usable metadata
            StoreError: The store failed
        """
        try:
            entry = await self.repo.get_with_metadata(key)
        except KVStoreError as e:
            raise store_failure("get", key, e)

        if not entry.exists:
            logger.debug("Key %r not found", key)
            raise NotFoundError()

        lookup = read_metadata(entry.metadata)
        if lookup.state == MetadataState.ABSENT:
            logger.error("Value under %r has no metadata record", key)
            raise IntegrityFaultError()
        if lookup.state == MetadataState.MALFORMED:
            logger.error("Value under %r has a malformed metadata record", key)
            raise IntegrityFaultError(
                message="malformed metadata",
                code="metadata_malformed",
            )
        return entry.value, lookup.metadata

    async def delete(self, key: str) -> None:
        """
        Delete a Value

        Succeeds whether or not the key exists.

        Raises:
            StoreError: The store failed
        """
        try:
            await self.repo.delete(key)
        except KVStoreError as e:
            raise store_failure("delete", key, e)
