"""
Structured Value Service Module

Stores JSON values that must match the StructuredValue schema, with optional TTL.
"""

import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from kv_gateway.common.errors import NotFoundError, ValidationError
from kv_gateway.common.params import MAX_TTL_SECONDS, parse_positive_int
from kv_gateway.domain.kv_store import StructuredValue
from kv_gateway.repositories.kv_store_repo import (
    KVSerializationError,
    KVStoreError,
    KVStoreRepository,
)
from kv_gateway.services.unstructured_service import store_failure

logger = logging.getLogger(__name__)


class StructuredValueService:
    """
    Structured Value Service

    Validates request bodies against StructuredValue before writing, and
    treats stored payloads that don't fit the schema as missing.
    """

    def __init__(self, repo: KVStoreRepository):
        """
        Initialize Service

        Args:
            repo: KV store repository
        """
        self.repo = repo

    async def put(self, key: str, body: bytes, ttl: Optional[str] = None) -> StructuredValue:
        """
        Store a Structured Value

        The body is checked before the TTL; nothing is written unless both pass.

        Args:
            key: Target key
            body: Raw JSON request body
            ttl: Raw "ttl" query parameter, None when absent

        Returns:
            StructuredValue: The value that was stored

        Raises:
            ValidationError: Body doesn't match the schema, or TTL isn't a positive integer
            StoreError: The store failed
        """
        try:
            value = StructuredValue.model_validate_json(body)
        except PydanticValidationError as e:
            logger.debug("Rejected structured body for %r: %s", key, e)
            raise ValidationError(message="invalid body", code="invalid_body")

        ttl_seconds = None
        if ttl is not None:
            ttl_seconds = parse_positive_int(ttl, maximum=MAX_TTL_SECONDS)
            if ttl_seconds is None:
                logger.debug("Rejected ttl %r for %r", ttl, key)
                raise ValidationError(message="invalid ttl", code="invalid_ttl")

        try:
            await self.repo.put_serialized(key, value, ttl_seconds=ttl_seconds)
        except KVStoreError as e:
            raise store_failure("structured_put", key, e)
        return value

    async def get(self, key: str) -> StructuredValue:
        """
        Get a Structured Value

        Raises:
            NotFoundError: Key does not exist, or its payload doesn't fit the schema
            StoreError: The store failed
        """
        try:
            value = await self.repo.get_deserialized(key, StructuredValue)
        except KVSerializationError as e:
            # Written through the unstructured endpoints or by another writer
            logger.debug("Payload under %r is not a structured value: %s", key, e)
            raise NotFoundError()
        except KVStoreError as e:
            raise store_failure("structured_get", key, e)

        if value is None:
            raise NotFoundError()
        return value
