"""
Key-Value Store Repository Interface

Defines the data access interface for the KV store backends.
"""

import base64
import binascii
from abc import ABC, abstractmethod
from typing import Any, Optional, TypeVar

from pydantic import BaseModel

from kv_gateway.domain.kv_store import KeyListing, StoredEntry

M = TypeVar("M", bound=BaseModel)


class KVStoreError(Exception):
    """Raised by a backend when the underlying store fails"""


class KVSerializationError(KVStoreError):
    """Raised when a stored value cannot be deserialized into the requested model"""


class KVCursorError(KVStoreError):
    """Raised when a listing cursor cannot be decoded"""


def encode_cursor(last_key: str) -> str:
    """Encode the last key of a page as an opaque continuation token"""
    return base64.urlsafe_b64encode(last_key.encode("utf-8")).decode("ascii")


def decode_cursor(cursor: str) -> str:
    """
    Decode a continuation token back to the key it resumes after

    Raises:
        KVCursorError: The token was not produced by encode_cursor
    """
    try:
        return base64.urlsafe_b64decode(cursor.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as e:
        raise KVCursorError(f"invalid cursor: {cursor!r}") from e


def deserialize_model(raw: bytes, model: type[M]) -> M:
    """
    Deserialize JSON bytes into `model`

    Raises:
        KVSerializationError: The bytes are not JSON or do not fit the model
    """
    try:
        return model.model_validate_json(raw)
    except ValueError as e:
        # pydantic.ValidationError subclasses ValueError
        raise KVSerializationError(str(e)) from e


class KVStoreRepository(ABC):
    """Key-Value Store Repository Interface"""

    @abstractmethod
    async def list_keys(
        self, limit: int, prefix: str = "", cursor: Optional[str] = None
    ) -> KeyListing:
        """
        Enumerate keys in lexicographic order

        Args:
            limit: Maximum number of keys to return
            prefix: Only keys starting with this text are returned
            cursor: Continuation token from a previous listing

        Returns:
            KeyListing: Key names with expiration and metadata, plus a cursor
            when more keys follow

        Raises:
            KVCursorError: The cursor could not be decoded
        """
        pass

    @abstractmethod
    async def put_bytes(self, key: str, value: bytes, metadata: dict[str, Any]) -> None:
        """
        Store raw bytes together with a metadata record

        Value and metadata are written as one unit; any previous value,
        metadata and expiration under the key are replaced.
        """
        pass

    @abstractmethod
    async def put_serialized(
        self, key: str, value: BaseModel, ttl_seconds: Optional[int] = None
    ) -> None:
        """
        Store a model serialized as JSON

        Args:
            key: The key to set
            value: The model to serialize
            ttl_seconds: Time to live in seconds (None means never expires)
        """
        pass

    @abstractmethod
    async def get_with_metadata(self, key: str) -> StoredEntry:
        """
        Read value and metadata in a single call

        Returns:
            StoredEntry with both fields None when the key doesn't exist or is expired
        """
        pass

    @abstractmethod
    async def get_deserialized(self, key: str, model: type[M]) -> Optional[M]:
        """
        Read a value and deserialize it as `model`

        Returns:
            The model instance, or None if the key doesn't exist or is expired

        Raises:
            KVSerializationError: The stored bytes do not fit `model`
        """
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        """
        Delete a key and its metadata

        Deleting a missing key is not an error.
        """
        pass

    @abstractmethod
    async def cleanup_expired(self) -> int:
        """
        Delete all expired keys

        Returns:
            Number of deleted keys
        """
        pass
