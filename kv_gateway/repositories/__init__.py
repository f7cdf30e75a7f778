"""
Data Access Layer Module Initialization
"""

from kv_gateway.repositories.kv_store_repo import (
    KVCursorError,
    KVSerializationError,
    KVStoreError,
    KVStoreRepository,
)

__all__ = [
    "KVCursorError",
    "KVSerializationError",
    "KVStoreError",
    "KVStoreRepository",
]
