"""
Domain Model Module Initialization
"""

from kv_gateway.domain.kv_store import (
    KeyListing,
    ListedKey,
    MetadataLookup,
    MetadataState,
    StoredEntry,
    StructuredValue,
    UnstructuredMetadata,
)

__all__ = [
    "KeyListing",
    "ListedKey",
    "MetadataLookup",
    "MetadataState",
    "StoredEntry",
    "StructuredValue",
    "UnstructuredMetadata",
]
