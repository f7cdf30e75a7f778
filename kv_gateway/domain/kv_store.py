"""
Key-Value Store Domain Model

Defines the records exchanged between the HTTP layer, the services and the
store backends.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

# Signed 32-bit range of StructuredValue.bar
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


class UnstructuredMetadata(BaseModel):
    """Metadata stored alongside every unstructured value"""

    content_type: StrictStr = Field(..., description="Content type given on PUT")


class StructuredValue(BaseModel):
    """Schema enforced by the structured endpoints"""

    foo: StrictStr = Field(..., description="Text field")
    bar: StrictInt = Field(..., ge=INT32_MIN, le=INT32_MAX, description="32-bit integer field")


class MetadataState(str, Enum):
    """Outcome of reading an entry's metadata record"""

    PRESENT = "present"
    ABSENT = "absent"
    MALFORMED = "malformed"


class StoredEntry(BaseModel):
    """
    Value and raw metadata as returned by a combined read.

    Both fields are None when the key does not exist.
    """

    value: Optional[bytes] = None
    metadata: Optional[Any] = None

    @property
    def exists(self) -> bool:
        return self.value is not None


class MetadataLookup(BaseModel):
    """Tagged result of interpreting a stored metadata record"""

    state: MetadataState
    metadata: Optional[UnstructuredMetadata] = None


class ListedKey(BaseModel):
    """A single key in a listing"""

    name: str = Field(..., description="Key name")
    expiration: Optional[int] = Field(None, description="Expiration as Unix epoch seconds")
    metadata: Optional[Any] = Field(None, description="Stored metadata record")


class KeyListing(BaseModel):
    """Result of an enumeration"""

    keys: list[ListedKey] = Field(default_factory=list)
    list_complete: bool = Field(True, description="False when more keys follow")
    cursor: Optional[str] = Field(None, description="Continuation token for the next page")

    model_config = ConfigDict(from_attributes=True)
