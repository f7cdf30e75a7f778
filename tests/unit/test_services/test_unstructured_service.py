"""
Unstructured Value Service Unit Tests
"""

import pytest
from unittest.mock import AsyncMock

from kv_gateway.common.errors import (
    IntegrityFaultError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from kv_gateway.domain.kv_store import MetadataState
from kv_gateway.repositories.kv_store_repo import KVStoreError, KVStoreRepository
from kv_gateway.services.unstructured_service import UnstructuredValueService, read_metadata


@pytest.fixture
def service(memory_repo):
    return UnstructuredValueService(memory_repo)


@pytest.fixture
def failing_service():
    repo = AsyncMock(spec=KVStoreRepository)
    for name in ("list_keys", "put_bytes", "get_with_metadata", "delete"):
        getattr(repo, name).side_effect = KVStoreError("connection refused")
    return UnstructuredValueService(repo)


class TestReadMetadata:
    """Tests for read_metadata."""

    def test_present(self):
        lookup = read_metadata({"content_type": "text/plain"})
        assert lookup.state == MetadataState.PRESENT
        assert lookup.metadata.content_type == "text/plain"

    def test_absent(self):
        assert read_metadata(None).state == MetadataState.ABSENT

    @pytest.mark.parametrize(
        "raw",
        [{}, {"content_type": 5}, "text/plain", ["content_type"], {"type": "text/plain"}],
    )
    def test_malformed(self, raw):
        lookup = read_metadata(raw)
        assert lookup.state == MetadataState.MALFORMED
        assert lookup.metadata is None


@pytest.mark.asyncio
async def test_put_and_get_round_trip(service):
    await service.put("k", b"\x89PNG", content_type="image/png")

    value, metadata = await service.get("k")

    assert value == b"\x89PNG"
    assert metadata.content_type == "image/png"


@pytest.mark.asyncio
async def test_put_without_content_type_uses_default(service):
    await service.put("k", b"bytes")

    _, metadata = await service.get("k")

    assert metadata.content_type == "data/binary"


@pytest.mark.asyncio
async def test_custom_default_content_type(memory_repo):
    service = UnstructuredValueService(memory_repo, default_content_type="application/octet-stream")
    await service.put("k", b"bytes", content_type=None)

    _, metadata = await service.get("k")

    assert metadata.content_type == "application/octet-stream"


@pytest.mark.asyncio
async def test_get_missing_key(service):
    with pytest.raises(NotFoundError):
        await service.get("missing")


@pytest.mark.asyncio
async def test_get_value_without_metadata_is_integrity_fault(service, memory_repo):
    """Test a value without metadata is never reported as not found"""
    memory_repo.inject_raw("orphan", b"value")

    with pytest.raises(IntegrityFaultError) as exc_info:
        await service.get("orphan")

    assert exc_info.value.message == "no metadata found"
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_get_value_with_malformed_metadata(service, memory_repo):
    memory_repo.inject_raw("odd", b"value", metadata={"mime": "text/plain"})

    with pytest.raises(IntegrityFaultError) as exc_info:
        await service.get("odd")

    assert exc_info.value.code == "metadata_malformed"


@pytest.mark.asyncio
async def test_delete_is_idempotent(service):
    await service.put("k", b"v")

    await service.delete("k")
    await service.delete("k")

    with pytest.raises(NotFoundError):
        await service.get("k")


@pytest.mark.asyncio
async def test_list_keys_passes_listing_through(service):
    for name in ["a1", "a2", "b1"]:
        await service.put(name, b"v", content_type="text/plain")

    listing = await service.list_keys(limit=100, prefix="a")

    assert [k.name for k in listing.keys] == ["a1", "a2"]
    assert listing.keys[0].metadata == {"content_type": "text/plain"}


@pytest.mark.asyncio
async def test_list_keys_invalid_cursor(service):
    with pytest.raises(ValidationError) as exc_info:
        await service.list_keys(limit=10, cursor="abc")

    assert exc_info.value.message == "invalid cursor"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "call",
    [
        lambda s: s.list_keys(limit=10),
        lambda s: s.put("k", b"v"),
        lambda s: s.get("k"),
        lambda s: s.delete("k"),
    ],
)
async def test_store_failures_become_store_error(failing_service, call):
    with pytest.raises(StoreError) as exc_info:
        await call(failing_service)

    assert exc_info.value.status_code == 500
    assert exc_info.value.details["reason"] == "connection refused"
