"""
Structured Value Service Unit Tests
"""

import json

import pytest
from unittest.mock import AsyncMock

from kv_gateway.common.errors import NotFoundError, StoreError, ValidationError
from kv_gateway.domain.kv_store import StructuredValue
from kv_gateway.repositories.kv_store_repo import KVStoreError, KVStoreRepository
from kv_gateway.services.structured_service import StructuredValueService
from kv_gateway.services.unstructured_service import UnstructuredValueService


@pytest.fixture
def service(memory_repo):
    return StructuredValueService(memory_repo)


def _body(**fields) -> bytes:
    return json.dumps(fields).encode("utf-8")


@pytest.mark.asyncio
async def test_put_and_get_round_trip(service):
    await service.put("s", _body(foo="hello", bar=-2147483648))

    value = await service.get("s")

    assert value == StructuredValue(foo="hello", bar=-2147483648)


@pytest.mark.asyncio
async def test_put_ignores_unknown_fields(service):
    await service.put("s", _body(foo="x", bar=1, baz=True))

    assert await service.get("s") == StructuredValue(foo="x", bar=1)


@pytest.mark.asyncio
async def test_put_with_ttl():
    repo = AsyncMock(spec=KVStoreRepository)
    service = StructuredValueService(repo)

    await service.put("s", _body(foo="x", bar=1), ttl="120")

    repo.put_serialized.assert_awaited_once_with(
        "s", StructuredValue(foo="x", bar=1), ttl_seconds=120
    )


@pytest.mark.asyncio
async def test_put_without_ttl():
    repo = AsyncMock(spec=KVStoreRepository)
    service = StructuredValueService(repo)

    await service.put("s", _body(foo="x", bar=1))

    repo.put_serialized.assert_awaited_once_with(
        "s", StructuredValue(foo="x", bar=1), ttl_seconds=None
    )


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        b"",
        b"not json",
        b"[]",
        _body(foo="x"),
        _body(bar=1),
        _body(foo="x", bar="1"),
        _body(foo=1, bar=1),
        _body(foo="x", bar=1.5),
        _body(foo="x", bar=2147483648),
        _body(foo="x", bar=True),
    ],
)
async def test_put_invalid_body_writes_nothing(service, body):
    with pytest.raises(ValidationError) as exc_info:
        await service.put("s", body)

    assert exc_info.value.message == "invalid body"
    assert exc_info.value.status_code == 400
    with pytest.raises(NotFoundError):
        await service.get("s")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "ttl", ["0", "-5", "abc", "", "1.5", " 7 ", "20000000000000000000"]
)
async def test_put_invalid_ttl_writes_nothing(service, ttl):
    with pytest.raises(ValidationError) as exc_info:
        await service.put("s", _body(foo="x", bar=1), ttl=ttl)

    assert exc_info.value.message == "invalid ttl"
    with pytest.raises(NotFoundError):
        await service.get("s")


@pytest.mark.asyncio
async def test_put_with_plus_signed_ttl():
    repo = AsyncMock(spec=KVStoreRepository)
    service = StructuredValueService(repo)

    await service.put("s", _body(foo="x", bar=1), ttl="+5")

    repo.put_serialized.assert_awaited_once_with(
        "s", StructuredValue(foo="x", bar=1), ttl_seconds=5
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("ttl", ["1000000000000", "18446744073709551615"])
async def test_put_with_far_future_ttl(service, memory_repo, ttl):
    """Test a TTL past the last representable date stores a never-expiring value"""
    await service.put("s", _body(foo="x", bar=1), ttl=ttl)

    assert await service.get("s") == StructuredValue(foo="x", bar=1)
    listing = await memory_repo.list_keys(limit=10)
    assert listing.keys[0].expiration is not None


@pytest.mark.asyncio
async def test_invalid_body_reported_before_invalid_ttl(service):
    with pytest.raises(ValidationError) as exc_info:
        await service.put("s", b"nope", ttl="abc")

    assert exc_info.value.message == "invalid body"


@pytest.mark.asyncio
async def test_get_missing_key(service):
    with pytest.raises(NotFoundError):
        await service.get("missing")


@pytest.mark.asyncio
async def test_get_unstructured_entry_is_not_found(service, memory_repo):
    """Test an entry written as raw bytes looks missing to the structured endpoint"""
    await UnstructuredValueService(memory_repo).put("raw", b"\x00\xff binary", "data/binary")

    with pytest.raises(NotFoundError):
        await service.get("raw")


@pytest.mark.asyncio
async def test_get_store_failure_is_store_error():
    repo = AsyncMock(spec=KVStoreRepository)
    repo.get_deserialized.side_effect = KVStoreError("timeout")
    service = StructuredValueService(repo)

    with pytest.raises(StoreError) as exc_info:
        await service.get("s")

    assert exc_info.value.message == "internal server error"


@pytest.mark.asyncio
async def test_put_store_failure_is_store_error():
    repo = AsyncMock(spec=KVStoreRepository)
    repo.put_serialized.side_effect = KVStoreError("read-only replica")
    service = StructuredValueService(repo)

    with pytest.raises(StoreError):
        await service.put("s", _body(foo="x", bar=1))
