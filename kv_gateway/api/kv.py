"""
Key-Value API

Provides the unstructured and structured value endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Query, Request, Response
from fastapi.responses import PlainTextResponse

from kv_gateway.api.deps import StructuredServiceDep, UnstructuredServiceDep
from kv_gateway.common.params import resolve_list_limit
from kv_gateway.config import get_settings
from kv_gateway.domain.kv_store import KeyListing, StructuredValue

router = APIRouter(tags=["Key-Value"])

# Routes are matched in registration order: /list and /structured/... must
# precede the catch-all /{key} routes.


@router.get(
    "/list",
    response_model=KeyListing,
    response_model_exclude_none=True,
)
async def list_keys(
    service: UnstructuredServiceDep,
    limit: Optional[str] = Query(None, description="Maximum keys to return (default 100)"),
    prefix: Optional[str] = Query(None, description="Only keys starting with this prefix"),
    cursor: Optional[str] = Query(None, description="Continuation token from a previous listing"),
):
    """
    List Keys

    An absent or unparsable limit falls back to the default rather than failing.
    """
    settings = get_settings()
    resolved_limit = resolve_list_limit(
        limit,
        default=settings.LIST_DEFAULT_LIMIT,
        maximum=settings.LIST_MAX_LIMIT,
    )
    return await service.list_keys(resolved_limit, prefix=prefix or "", cursor=cursor)


@router.put("/structured/{key}", response_class=PlainTextResponse)
async def put_structured_value(
    key: str,
    request: Request,
    service: StructuredServiceDep,
    ttl: Optional[str] = Query(None, description="Expiration TTL in seconds"),
):
    """
    Store a Structured Value

    Body must be JSON of the form {"foo": <string>, "bar": <int>}.
    """
    body = await request.body()
    await service.put(key, body, ttl=ttl)
    return PlainTextResponse("inserted")


@router.get("/structured/{key}", response_model=StructuredValue)
async def get_structured_value(key: str, service: StructuredServiceDep):
    """Get a Structured Value"""
    return await service.get(key)


@router.put("/{key}", response_class=PlainTextResponse)
async def put_value(key: str, request: Request, service: UnstructuredServiceDep):
    """
    Store a Value

    The request content-type header is kept as the value's metadata.
    """
    body = await request.body()
    await service.put(key, body, content_type=request.headers.get("content-type"))
    return PlainTextResponse("inserted")


@router.get("/{key}")
async def get_value(key: str, service: UnstructuredServiceDep):
    """
    Get a Value

    Returns the stored bytes with the content type recorded on PUT.
    """
    value, metadata = await service.get(key)
    # Passed as a raw header so Starlette doesn't append a charset
    return Response(content=value, headers={"content-type": metadata.content_type})


@router.delete("/{key}", response_class=PlainTextResponse)
async def delete_value(key: str, service: UnstructuredServiceDep):
    """Delete a Value"""
    await service.delete(key)
    return PlainTextResponse("deleted")
