"""
API Dependency Injection Module

Provides the dependencies required by the FastAPI routes.
"""

from typing import Annotated, AsyncGenerator

from fastapi import Depends

from kv_gateway.config import get_settings
from kv_gateway.db.redis import get_redis
from kv_gateway.db.session import get_db
from kv_gateway.repositories.kv_store_repo import KVStoreRepository
from kv_gateway.repositories.memory import MemoryKVStoreRepository
from kv_gateway.repositories.redis import RedisKVStoreRepository
from kv_gateway.repositories.sqlalchemy import SQLAlchemyKVStoreRepository
from kv_gateway.services import StructuredValueService, UnstructuredValueService


# ============ Global Singletons ============

# The in-memory store must outlive individual requests
_memory_repo = MemoryKVStoreRepository()


def get_memory_repo() -> MemoryKVStoreRepository:
    """Get the process-wide in-memory store"""
    return _memory_repo


# ============ Repository Dependencies ============

async def get_kv_repo() -> AsyncGenerator[KVStoreRepository, None]:
    """
    Get the KV store repository selected by KV_STORE_TYPE

    Yields:
        KVStoreRepository: Repository bound to the configured backend
    """
    settings = get_settings()
    if settings.KV_STORE_TYPE == "redis":
        yield RedisKVStoreRepository(get_redis(), key_prefix=settings.REDIS_KEY_PREFIX)
    elif settings.KV_STORE_TYPE == "database":
        async for session in get_db():
            yield SQLAlchemyKVStoreRepository(session)
    else:
        yield _memory_repo


KVRepo = Annotated[KVStoreRepository, Depends(get_kv_repo)]


# ============ Service Dependencies ============

def get_unstructured_service(repo: KVRepo) -> UnstructuredValueService:
    """Get the unstructured value service"""
    settings = get_settings()
    return UnstructuredValueService(repo, default_content_type=settings.DEFAULT_CONTENT_TYPE)


def get_structured_service(repo: KVRepo) -> StructuredValueService:
    """Get the structured value service"""
    return StructuredValueService(repo)


# Dependency type aliases
UnstructuredServiceDep = Annotated[UnstructuredValueService, Depends(get_unstructured_service)]
StructuredServiceDep = Annotated[StructuredValueService, Depends(get_structured_service)]
