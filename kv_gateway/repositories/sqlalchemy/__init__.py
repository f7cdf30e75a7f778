"""
SQLAlchemy Repository Implementation Module Initialization
"""

from kv_gateway.repositories.sqlalchemy.kv_store_repo import SQLAlchemyKVStoreRepository

__all__ = [
    "SQLAlchemyKVStoreRepository",
]
