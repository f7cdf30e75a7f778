"""
API Router Module Initialization
"""

from kv_gateway.api.deps import get_kv_repo
from kv_gateway.api.kv import router as kv_router

__all__ = [
    "get_kv_repo",
    "kv_router",
]
