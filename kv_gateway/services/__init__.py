"""
Service Layer Module Initialization
"""

from kv_gateway.services.structured_service import StructuredValueService
from kv_gateway.services.unstructured_service import UnstructuredValueService

__all__ = [
    "StructuredValueService",
    "UnstructuredValueService",
]
