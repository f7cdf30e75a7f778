"""
Middleware Module Initialization
"""

from kv_gateway.middleware.request_logging import RequestLoggingMiddleware

__all__ = [
    "RequestLoggingMiddleware",
]
