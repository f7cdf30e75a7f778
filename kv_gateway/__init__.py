"""
KV Gateway

HTTP gateway over a key-value store with content-type metadata and
schema-validated structured values.
"""

__version__ = "0.1.0"
