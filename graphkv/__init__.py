"""graphkv package initialization.

A directed, weighted, property-labelled graph stored in a key-value store,
with traversal and a Cypher-subset interchange format.
"""

from .api import GraphKV
from .errors import GraphKVError, NotFoundError, StoreError, ValidationError

__all__ = ["GraphKV", "GraphKVError", "NotFoundError", "StoreError", "ValidationError"]
