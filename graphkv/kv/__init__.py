"""Key-value store adapters backing the graph layer."""

from .base import KeyValueStore, Mutation, UnitOfWork
from .memory import MemoryStore
from .redis_store import RedisStore

__all__ = ["KeyValueStore", "MemoryStore", "Mutation", "RedisStore", "UnitOfWork"]
