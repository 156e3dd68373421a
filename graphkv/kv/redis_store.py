"""Redis backed key-value store built on ``redis-py``."""
from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator, Mapping, Sequence

import redis

from ..errors import StoreError
from .base import Mutation, UnitOfWork

if TYPE_CHECKING:  # pragma: no cover - import for type checking only
    from ..config import GraphSettings

LOGGER = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


def _text(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)


@contextmanager
def _guard(operation: str) -> Iterator[None]:
    try:
        yield
    except redis.RedisError as exc:
        raise StoreError(f"Redis {operation} failed: {exc}") from exc


@dataclass
class RedisStore:
    """Adapter translating the store contract into Redis commands.

    The client is created and closed by the caller; this class never connects
    or selects a database on its own.
    """

    client: redis.Redis

    @classmethod
    def from_url(cls, url: str, *, db: int = 0) -> "RedisStore":
        return cls(client=redis.Redis.from_url(url, db=db, decode_responses=True))

    @classmethod
    def from_settings(cls, settings: "GraphSettings") -> "RedisStore":
        return cls.from_url(settings.redis_url, db=settings.database)

    def incr(self, key: str) -> int:
        with _guard("INCR"):
            return int(self.client.incr(key))

    def get_counter(self, key: str) -> int:
        with _guard("GET"):
            value = self.client.get(key)
        return int(value) if value is not None else 0

    def hgetall(self, key: str) -> dict[str, str]:
        with _guard("HGETALL"):
            raw = self.client.hgetall(key)
        return {_text(field): _text(value) for field, value in raw.items()}

    def hset(self, key: str, mapping: Mapping[str, str]) -> None:
        if not mapping:
            return
        with _guard("HSET"):
            self.client.hset(key, mapping=dict(mapping))

    def exists(self, key: str) -> bool:
        with _guard("EXISTS"):
            return bool(self.client.exists(key))

    def delete(self, *keys: str) -> None:
        if not keys:
            return
        with _guard("DEL"):
            self.client.delete(*keys)

    def zadd(self, key: str, member: str, score: float) -> None:
        with _guard("ZADD"):
            self.client.zadd(key, {str(member): float(score)})

    def zrem(self, key: str, member: str) -> None:
        with _guard("ZREM"):
            self.client.zrem(key, str(member))

    def zrange(self, key: str, start: int, stop: int) -> list[tuple[str, float]]:
        with _guard("ZRANGE"):
            raw = self.client.zrange(key, start, stop, withscores=True)
        return [(_text(member), float(score)) for member, score in raw]

    def zscore(self, key: str, member: str) -> float | None:
        with _guard("ZSCORE"):
            score = self.client.zscore(key, str(member))
        return float(score) if score is not None else None

    def zcard(self, key: str) -> int:
        with _guard("ZCARD"):
            return int(self.client.zcard(key))

    def scan(self, prefix: str) -> Iterator[str]:
        pattern = _GLOB_SPECIAL.sub(r"\\\1", prefix) + "*"
        with _guard("SCAN"):
            keys = [_text(key) for key in self.client.scan_iter(match=pattern)]
        yield from keys

    def transaction(self) -> UnitOfWork:
        return UnitOfWork(self._execute)

    def _execute(self, mutations: Sequence[Mutation]) -> None:
        with _guard("MULTI/EXEC"):
            pipe = self.client.pipeline(transaction=True)
            for mutation in mutations:
                if mutation.op == "hset":
                    pipe.hset(mutation.key, mapping=mutation.args[0])
                elif mutation.op == "delete":
                    pipe.delete(mutation.key)
                elif mutation.op == "zadd":
                    member, score = mutation.args
                    pipe.zadd(mutation.key, {member: score})
                elif mutation.op == "zrem":
                    pipe.zrem(mutation.key, mutation.args[0])
                else:  # pragma: no cover - Mutation.op is a closed set
                    raise StoreError(f"Unsupported mutation: {mutation.op}")
            pipe.execute()
        LOGGER.debug("Executed MULTI/EXEC batch with %d commands", len(mutations))


__all__ = ["RedisStore"]
