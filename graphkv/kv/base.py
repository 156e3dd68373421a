"""Key-value store contract and the unit-of-work batch."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterator, Literal, Mapping, Protocol, Sequence

from ..errors import StoreError


@dataclass(frozen=True)
class Mutation:
    """A single queued write replayed when a :class:`UnitOfWork` commits."""

    op: Literal["hset", "delete", "zadd", "zrem"]
    key: str
    args: tuple[Any, ...] = ()


class UnitOfWork:
    """Collect mutations and hand them to the store in one atomic batch.

    A unit commits exactly once.  Used as a context manager it commits when the
    block exits cleanly and discards the queued mutations when it raises.
    """

    def __init__(self, executor: Callable[[Sequence[Mutation]], None]) -> None:
        self._executor = executor
        self.mutations: list[Mutation] = []
        self.closed = False

    def __enter__(self) -> "UnitOfWork":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.discard()
        return False

    def hset(self, key: str, mapping: Mapping[str, str]) -> None:
        if mapping:
            self._queue(Mutation("hset", key, (dict(mapping),)))

    def delete(self, *keys: str) -> None:
        for key in keys:
            self._queue(Mutation("delete", key))

    def zadd(self, key: str, member: str, score: float) -> None:
        self._queue(Mutation("zadd", key, (str(member), float(score))))

    def zrem(self, key: str, member: str) -> None:
        self._queue(Mutation("zrem", key, (str(member),)))

    def commit(self) -> None:
        """Execute every queued mutation all-or-nothing."""

        if self.closed:
            raise StoreError("Unit of work has already been committed or discarded")
        self.closed = True
        if self.mutations:
            self._executor(tuple(self.mutations))

    def discard(self) -> None:
        self.closed = True
        self.mutations.clear()

    def _queue(self, mutation: Mutation) -> None:
        if self.closed:
            raise StoreError("Cannot queue a mutation on a closed unit of work")
        self.mutations.append(mutation)


class KeyValueStore(Protocol):
    """Primitives the graph layer needs from its backing store.

    Sorted sets order members by ascending score and then by member bytes.
    Rank ranges are inclusive and accept negative indices counted from the end.
    """

    def incr(self, key: str) -> int:
        """Atomically increment the counter at ``key`` and return its new value."""

    def get_counter(self, key: str) -> int:
        """Return the current counter value, ``0`` when it was never incremented."""

    def hgetall(self, key: str) -> dict[str, str]:
        """Return every field of the map at ``key`` (empty when absent)."""

    def hset(self, key: str, mapping: Mapping[str, str]) -> None:
        """Set the given fields of the map at ``key``."""

    def exists(self, key: str) -> bool:
        """Return whether ``key`` holds any value."""

    def delete(self, *keys: str) -> None:
        """Remove ``keys`` regardless of their type."""

    def zadd(self, key: str, member: str, score: float) -> None:
        """Insert or re-score ``member`` in the sorted set at ``key``."""

    def zrem(self, key: str, member: str) -> None:
        """Remove ``member`` from the sorted set at ``key``."""

    def zrange(self, key: str, start: int, stop: int) -> list[tuple[str, float]]:
        """Return ``(member, score)`` pairs ranked ``start`` through ``stop``."""

    def zscore(self, key: str, member: str) -> float | None:
        """Return the score of ``member`` or ``None`` when it is absent."""

    def zcard(self, key: str) -> int:
        """Return the number of members in the sorted set at ``key``."""

    def scan(self, prefix: str) -> Iterator[str]:
        """Iterate over every key starting with ``prefix``."""

    def transaction(self) -> UnitOfWork:
        """Return a fresh unit of work bound to this store."""


__all__ = ["KeyValueStore", "Mutation", "UnitOfWork"]
