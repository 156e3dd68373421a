"""In-process key-value store with Redis ordering semantics."""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, Mapping, Sequence

from ..errors import StoreError
from .base import Mutation, UnitOfWork

LOGGER = logging.getLogger(__name__)


def _rank_slice(size: int, start: int, stop: int) -> slice | None:
    if start < 0:
        start = max(size + start, 0)
    if stop < 0:
        stop = size + stop
    if start >= size or start > stop:
        return None
    return slice(start, stop + 1)


@dataclass
class MemoryStore:
    """Dictionary backed :class:`~graphkv.kv.base.KeyValueStore`.

    Counters, maps and sorted sets live in separate dictionaries but share one
    key namespace, so :meth:`delete` removes a key whatever it holds.
    """

    counters: Dict[str, int] = field(default_factory=dict)
    hashes: Dict[str, Dict[str, str]] = field(default_factory=dict)
    sorted_sets: Dict[str, Dict[str, float]] = field(default_factory=dict)

    def incr(self, key: str) -> int:
        self.counters[key] = self.counters.get(key, 0) + 1
        return self.counters[key]

    def get_counter(self, key: str) -> int:
        return self.counters.get(key, 0)

    def hgetall(self, key: str) -> dict[str, str]:
        return dict(self.hashes.get(key, {}))

    def hset(self, key: str, mapping: Mapping[str, str]) -> None:
        if not mapping:
            return
        self.hashes.setdefault(key, {}).update({str(k): str(v) for k, v in mapping.items()})

    def exists(self, key: str) -> bool:
        return key in self.counters or key in self.hashes or key in self.sorted_sets

    def delete(self, *keys: str) -> None:
        for key in keys:
            self.counters.pop(key, None)
            self.hashes.pop(key, None)
            self.sorted_sets.pop(key, None)

    def zadd(self, key: str, member: str, score: float) -> None:
        self.sorted_sets.setdefault(key, {})[str(member)] = float(score)

    def zrem(self, key: str, member: str) -> None:
        members = self.sorted_sets.get(key)
        if members is None:
            return
        members.pop(str(member), None)
        if not members:
            del self.sorted_sets[key]

    def zrange(self, key: str, start: int, stop: int) -> list[tuple[str, float]]:
        members = self.sorted_sets.get(key)
        if not members:
            return []
        ordered = sorted(members.items(), key=lambda item: (item[1], item[0].encode("utf-8")))
        window = _rank_slice(len(ordered), start, stop)
        return ordered[window] if window is not None else []

    def zscore(self, key: str, member: str) -> float | None:
        return self.sorted_sets.get(key, {}).get(str(member))

    def zcard(self, key: str) -> int:
        return len(self.sorted_sets.get(key, {}))

    def scan(self, prefix: str) -> Iterator[str]:
        keys = set(self.counters) | set(self.hashes) | set(self.sorted_sets)
        for key in sorted(keys):
            if key.startswith(prefix):
                yield key

    def transaction(self) -> UnitOfWork:
        return UnitOfWork(self._execute)

    def _execute(self, mutations: Sequence[Mutation]) -> None:
        touched = {mutation.key for mutation in mutations}
        saved = {
            key: (
                self.counters.get(key),
                copy.deepcopy(self.hashes.get(key)),
                copy.deepcopy(self.sorted_sets.get(key)),
            )
            for key in touched
        }
        try:
            for mutation in mutations:
                getattr(self, mutation.op)(mutation.key, *mutation.args)
        except Exception as exc:
            self._restore(saved)
            raise StoreError(f"Transaction aborted: {exc}") from exc
        LOGGER.debug("Committed %d mutations across %d keys", len(mutations), len(touched))

    def _restore(self, saved) -> None:
        for key, (counter, mapping, members) in saved.items():
            self.delete(key)
            if counter is not None:
                self.counters[key] = counter
            if mapping is not None:
                self.hashes[key] = mapping
            if members is not None:
                self.sorted_sets[key] = members


__all__ = ["MemoryStore"]
