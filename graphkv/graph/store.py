"""Graph storage on top of a key-value store with map and sorted-set primitives."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Iterator, Mapping, Optional

from ..errors import ValidationError
from ..kv.base import KeyValueStore
from .ids import check_node_id, parse_member
from .keys import KeySpace
from .model import (
    Direction,
    Edge,
    GraphStats,
    Properties,
    decode_field,
    encode_field,
    normalize_properties,
)

LOGGER = logging.getLogger(__name__)

# Written with every node so that an explicitly created empty map still exists.
NODE_MARKER_FIELD = "__node"


@dataclass
class GraphStore:
    """Directed, weighted, property-labelled graph persisted in ``kv``.

    Node ids come from the store's atomic counter and are never reused.  Each
    edge lives in the out-adjacency of its source and the in-adjacency of its
    target, scored by weight, plus an optional property map of its own.  The
    adjacency sorted sets are the only index.
    """

    kv: KeyValueStore
    keys: KeySpace = field(default_factory=KeySpace)
    page_size: int = 100

    def __post_init__(self) -> None:
        if self.page_size < 1:
            raise ValidationError(f"page_size must be positive, got {self.page_size}")

    # -- nodes ------------------------------------------------------------

    def add_node(self, properties: Optional[Mapping[str, object]] = None) -> int:
        """Persist a new node and return its freshly assigned id."""

        fields = self._encode_properties(properties)
        fields[NODE_MARKER_FIELD] = "1"
        node_id = self.kv.incr(self.keys.counter())
        self.kv.hset(self.keys.node(node_id), fields)
        LOGGER.debug("Added node %d with %d properties", node_id, len(fields) - 1)
        return node_id

    def get_node(self, node_id: int) -> Optional[Properties]:
        """Return the property map of ``node_id`` or ``None`` if it does not exist."""

        raw = self.kv.hgetall(self.keys.node(check_node_id(node_id)))
        if not raw:
            return None
        return self._decode_properties(raw)

    def update_node(self, node_id: int, diff: Optional[Mapping[str, object]]) -> None:
        """Merge ``diff`` into the node's properties, last write wins per key.

        The node is not required to exist; writing to a missing id leaves a
        property record behind that :meth:`get_node` will report.
        """

        check_node_id(node_id)
        if not diff:
            return
        self.kv.hset(self.keys.node(node_id), self._encode_properties(diff))

    def del_node(self, node_id: int) -> None:
        """Delete ``node_id`` together with every incident edge.

        The adjacency lists are read before the batch is opened, so a writer
        racing this call can leave a dangling entry behind.
        """

        check_node_id(node_id)
        out_key = self.keys.adjacency(node_id, Direction.OUT)
        in_key = self.keys.adjacency(node_id, Direction.IN)
        outgoing = self.kv.zrange(out_key, 0, -1)
        incoming = self.kv.zrange(in_key, 0, -1)

        with self.kv.transaction() as tx:
            for member, _ in outgoing:
                target = parse_member(member)
                tx.delete(self.keys.edge_properties(node_id, target))
                tx.zrem(self.keys.adjacency(target, Direction.IN), str(node_id))
            for member, _ in incoming:
                source = parse_member(member)
                tx.delete(self.keys.edge_properties(source, node_id))
                tx.zrem(self.keys.adjacency(source, Direction.OUT), str(node_id))
            tx.delete(out_key, in_key)
        self.kv.delete(self.keys.node(node_id))
        LOGGER.debug(
            "Deleted node %d with %d outgoing and %d incoming edges",
            node_id,
            len(outgoing),
            len(incoming),
        )

    def node_exists(self, node_id: int) -> bool:
        return self.kv.exists(self.keys.node(check_node_id(node_id)))

    def iter_node_ids(self) -> Iterator[int]:
        """Yield the ids of live nodes in ascending order."""

        for node_id in range(1, self.kv.get_counter(self.keys.counter()) + 1):
            if self.kv.exists(self.keys.node(node_id)):
                yield node_id

    # -- edges ------------------------------------------------------------

    def add_edge(
        self,
        source: int,
        target: int,
        weight: float = 1.0,
        properties: Optional[Mapping[str, object]] = None,
    ) -> None:
        """Insert or update the edge ``source -> target``.

        A non-empty ``properties`` replaces the edge's property map; an empty
        one leaves any existing map untouched.
        """

        check_node_id(source)
        check_node_id(target)
        weight = self._check_weight(weight)
        fields = self._encode_properties(properties)
        props_key = self.keys.edge_properties(source, target)

        with self.kv.transaction() as tx:
            tx.zadd(self.keys.adjacency(source, Direction.OUT), str(target), weight)
            tx.zadd(self.keys.adjacency(target, Direction.IN), str(source), weight)
            if fields:
                tx.delete(props_key)
                tx.hset(props_key, fields)
        LOGGER.debug("Added edge %d -> %d (weight=%s)", source, target, weight)

    def del_edge(self, source: int, target: int) -> None:
        check_node_id(source)
        check_node_id(target)
        with self.kv.transaction() as tx:
            tx.zrem(self.keys.adjacency(source, Direction.OUT), str(target))
            tx.zrem(self.keys.adjacency(target, Direction.IN), str(source))
            tx.delete(self.keys.edge_properties(source, target))
        LOGGER.debug("Deleted edge %d -> %d", source, target)

    def edge_exists(self, source: int, target: int) -> bool:
        key = self.keys.adjacency(check_node_id(source), Direction.OUT)
        return self.kv.zscore(key, str(check_node_id(target))) is not None

    def get_edge(self, source: int, target: int) -> Optional[Edge]:
        """Return the edge ``source -> target`` or ``None`` when absent."""

        key = self.keys.adjacency(check_node_id(source), Direction.OUT)
        weight = self.kv.zscore(key, str(check_node_id(target)))
        if weight is None:
            return None
        raw = self.kv.hgetall(self.keys.edge_properties(source, target))
        return Edge(source=source, target=target, weight=weight, properties=self._decode_properties(raw))

    def neighbors(
        self,
        node_id: int,
        direction: str | Direction = Direction.OUT,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> dict[int, float]:
        """Return one page of the adjacency of ``node_id`` as ``{neighbor: weight}``.

        Pages are 1-indexed rank windows over the weight-ordered set.  Nothing
        pins the set between two calls, so concurrent writes may shift pages.
        """

        check_node_id(node_id)
        direction = Direction.coerce(direction)
        size = self.page_size if page_size is None else page_size
        if page < 1:
            raise ValidationError(f"page must be at least 1, got {page}")
        if size < 1:
            raise ValidationError(f"page_size must be positive, got {size}")
        start = (page - 1) * size
        members = self.kv.zrange(self.keys.adjacency(node_id, direction), start, start + size - 1)
        return {parse_member(member): score for member, score in members}

    def adjacency(self, node_id: int, direction: str | Direction = Direction.OUT) -> dict[int, float]:
        """Return the complete adjacency of ``node_id`` ordered by weight."""

        key = self.keys.adjacency(check_node_id(node_id), Direction.coerce(direction))
        return {parse_member(member): score for member, score in self.kv.zrange(key, 0, -1)}

    def iter_edges(self) -> Iterator[Edge]:
        """Yield every edge leaving a live node, sources in ascending id order."""

        for source in self.iter_node_ids():
            for target, weight in self.adjacency(source, Direction.OUT).items():
                raw = self.kv.hgetall(self.keys.edge_properties(source, target))
                yield Edge(source=source, target=target, weight=weight, properties=self._decode_properties(raw))

    # -- whole graph ------------------------------------------------------

    def stats(self) -> GraphStats:
        nodes = 0
        edges = 0
        for node_id in self.iter_node_ids():
            nodes += 1
            edges += self.kv.zcard(self.keys.adjacency(node_id, Direction.OUT))
        return GraphStats(nodes=nodes, edges=edges)

    def clear(self) -> None:
        """Remove every key under the configured prefix, the id counter included."""

        keys = list(self.kv.scan(self.keys.prefix))
        if keys:
            self.kv.delete(*keys)
        LOGGER.info("Cleared %d keys under prefix %r", len(keys), self.keys.prefix)

    # -- internal helpers -------------------------------------------------

    def _encode_properties(self, properties: Optional[Mapping[str, object]]) -> dict[str, str]:
        normalized = normalize_properties(properties)
        if NODE_MARKER_FIELD in normalized:
            raise ValidationError(f"{NODE_MARKER_FIELD!r} is a reserved property name")
        return {key: encode_field(value) for key, value in normalized.items()}

    def _decode_properties(self, raw: Mapping[str, str]) -> Properties:
        return {key: decode_field(value) for key, value in raw.items() if key != NODE_MARKER_FIELD}

    def _check_weight(self, weight: object) -> float:
        if isinstance(weight, bool) or not isinstance(weight, (int, float)):
            raise ValidationError(f"Edge weight must be a number, got {weight!r}")
        try:
            weight = float(weight)
        except OverflowError as exc:
            raise ValidationError("Edge weight is out of float range") from exc
        if not math.isfinite(weight):
            raise ValidationError("Edge weight must be finite")
        return weight


__all__ = ["GraphStore", "NODE_MARKER_FIELD"]
