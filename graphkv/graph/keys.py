"""Key layout of the graph inside the key-value store."""
from __future__ import annotations

from dataclasses import dataclass

from .model import Direction


@dataclass(frozen=True)
class KeySpace:
    """Build store keys, optionally namespaced by ``prefix``."""

    prefix: str = ""

    def counter(self) -> str:
        return f"{self.prefix}global:node_id"

    def node(self, node_id: int) -> str:
        return f"{self.prefix}node:{node_id}"

    def adjacency(self, node_id: int, direction: Direction) -> str:
        return f"{self.prefix}edge:{node_id}:{direction.value}"

    def edge_properties(self, source: int, target: int) -> str:
        return f"{self.prefix}edge_prop:{source}:{target}"


__all__ = ["KeySpace"]
