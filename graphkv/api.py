"""Public API surface for graphkv."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

import networkx as nx

from graphkv.config import GraphSettings
from graphkv.graph.keys import KeySpace
from graphkv.graph.model import Direction, Edge, GraphStats, Path, Properties
from graphkv.graph.store import GraphStore
from graphkv.graph.traversal import Traversal
from graphkv.interchange.exporter import CypherExporter, ExportOptions, ExportResult
from graphkv.interchange.importer import CypherImporter, ImportOptions, ImportResult
from graphkv.kv.base import KeyValueStore
from graphkv.kv.memory import MemoryStore
from graphkv.kv.redis_store import RedisStore
from graphkv.persist.files import PathLike, export_to_file, import_from_file
from graphkv.persist.snapshot import take_snapshot


@dataclass
class GraphKV:
    """Container wiring together the store, traversal and interchange layers."""

    graph_store: GraphStore
    traversal: Traversal | None = None
    exporter: CypherExporter | None = None
    importer: CypherImporter | None = None
    settings: GraphSettings = field(default_factory=GraphSettings)

    def __post_init__(self) -> None:
        if self.traversal is None:
            self.traversal = Traversal(
                store=self.graph_store,
                branch_limit=self.settings.page_size,
                max_depth=self.settings.max_depth,
            )
        if self.exporter is None:
            self.exporter = CypherExporter(
                store=self.graph_store,
                options=ExportOptions(
                    default_node_label=self.settings.default_node_label,
                    default_relationship_type=self.settings.default_relationship_type,
                ),
            )
        if self.importer is None:
            self.importer = CypherImporter(
                store=self.graph_store,
                options=ImportOptions(
                    default_node_label=self.settings.default_node_label,
                    default_relationship_type=self.settings.default_relationship_type,
                ),
            )

    @classmethod
    def from_kv(cls, kv: KeyValueStore, settings: Optional[GraphSettings] = None) -> "GraphKV":
        settings = settings or GraphSettings()
        store = GraphStore(kv=kv, keys=KeySpace(prefix=settings.key_prefix), page_size=settings.page_size)
        return cls(graph_store=store, settings=settings)

    @classmethod
    def from_settings(cls, settings: Optional[GraphSettings] = None) -> "GraphKV":
        """Wire a Redis backed instance from ``GRAPHKV_*`` configuration."""

        settings = settings or GraphSettings.from_env()
        return cls.from_kv(RedisStore.from_settings(settings), settings)

    @classmethod
    def in_memory(cls, settings: Optional[GraphSettings] = None) -> "GraphKV":
        return cls.from_kv(MemoryStore(), settings)

    # ------------------------------------------------------------------
    # Nodes and edges
    # ------------------------------------------------------------------

    def add_node(self, properties: Optional[Mapping[str, object]] = None) -> int:
        return self.graph_store.add_node(properties)

    def get_node(self, node_id: int) -> Optional[Properties]:
        return self.graph_store.get_node(node_id)

    def update_node(self, node_id: int, diff: Optional[Mapping[str, object]]) -> None:
        self.graph_store.update_node(node_id, diff)

    def del_node(self, node_id: int) -> None:
        self.graph_store.del_node(node_id)

    def add_edge(
        self,
        source: int,
        target: int,
        weight: float = 1.0,
        properties: Optional[Mapping[str, object]] = None,
    ) -> None:
        self.graph_store.add_edge(source, target, weight, properties)

    def get_edge(self, source: int, target: int) -> Optional[Edge]:
        return self.graph_store.get_edge(source, target)

    def del_edge(self, source: int, target: int) -> None:
        self.graph_store.del_edge(source, target)

    def neighbors(
        self,
        node_id: int,
        direction: str | Direction = Direction.OUT,
        page: int = 1,
        page_size: Optional[int] = None,
    ) -> dict[int, float]:
        return self.graph_store.neighbors(node_id, direction, page, page_size)

    def node_exists(self, node_id: int) -> bool:
        return self.graph_store.node_exists(node_id)

    def edge_exists(self, source: int, target: int) -> bool:
        return self.graph_store.edge_exists(source, target)

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def shortest_path(self, source: int, target: int, max_depth: Optional[int] = None) -> Optional[Path]:
        return self.traversal.shortest_path(source, target, max_depth)

    def dfs(self, start: int, max_depth: Optional[int] = None) -> list[int]:
        return self.traversal.dfs(start, max_depth)

    # ------------------------------------------------------------------
    # Interchange
    # ------------------------------------------------------------------

    def generate_cypher_script(self, options: Optional[ExportOptions] = None) -> str:
        return self.exporter.export(options).text

    def export_to_cypher(self, path: PathLike, options: Optional[ExportOptions] = None) -> ExportResult:
        return export_to_file(self.exporter, path, options)

    def import_from_cypher(self, path: PathLike, options: Optional[ImportOptions] = None) -> ImportResult:
        return import_from_file(self.importer, path, options)

    def import_from_cypher_string(self, text: str, options: Optional[ImportOptions] = None) -> ImportResult:
        return self.importer.import_text(text, options)

    def validate_import(self, result: ImportResult) -> dict:
        return self.importer.validate_import(result)

    # ------------------------------------------------------------------
    # Whole graph
    # ------------------------------------------------------------------

    def stats(self) -> GraphStats:
        return self.graph_store.stats()

    def snapshot(self) -> nx.DiGraph:
        return take_snapshot(self.graph_store)

    def clear(self) -> None:
        self.graph_store.clear()


__all__ = ["GraphKV"]
