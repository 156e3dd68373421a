"""Serialise a :class:`GraphStore` as Cypher interchange statements."""
from __future__ import annotations

import datetime as _dt
import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from ..graph.model import LABEL_KEY, LEGACY_TYPE_KEY, NODE_ID_KEY, TYPE_KEY, WEIGHT_KEY, Edge, Properties
from ..graph.store import GraphStore
from .codec import encode_properties, escape_identifier

LOGGER = logging.getLogger(__name__)

_RULE = "// " + "=" * 68


@dataclass
class ExportOptions:
    include_comments: bool = True
    include_header: bool = True
    default_node_label: str = "Node"
    default_relationship_type: str = "CONNECTED_TO"
    batch_size: int = 1000


@dataclass
class ExportResult:
    text: str
    nodes_exported: int
    edges_exported: int
    elapsed: float
    file_path: Optional[str] = None
    file_size: Optional[int] = None

    def to_payload(self) -> dict:
        """Return the statistics without the generated text."""

        return {
            "nodes_exported": self.nodes_exported,
            "edges_exported": self.edges_exported,
            "elapsed": self.elapsed,
            "file_path": self.file_path,
            "file_size": self.file_size,
        }


def format_node(node_id: int, properties: Properties, options: ExportOptions) -> str:
    """Return the ``CREATE`` statement for one node.

    ``__label`` becomes the node label and the store id travels as ``__id``.
    """

    properties = dict(properties)
    label = properties.pop(LABEL_KEY, None)
    if not isinstance(label, str) or not label:
        label = options.default_node_label
    properties[NODE_ID_KEY] = node_id

    statement = f"CREATE (n{node_id}:{escape_identifier(label)} {{{encode_properties(properties)}}});"
    if options.include_comments:
        statement += f" // node {node_id}"
    return statement


def format_edge(edge: Edge, options: ExportOptions) -> str:
    """Return the ``MATCH ... CREATE`` statement for one edge."""

    properties = dict(edge.properties)
    rel_type = properties.pop(LEGACY_TYPE_KEY, None)
    fallback = properties.pop(TYPE_KEY, None)
    if not isinstance(rel_type, str) or not rel_type:
        rel_type = fallback if isinstance(fallback, str) and fallback else options.default_relationship_type
    properties[WEIGHT_KEY] = edge.weight

    statement = (
        f"MATCH (from {{{NODE_ID_KEY}: {edge.source}}}), (to {{{NODE_ID_KEY}: {edge.target}}})\n"
        f"CREATE (from)-[r:{escape_identifier(rel_type)} {{{encode_properties(properties)}}}]->(to);"
    )
    if options.include_comments:
        statement += f" // edge {edge.source} -> {edge.target}"
    return statement


@dataclass
class CypherExporter:
    """Walk every live node and edge of ``store`` and emit statements.

    The walk holds no lock; writes made while it runs may or may not show up.
    """

    store: GraphStore
    options: ExportOptions = field(default_factory=ExportOptions)

    def export(self, options: Optional[ExportOptions] = None) -> ExportResult:
        options = options or self.options
        started = time.perf_counter()

        node_lines, nodes_exported = self._node_lines(options)
        edge_lines = self._edge_lines(options)
        edges_exported = len(edge_lines)

        parts: list[str] = []
        if options.include_header:
            parts.append(self._header(nodes_exported, edges_exported))
        if node_lines:
            parts.append("// ==================== Nodes ====================")
            parts.extend(node_lines)
        if edge_lines:
            parts.append("")
            parts.append("// ==================== Relationships ====================")
            parts.extend(edge_lines)
        elapsed = time.perf_counter() - started
        if options.include_header:
            parts.append(self._footer(nodes_exported, edges_exported, elapsed))

        LOGGER.info("Exported %d nodes and %d edges in %.4fs", nodes_exported, edges_exported, elapsed)
        return ExportResult(
            text="\n".join(parts) + "\n",
            nodes_exported=nodes_exported,
            edges_exported=edges_exported,
            elapsed=elapsed,
        )

    def _node_lines(self, options: ExportOptions) -> tuple[list[str], int]:
        lines: list[str] = []
        count = 0
        for node_id in self.store.iter_node_ids():
            properties = self.store.get_node(node_id)
            if properties is None:
                # deleted between the id scan and the read
                continue
            lines.append(format_node(node_id, properties, options))
            count += 1
            if options.include_comments and options.batch_size > 0 and count % options.batch_size == 0:
                lines.append(f"// {count} nodes processed")
        return lines, count

    def _edge_lines(self, options: ExportOptions) -> list[str]:
        lines: list[str] = []
        seen: set[tuple[int, int]] = set()
        for edge in self.store.iter_edges():
            pair = (edge.source, edge.target)
            if pair in seen:
                continue
            seen.add(pair)
            lines.append(format_edge(edge, options))
        return lines

    def _header(self, nodes: int, edges: int) -> str:
        timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="seconds")
        return "\n".join(
            [
                _RULE,
                "// graphkv Cypher export",
                f"// Generated: {timestamp}",
                f"// Nodes: {nodes}, Edges: {edges}",
                _RULE,
                "",
            ]
        )

    def _footer(self, nodes: int, edges: int, elapsed: float) -> str:
        return "\n".join(
            [
                "",
                _RULE,
                "// Export completed",
                f"// Exported Nodes: {nodes}",
                f"// Exported Edges: {edges}",
                f"// Export Time: {elapsed:.4f}s",
                _RULE,
            ]
        )


__all__ = ["CypherExporter", "ExportOptions", "ExportResult", "format_edge", "format_node"]
