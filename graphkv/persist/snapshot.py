"""Materialise the stored graph as a ``networkx`` graph."""
from __future__ import annotations

import networkx as nx

from ..graph.store import GraphStore


def take_snapshot(store: GraphStore) -> nx.DiGraph:
    """Return a detached :class:`networkx.DiGraph` copy of ``store``.

    Node attributes are the node property maps.  Edge attributes are the edge
    property maps plus ``weight``.  Later writes to the store do not affect the
    snapshot.
    """

    graph = nx.DiGraph()
    for node_id in store.iter_node_ids():
        properties = store.get_node(node_id)
        if properties is not None:
            graph.add_node(node_id, **properties)
    for edge in store.iter_edges():
        graph.add_edge(edge.source, edge.target, **{**edge.properties, "weight": edge.weight})
    return graph


__all__ = ["take_snapshot"]
