"""Tests for :mod:`graphkv.persist`."""

from __future__ import annotations

import pytest

from graphkv.errors import NotFoundError, ValidationError
from graphkv.graph.store import GraphStore
from graphkv.interchange.exporter import CypherExporter
from graphkv.interchange.importer import CypherImporter
from graphkv.kv.memory import MemoryStore
from graphkv.persist.files import export_to_file, import_from_file
from graphkv.persist.snapshot import take_snapshot


def build_store() -> GraphStore:
    store = GraphStore(kv=MemoryStore())
    a = store.add_node({"__label": "City", "name": "Lyon"})
    b = store.add_node({"__label": "City", "name": "Nice"})
    store.add_edge(a, b, 4.5, {"__type": "ROAD"})
    return store


def test_export_to_file_writes_utf8_text(tmp_path):
    path = tmp_path / "graph.cypher"

    result = export_to_file(CypherExporter(store=build_store()), path)

    assert path.read_text(encoding="utf-8") == result.text
    assert result.file_path == str(path)
    assert result.file_size == path.stat().st_size


def test_file_round_trip(tmp_path):
    path = tmp_path / "graph.cypher"
    export_to_file(CypherExporter(store=build_store()), path)
    target = GraphStore(kv=MemoryStore())

    result = import_from_file(CypherImporter(store=target), str(path))

    assert (result.nodes_created, result.edges_created) == (2, 1)
    assert target.get_edge(1, 2).properties == {"__type": "ROAD"}


def test_wrong_extension_is_rejected(tmp_path):
    path = tmp_path / "graph.txt"
    with pytest.raises(ValidationError, match=".cypher"):
        export_to_file(CypherExporter(store=build_store()), path)
    assert not path.exists()

    path.write_text("CREATE (n:A);")
    with pytest.raises(ValidationError):
        import_from_file(CypherImporter(store=GraphStore(kv=MemoryStore())), path)


def test_missing_import_source(tmp_path):
    with pytest.raises(NotFoundError):
        import_from_file(CypherImporter(store=GraphStore(kv=MemoryStore())), tmp_path / "missing.cypher")


def test_snapshot_is_detached_copy():
    store = build_store()

    graph = take_snapshot(store)
    store.add_node({"name": "later"})

    assert graph.number_of_nodes() == 2
    assert graph.nodes[1] == {"__label": "City", "name": "Lyon"}
    assert graph.edges[1, 2] == {"__type": "ROAD", "weight": 4.5}
