"""Tests for :mod:`graphkv.interchange.importer`."""

from __future__ import annotations

import networkx as nx
import pytest

from graphkv.errors import NotFoundError, StoreError, ValidationError
from graphkv.graph.store import GraphStore
from graphkv.interchange.exporter import CypherExporter
from graphkv.interchange.importer import CypherImporter, ImportOptions
from graphkv.kv.memory import MemoryStore
from graphkv.persist.snapshot import take_snapshot

TWO_PEOPLE = """
CREATE (n1:Person {name: "Eve", age: 28, __id: 1});
CREATE (n2:Person {name: "Frank", age: 32, __id: 2});
MATCH (from {{__id: 1}}), (to {{__id: 2}})
CREATE (from)-[r:KNOWS {since: "2023", weight: 1}]->(to);
"""


def build_importer(**options) -> CypherImporter:
    return CypherImporter(store=GraphStore(kv=MemoryStore()), options=ImportOptions(**options))


def test_import_creates_nodes_and_edges():
    importer = build_importer()

    result = importer.import_text(TWO_PEOPLE)

    assert result.success
    assert (result.nodes_created, result.edges_created, result.statements_processed) == (2, 1, 3)
    store = importer.store
    assert store.get_node(1) == {"name": "Eve", "age": 28, "__label": "Person"}
    edge = store.get_edge(1, 2)
    assert edge.weight == 1.0
    assert edge.properties == {"since": "2023", "__type": "KNOWS"}


def test_exported_ids_are_remapped_onto_fresh_ids():
    importer = build_importer()
    importer.store.add_node({"name": "existing"})
    importer.store.add_node({"name": "existing too"})

    result = importer.import_text(TWO_PEOPLE)

    assert result.id_mapping.original_ids == {1: 3, 2: 4}
    assert importer.store.edge_exists(3, 4)
    assert not importer.store.edge_exists(1, 2)


def test_mappings_do_not_leak_between_calls():
    importer = build_importer()
    importer.import_text('CREATE (n1:Person {__id: 1});')

    with pytest.raises(NotFoundError):
        importer.import_text("MATCH (a {__id: 1}), (b {__id: 1}) CREATE (a)-[:T]->(b);")


def test_unmapped_reference_aborts_but_keeps_earlier_writes():
    importer = build_importer()
    text = TWO_PEOPLE + "MATCH (a {__id: 1}), (b {__id: 9}) CREATE (a)-[:T]->(b);\nCREATE (n3:Person {__id: 3});"

    with pytest.raises(NotFoundError, match="line 6"):
        importer.import_text(text)

    assert importer.store.stats().nodes == 2
    assert importer.store.stats().edges == 1


def test_continue_on_error_collects_failures():
    importer = build_importer(continue_on_error=True)
    text = (
        'CREATE (n1:Person {__id: 1});\n'
        'CREATE (n2 {__id: 2});\n'
        'MATCH (a {__id: 1}), (b {__id: 7}) CREATE (a)-[:T]->(b);\n'
        'CREATE (n3:Person {__id: 3});\n'
    )

    result = importer.import_text(text)

    assert not result.success
    assert result.nodes_created == 2
    assert result.statements_processed == 2
    assert [(error.index, error.line) for error in result.errors] == [(1, 2), (2, 3)]
    assert result.to_payload()["errors"][0]["line"] == 2


def test_store_failures_propagate_even_when_continuing(monkeypatch):
    importer = build_importer(continue_on_error=True)

    def broken_add_node(properties=None):
        raise StoreError("connection lost")

    monkeypatch.setattr(importer.store, "add_node", broken_add_node)

    with pytest.raises(StoreError):
        importer.import_text(TWO_PEOPLE)


def test_default_label_and_type_are_not_stored():
    importer = build_importer()
    importer.import_text(
        "CREATE (a:Node {__id: 1});\n"
        "CREATE (b:Node {__id: 2});\n"
        "MATCH (x {__id: 1}), (y {__id: 2}) CREATE (x)-[:CONNECTED_TO {type: \"ignored\"}]->(y);"
    )

    assert importer.store.get_node(1) == {}
    assert importer.store.get_edge(1, 2).properties == {}


def test_edges_can_match_by_variable():
    importer = build_importer()
    importer.import_text("CREATE (a:Person);\nCREATE (b:Person);\nMATCH (a), (b) CREATE (a)-[:KNOWS]->(b);")

    assert importer.store.edge_exists(1, 2)


@pytest.mark.parametrize(
    "edge",
    [
        'MATCH (a {__id: 1}), (b {__id: 2}) CREATE (a)-[:T {weight: "heavy"}]->(b);',
        "MATCH (a {__id: 1}) CREATE (a)-[:T]->(b);",
        'MATCH (a {__id: 1}), (b {name: "x"}) CREATE (a)-[:T]->(b);',
        'MATCH (a {__id: "1"}), (b {__id: 2}) CREATE (a)-[:T]->(b);',
    ],
)
def test_invalid_edges_raise_validation_errors(edge):
    importer = build_importer()

    with pytest.raises(ValidationError):
        importer.import_text("CREATE (a:P {__id: 1});\nCREATE (b:P {__id: 2});\n" + edge)


def test_export_then_import_reproduces_the_graph():
    source = GraphStore(kv=MemoryStore())
    alice = source.add_node({"__label": "Person", "name": "Alice \"Al\"", "tags": ["a", 1.5]})
    bob = source.add_node({"name": "Bob", "note": None})
    lonely = source.add_node({})
    source.add_edge(alice, bob, 2.5, {"__type": "KNOWS", "since": 2020})
    source.add_edge(bob, alice, 1.0)
    source.add_edge(lonely, lonely, 0.5, {"kind": "loop"})
    source.del_node(source.add_node({"name": "gone"}))

    text = CypherExporter(store=source).export().text
    target = build_importer()
    target.store.add_node({"name": "pre-existing"})
    target.store.del_node(1)
    result = target.import_text(text)

    assert result.success
    before = take_snapshot(source)
    after = take_snapshot(target.store)
    assert nx.is_isomorphic(
        before,
        after,
        node_match=lambda left, right: left == right,
        edge_match=lambda left, right: left == right,
    )


def test_out_of_range_numbers_are_collected_as_statement_errors():
    importer = build_importer(continue_on_error=True)
    huge = "1" + "0" * 400
    endless = "1" + "0" * 5000
    text = (
        "CREATE (a:P {__id: 1});\n"
        "CREATE (b:P {__id: 2});\n"
        f"MATCH (x {{__id: 1}}), (y {{__id: 2}}) CREATE (x)-[:T {{weight: {huge}}}]->(y);\n"
        f"CREATE (c:P {{x: {endless}}});\n"
        "CREATE (d:P {ratio: 1e999});\n"
        "CREATE (e:P {__id: 5});\n"
    )

    result = importer.import_text(text)

    assert result.nodes_created == 3
    assert result.edges_created == 0
    assert [error.line for error in result.errors] == [3, 4, 5]


def test_oversized_weight_aborts_with_validation_error():
    importer = build_importer()
    huge = "1" + "0" * 400

    with pytest.raises(ValidationError, match="line 3"):
        importer.import_text(
            "CREATE (a:P {__id: 1});\nCREATE (b:P {__id: 2});\n"
            f"MATCH (x {{__id: 1}}), (y {{__id: 2}}) CREATE (x)-[:T {{weight: {huge}}}]->(y);"
        )


def test_reserved_fields_are_normalized_on_round_trip():
    source = GraphStore(kv=MemoryStore())
    plain = source.add_node({"__label": "Node", "name": "plain"})
    other = source.add_node({"name": "other"})
    source.add_edge(plain, other, 1.0, {"type": "KNOWS"})

    target = build_importer()
    target.import_text(CypherExporter(store=source).export().text)

    assert target.store.get_node(1) == {"name": "plain"}
    assert target.store.get_edge(1, 2).properties == {"__type": "KNOWS"}


def test_import_payload_summarises_the_run():
    importer = build_importer()

    payload = importer.import_text(TWO_PEOPLE).to_payload()

    assert payload["success"] is True
    assert (payload["nodes_created"], payload["edges_created"]) == (2, 1)
    assert payload["statements_processed"] == 3
    assert payload["errors"] == []
    assert payload["elapsed"] >= 0


def test_validate_import_compares_graph_with_result():
    importer = build_importer(continue_on_error=True)
    importer.store.add_node({"name": "already here"})

    result = importer.import_text(TWO_PEOPLE + "CREATE (bad {__id: 3});")
    report = importer.validate_import(result)

    assert report["nodes_in_graph"] == 3
    assert report["edges_in_graph"] == 1
    assert (report["nodes_created"], report["edges_created"]) == (2, 1)
    assert report["node_mapping_count"] == 4
    assert report["errors"][0]["line"] == 6
