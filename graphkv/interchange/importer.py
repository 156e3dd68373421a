"""Apply interchange statements to a :class:`GraphStore`."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from ..errors import NotFoundError, StoreError, ValidationError
from ..graph.model import LABEL_KEY, LEGACY_TYPE_KEY, NODE_ID_KEY, TYPE_KEY, WEIGHT_KEY
from ..graph.store import GraphStore
from .lexer import split_statements
from .parser import EdgeCreate, MatchPattern, NodeCreate, Statement, parse_statement

LOGGER = logging.getLogger(__name__)


@dataclass
class ImportOptions:
    """Behaviour switches for :meth:`CypherImporter.import_text`.

    ``continue_on_error`` records a failing statement in
    :attr:`ImportResult.errors` and moves on instead of aborting.  Labels and
    relationship types equal to the defaults are not stored, mirroring what the
    exporter writes for nodes and edges that carry none.
    """

    continue_on_error: bool = False
    default_node_label: str = "Node"
    default_relationship_type: str = "CONNECTED_TO"


@dataclass(frozen=True)
class StatementError:
    index: int
    line: int
    message: str


@dataclass
class IdMapping:
    """Translate variables and exported ids to ids assigned during one import."""

    variables: dict[str, int] = field(default_factory=dict)
    original_ids: dict[int, int] = field(default_factory=dict)

    def record(self, variable: str, original_id: Optional[int], node_id: int) -> None:
        self.variables[variable] = node_id
        if original_id is not None:
            self.original_ids[original_id] = node_id

    def __len__(self) -> int:
        return len(self.variables) + len(self.original_ids)

    def resolve(self, pattern: MatchPattern, *, line: int) -> int:
        if NODE_ID_KEY in pattern.properties:
            original_id = _original_id(pattern.properties[NODE_ID_KEY], line=line)
            if original_id not in self.original_ids:
                raise NotFoundError(f"line {line}: no node imported with {NODE_ID_KEY} {original_id}")
            return self.original_ids[original_id]
        if pattern.properties:
            raise ValidationError(f"MATCH patterns may only constrain {NODE_ID_KEY}", line=line)
        if pattern.variable not in self.variables:
            raise NotFoundError(f"line {line}: no node imported as variable {pattern.variable!r}")
        return self.variables[pattern.variable]


@dataclass
class ImportResult:
    nodes_created: int = 0
    edges_created: int = 0
    statements_processed: int = 0
    errors: list[StatementError] = field(default_factory=list)
    id_mapping: IdMapping = field(default_factory=IdMapping)
    elapsed: float = 0.0

    @property
    def success(self) -> bool:
        return not self.errors

    def to_payload(self) -> dict:
        """Return a serialisable summary."""

        return {
            "success": self.success,
            "nodes_created": self.nodes_created,
            "edges_created": self.edges_created,
            "statements_processed": self.statements_processed,
            "errors": [error.__dict__ for error in self.errors],
            "elapsed": self.elapsed,
        }


def _original_id(value: object, *, line: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{NODE_ID_KEY} must be an integer, got {value!r}", line=line)
    return value


@dataclass
class CypherImporter:
    """Create nodes and edges from interchange text.

    Each call starts with an empty :class:`IdMapping`; edges can only refer to
    nodes created earlier in the same call.  Statements are applied one by one
    without any rollback, so an aborted import keeps what it already created.
    Store failures always propagate, even with ``continue_on_error``.
    """

    store: GraphStore
    options: ImportOptions = field(default_factory=ImportOptions)

    def import_text(self, text: str, options: Optional[ImportOptions] = None) -> ImportResult:
        options = options or self.options
        started = time.perf_counter()
        result = ImportResult()

        for source in split_statements(text):
            try:
                statement = parse_statement(source.text, line=source.line)
                self._apply(statement, result, options)
            except StoreError:
                raise
            except (ValidationError, NotFoundError) as exc:
                if not options.continue_on_error:
                    raise
                result.errors.append(StatementError(index=source.index, line=source.line, message=str(exc)))
                LOGGER.warning("Skipping statement %d at line %d: %s", source.index, source.line, exc)
                continue
            result.statements_processed += 1

        result.elapsed = time.perf_counter() - started
        LOGGER.info(
            "Imported %d nodes and %d edges from %d statements (%d skipped)",
            result.nodes_created,
            result.edges_created,
            result.statements_processed,
            len(result.errors),
        )
        return result

    def validate_import(self, result: ImportResult) -> dict:
        """Compare the graph totals with what ``result`` reports having created."""

        stats = self.store.stats()
        return {
            "nodes_in_graph": stats.nodes,
            "edges_in_graph": stats.edges,
            "nodes_created": result.nodes_created,
            "edges_created": result.edges_created,
            "node_mapping_count": len(result.id_mapping),
            "errors": [error.__dict__ for error in result.errors],
        }

    def _apply(self, statement: Statement, result: ImportResult, options: ImportOptions) -> None:
        if isinstance(statement, NodeCreate):
            self._create_node(statement, result, options)
        else:
            self._create_edge(statement, result, options)

    def _create_node(self, statement: NodeCreate, result: ImportResult, options: ImportOptions) -> None:
        properties = dict(statement.properties)
        original_id = None
        if NODE_ID_KEY in properties:
            original_id = _original_id(properties.pop(NODE_ID_KEY), line=statement.line)
        properties.pop(LABEL_KEY, None)
        if statement.label != options.default_node_label:
            properties[LABEL_KEY] = statement.label

        node_id = self.store.add_node(properties)
        result.id_mapping.record(statement.variable, original_id, node_id)
        result.nodes_created += 1

    def _create_edge(self, statement: EdgeCreate, result: ImportResult, options: ImportOptions) -> None:
        bound = {
            pattern.variable: result.id_mapping.resolve(pattern, line=statement.line)
            for pattern in statement.matches
        }
        for variable in (statement.source, statement.target):
            if variable not in bound:
                raise ValidationError(f"Variable {variable!r} is not bound by MATCH", line=statement.line)

        properties = dict(statement.properties)
        weight = properties.pop(WEIGHT_KEY, 1.0)
        if isinstance(weight, bool) or not isinstance(weight, (int, float)):
            raise ValidationError(f"weight must be a number, got {weight!r}", line=statement.line)
        try:
            weight = float(weight)
        except OverflowError as exc:
            raise ValidationError("weight is out of float range", line=statement.line) from exc
        properties.pop(LEGACY_TYPE_KEY, None)
        properties.pop(TYPE_KEY, None)
        if statement.rel_type != options.default_relationship_type:
            properties[TYPE_KEY] = statement.rel_type

        self.store.add_edge(bound[statement.source], bound[statement.target], weight, properties)
        result.edges_created += 1


__all__ = ["CypherImporter", "IdMapping", "ImportOptions", "ImportResult", "StatementError"]
