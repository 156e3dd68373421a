"""Cypher-subset interchange: value codec, parser, exporter and importer."""

from .codec import decode_value, encode_value, escape_identifier
from .exporter import CypherExporter, ExportOptions, ExportResult
from .importer import CypherImporter, IdMapping, ImportOptions, ImportResult, StatementError
from .parser import EdgeCreate, MatchPattern, NodeCreate, parse_statement

__all__ = [
    "CypherExporter",
    "CypherImporter",
    "EdgeCreate",
    "ExportOptions",
    "ExportResult",
    "IdMapping",
    "ImportOptions",
    "ImportResult",
    "MatchPattern",
    "NodeCreate",
    "StatementError",
    "decode_value",
    "encode_value",
    "escape_identifier",
    "parse_statement",
]
