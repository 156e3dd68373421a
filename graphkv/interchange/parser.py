"""Recursive-descent parser for the two supported statement shapes.

Node statement::

    CREATE (n1:Person {name: "Alice", __id: 1})

Edge statement::

    MATCH (from {__id: 1}), (to {__id: 2})
    CREATE (from)-[r:KNOWS {weight: 1.0}]->(to)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from ..errors import ValidationError
from ..graph.model import Properties
from .codec import read_value
from .lexer import TokenStream, TokenType, tokenize


@dataclass(frozen=True)
class NodeCreate:
    variable: str
    label: str
    properties: Properties = field(default_factory=dict)
    line: int = 1


@dataclass(frozen=True)
class MatchPattern:
    """A ``(var {__id: N})`` pattern; an empty map matches by variable."""

    variable: str
    properties: Properties = field(default_factory=dict)


@dataclass(frozen=True)
class EdgeCreate:
    matches: tuple[MatchPattern, ...]
    source: str
    target: str
    rel_type: str
    rel_variable: Optional[str] = None
    properties: Properties = field(default_factory=dict)
    line: int = 1


Statement = Union[NodeCreate, EdgeCreate]


def parse_statement(text: str, *, line: int = 1) -> Statement:
    """Parse a single statement (without its terminating ``;``)."""

    stream = TokenStream(tokenize(text, line=line))
    if stream.at_keyword("CREATE"):
        statement: Statement = _parse_node_create(stream)
    elif stream.at_keyword("MATCH"):
        statement = _parse_edge_create(stream)
    else:
        raise ValidationError(f"Unsupported statement: {text[:50]!r}", line=line)
    stream.expect(TokenType.EOF)
    return statement


def _parse_node_create(stream: TokenStream) -> NodeCreate:
    line = stream.expect_keyword("CREATE").line
    stream.expect(TokenType.LPAREN, "'(' after CREATE")
    variable = _name(stream, "node variable")
    stream.expect(TokenType.COLON, "':' before node label")
    label = _name(stream, "node label")
    properties: Properties = {}
    if stream.peek().type is TokenType.LBRACE:
        properties = _property_map(stream)
    stream.expect(TokenType.RPAREN, "')' closing the node pattern")
    return NodeCreate(variable=variable, label=label, properties=properties, line=line)


def _parse_edge_create(stream: TokenStream) -> EdgeCreate:
    line = stream.expect_keyword("MATCH").line
    matches = [_match_pattern(stream)]
    while stream.accept(TokenType.COMMA):
        matches.append(_match_pattern(stream))

    stream.expect_keyword("CREATE")
    stream.expect(TokenType.LPAREN, "'(' before the source variable")
    source = _name(stream, "source variable")
    stream.expect(TokenType.RPAREN, "')' after the source variable")
    stream.expect(TokenType.DASH, "'-' before the relationship")
    stream.expect(TokenType.LBRACKET, "'[' opening the relationship")
    rel_variable = None
    if stream.peek().type is not TokenType.COLON:
        rel_variable = _name(stream, "relationship variable")
    stream.expect(TokenType.COLON, "':' before the relationship type")
    rel_type = _name(stream, "relationship type")
    properties: Properties = {}
    if stream.peek().type is TokenType.LBRACE:
        properties = _property_map(stream)
    stream.expect(TokenType.RBRACKET, "']' closing the relationship")
    stream.expect(TokenType.ARROW, "'->'")
    stream.expect(TokenType.LPAREN, "'(' before the target variable")
    target = _name(stream, "target variable")
    stream.expect(TokenType.RPAREN, "')' after the target variable")

    return EdgeCreate(
        matches=tuple(matches),
        source=source,
        target=target,
        rel_type=rel_type,
        rel_variable=rel_variable,
        properties=properties,
        line=line,
    )


def _match_pattern(stream: TokenStream) -> MatchPattern:
    stream.expect(TokenType.LPAREN, "'(' opening a MATCH pattern")
    variable = _name(stream, "MATCH variable")
    properties: Properties = {}
    if stream.peek().type is TokenType.LBRACE:
        properties = _property_map(stream, allow_doubled=True)
    stream.expect(TokenType.RPAREN, "')' closing a MATCH pattern")
    return MatchPattern(variable=variable, properties=properties)


def _property_map(stream: TokenStream, *, allow_doubled: bool = False) -> Properties:
    stream.expect(TokenType.LBRACE)
    # older exports wrote MATCH maps with doubled braces: {{__id: 1}}
    doubled = allow_doubled and stream.accept(TokenType.LBRACE) is not None
    properties: Properties = {}
    if stream.peek().type is not TokenType.RBRACE:
        while True:
            key = _name(stream, "property name")
            stream.expect(TokenType.COLON, f"':' after property {key!r}")
            properties[key] = read_value(stream)
            if not stream.accept(TokenType.COMMA):
                break
    stream.expect(TokenType.RBRACE, "',' or '}' in property map")
    if doubled:
        stream.expect(TokenType.RBRACE, "'}}' closing a doubled property map")
    return properties


def _name(stream: TokenStream, what: str) -> str:
    token = stream.peek()
    if token.type in (TokenType.IDENT, TokenType.QUOTED_IDENT):
        return stream.next().value
    raise ValidationError(f"Expected {what}, found {token.text or token.type.value!r}", line=token.line)


__all__ = ["EdgeCreate", "MatchPattern", "NodeCreate", "Statement", "parse_statement"]
