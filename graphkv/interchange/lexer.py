"""Statement splitting and tokenization for the Cypher interchange subset."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from ..errors import ValidationError


class TokenType(str, Enum):
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    COLON = ":"
    COMMA = ","
    DASH = "-"
    ARROW = "->"
    IDENT = "identifier"
    QUOTED_IDENT = "quoted identifier"
    STRING = "string"
    NUMBER = "number"
    EOF = "end of statement"


@dataclass(frozen=True)
class Token:
    """A lexeme.  ``value`` holds the identifier name or raw string body."""

    type: TokenType
    text: str
    value: str
    line: int


@dataclass(frozen=True)
class StatementSource:
    """One ``;``-terminated statement with comments removed."""

    index: int
    line: int
    text: str


_PUNCTUATION = {
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
    "{": TokenType.LBRACE,
    "}": TokenType.RBRACE,
    "[": TokenType.LBRACKET,
    "]": TokenType.RBRACKET,
    ":": TokenType.COLON,
    ",": TokenType.COMMA,
    "-": TokenType.DASH,
}

_TOKEN_RE = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<arrow>->)
  | (?P<number>\d+(?:\.\d+)?(?:[eE][+-]?\d+)?)
  | (?P<ident>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<quoted>`(?:[^`]|``)*`)
  | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
  | (?P<punct>[(){}\[\]:,\-])
    """,
    re.VERBOSE | re.DOTALL,
)


def split_statements(text: str) -> list[StatementSource]:
    """Strip comments and split ``text`` on top-level semicolons.

    ``//`` line comments and ``/* */`` block comments are removed unless they
    sit inside a string literal or a back-tick identifier.  Line breaks are kept,
    so a ``MATCH`` clause and the ``CREATE`` clause on the following line stay in
    the same statement.
    """

    statements: list[StatementSource] = []
    buffer: list[str] = []
    start_line: int | None = None
    line = 1
    quote: str | None = None
    i = 0
    length = len(text)

    def flush() -> None:
        nonlocal start_line
        body = "".join(buffer).strip()
        if body:
            statements.append(StatementSource(index=len(statements), line=start_line or line, text=body))
        buffer.clear()
        start_line = None

    while i < length:
        char = text[i]
        if quote is not None:
            buffer.append(char)
            if char == "\\" and quote != "`" and i + 1 < length:
                buffer.append(text[i + 1])
                line += text.count("\n", i + 1, i + 2)
                i += 2
                continue
            if char == quote:
                quote = None
            if char == "\n":
                line += 1
            i += 1
            continue

        if text.startswith("//", i):
            end = text.find("\n", i)
            i = length if end == -1 else end
            continue
        if text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise ValidationError("Unterminated block comment", line=line)
            newlines = text.count("\n", i, end)
            line += newlines
            buffer.append("\n" * newlines or " ")
            i = end + 2
            continue
        if char == ";":
            flush()
            i += 1
            continue

        if char in "\"'`":
            quote = char
        if start_line is None and not char.isspace():
            start_line = line
        buffer.append(char)
        if char == "\n":
            line += 1
        i += 1

    flush()
    return statements


def tokenize(text: str, *, line: int = 1) -> list[Token]:
    """Turn one statement into tokens, ending with a single ``EOF`` token."""

    tokens: list[Token] = []
    position = 0
    while position < len(text):
        match = _TOKEN_RE.match(text, position)
        if match is None:
            char = text[position]
            if char in "\"'`":
                raise ValidationError(f"Unterminated {char} literal", line=line)
            raise ValidationError(f"Unexpected character {char!r}", line=line)
        kind = match.lastgroup
        lexeme = match.group()
        if kind == "arrow":
            tokens.append(Token(TokenType.ARROW, lexeme, lexeme, line))
        elif kind == "number":
            tokens.append(Token(TokenType.NUMBER, lexeme, lexeme, line))
        elif kind == "ident":
            tokens.append(Token(TokenType.IDENT, lexeme, lexeme, line))
        elif kind == "quoted":
            tokens.append(Token(TokenType.QUOTED_IDENT, lexeme, lexeme[1:-1].replace("``", "`"), line))
        elif kind == "string":
            tokens.append(Token(TokenType.STRING, lexeme, lexeme[1:-1], line))
        elif kind == "punct":
            tokens.append(Token(_PUNCTUATION[lexeme], lexeme, lexeme, line))
        line += lexeme.count("\n")
        position = match.end()
    tokens.append(Token(TokenType.EOF, "", "", line))
    return tokens


class TokenStream:
    """Cursor over a token list used by the recursive-descent readers."""

    def __init__(self, tokens: list[Token]) -> None:
        self._tokens = tokens
        self._position = 0

    def peek(self) -> Token:
        return self._tokens[self._position]

    def next(self) -> Token:
        token = self._tokens[self._position]
        if token.type is not TokenType.EOF:
            self._position += 1
        return token

    def accept(self, token_type: TokenType) -> Token | None:
        if self.peek().type is token_type:
            return self.next()
        return None

    def expect(self, token_type: TokenType, what: str | None = None) -> Token:
        token = self.peek()
        if token.type is not token_type:
            found = token.text or token.type.value
            raise ValidationError(f"Expected {what or token_type.value}, found {found!r}", line=token.line)
        return self.next()

    def at_keyword(self, keyword: str) -> bool:
        token = self.peek()
        return token.type is TokenType.IDENT and token.value.upper() == keyword

    def expect_keyword(self, keyword: str) -> Token:
        if not self.at_keyword(keyword):
            token = self.peek()
            raise ValidationError(f"Expected {keyword}, found {token.text or token.type.value!r}", line=token.line)
        return self.next()


__all__ = ["StatementSource", "Token", "TokenStream", "TokenType", "split_statements", "tokenize"]
