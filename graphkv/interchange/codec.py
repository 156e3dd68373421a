"""Bidirectional mapping between property values and Cypher literals."""
from __future__ import annotations

import math
import re
from typing import Mapping

from ..errors import ValidationError
from ..graph.model import PropertyValue
from .lexer import TokenStream, TokenType, tokenize

_PLAIN_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\r": "\\r", "\t": "\\t"}
_UNESCAPES = {"\\": "\\", '"': '"', "'": "'", "n": "\n", "r": "\r", "t": "\t"}
_ESCAPE_RE = re.compile(r'[\\"\n\r\t]')
_UNESCAPE_RE = re.compile(r"\\(.)", re.DOTALL)


def escape_identifier(name: str) -> str:
    """Back-tick quote ``name`` unless it is a plain identifier.

    Names with characters outside ``[A-Za-z0-9_]`` or a leading digit are
    quoted, with embedded back-ticks doubled.
    """

    if _PLAIN_IDENTIFIER.fullmatch(name):
        return name
    return "`" + name.replace("`", "``") + "`"


def escape_string(text: str) -> str:
    return '"' + _ESCAPE_RE.sub(lambda match: _ESCAPES[match.group()], text) + '"'


def unescape_string(body: str) -> str:
    """Decode the escape sequences of a string literal body.

    Unknown sequences are kept verbatim, backslash included.
    """

    return _UNESCAPE_RE.sub(lambda match: _UNESCAPES.get(match.group(1), match.group()), body)


def encode_float(value: float) -> str:
    if not math.isfinite(value):
        raise ValidationError(f"Cannot encode non-finite float {value!r}")
    text = repr(value)
    if "." not in text:
        # 1e+20 -> 1.0e+20 so the literal still reads back as a float
        mantissa, _, exponent = text.partition("e")
        text = f"{mantissa}.0e{exponent}" if exponent else f"{mantissa}.0"
    return text


def encode_value(value: PropertyValue) -> str:
    """Render ``value`` as a Cypher literal."""

    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return encode_float(value)
    if isinstance(value, str):
        return escape_string(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(encode_value(item) for item in value) + "]"
    raise ValidationError(f"Cannot encode value of type {type(value).__name__}")


def encode_properties(properties: Mapping[str, PropertyValue]) -> str:
    """Render the inside of a property map, without the surrounding braces."""

    return ", ".join(f"{escape_identifier(key)}: {encode_value(value)}" for key, value in properties.items())


def decode_number(text: str, *, line: int | None = None) -> int | float:
    try:
        if "." in text or "e" in text or "E" in text:
            value: int | float = float(text)
        else:
            value = int(text)
    except ValueError as exc:
        # int() refuses literals past the interpreter's digit limit
        raise ValidationError(f"Number literal cannot be decoded: {text[:20]}...", line=line) from exc
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"Number literal is out of float range: {text[:20]}", line=line)
    return value


def read_value(stream: TokenStream) -> PropertyValue:
    """Consume one literal from ``stream`` and return its value."""

    token = stream.next()
    if token.type is TokenType.NUMBER:
        return decode_number(token.value, line=token.line)
    if token.type is TokenType.DASH:
        number = stream.expect(TokenType.NUMBER, "number after '-'")
        return -decode_number(number.value, line=number.line)
    if token.type is TokenType.STRING:
        return unescape_string(token.value)
    if token.type is TokenType.IDENT:
        word = token.value.lower()
        if word == "null":
            return None
        if word == "true":
            return True
        if word == "false":
            return False
    if token.type is TokenType.LBRACKET:
        items: list[PropertyValue] = []
        if stream.accept(TokenType.RBRACKET):
            return items
        while True:
            items.append(read_value(stream))
            if stream.accept(TokenType.COMMA):
                continue
            stream.expect(TokenType.RBRACKET, "',' or ']' in list")
            return items
    if token.type is TokenType.LBRACE:
        raise ValidationError("Map values are not supported", line=token.line)
    raise ValidationError(f"Expected a value, found {token.text or token.type.value!r}", line=token.line)


def decode_value(text: str) -> PropertyValue:
    """Parse a standalone literal such as ``"a\\nb"`` or ``[1, [2.5, null]]``."""

    stream = TokenStream(tokenize(text))
    value = read_value(stream)
    stream.expect(TokenType.EOF)
    return value


__all__ = [
    "decode_number",
    "decode_value",
    "encode_float",
    "encode_properties",
    "encode_value",
    "escape_identifier",
    "escape_string",
    "read_value",
    "unescape_string",
]
