"""Tests for :mod:`graphkv.interchange.codec`."""

from __future__ import annotations

import pytest

from graphkv.errors import ValidationError
from graphkv.interchange.codec import (
    decode_value,
    encode_properties,
    encode_value,
    escape_identifier,
    unescape_string,
)


@pytest.mark.parametrize(
    "value, literal",
    [
        (None, "null"),
        (True, "true"),
        (False, "false"),
        (42, "42"),
        (-7, "-7"),
        (1.5, "1.5"),
        (2.0, "2.0"),
        (1e20, "1.0e+20"),
        ("plain", '"plain"'),
        ([1, "a", [None]], '[1, "a", [null]]'),
    ],
)
def test_encode_value_literals(value, literal):
    assert encode_value(value) == literal


def test_strings_with_special_characters_survive_encoding():
    text = 'He said "hi" \\ then\nleft\tquietly'
    literal = encode_value(text)

    assert "\n" not in literal
    assert decode_value(literal) == text


def test_floats_stay_floats_and_ints_stay_ints():
    assert decode_value(encode_value(1e20)) == 1e20
    assert isinstance(decode_value(encode_value(3.0)), float)
    assert isinstance(decode_value("3"), int)
    assert decode_value("-2.5e-3") == -0.0025


def test_non_finite_floats_cannot_be_encoded():
    for value in (float("inf"), float("-inf"), float("nan")):
        with pytest.raises(ValidationError):
            encode_value(value)


def test_decode_value_accepts_keyword_case_and_single_quotes():
    assert decode_value("NULL") is None
    assert decode_value("True") is True
    assert decode_value("'it\\'s'") == "it's"
    assert decode_value("[]") == []


def test_unescape_keeps_unknown_sequences():
    assert unescape_string(r"a\qb") == r"a\qb"


def test_map_literals_are_rejected():
    with pytest.raises(ValidationError, match="Map values"):
        decode_value("{a: 1}")


@pytest.mark.parametrize(
    "name, escaped",
    [
        ("name", "name"),
        ("_private2", "_private2"),
        ("first name", "`first name`"),
        ("2fast", "`2fast`"),
        ("we`ird", "`we``ird`"),
        ("café", "`café`"),
    ],
)
def test_escape_identifier(name, escaped):
    assert escape_identifier(name) == escaped


def test_encode_properties_keeps_insertion_order():
    assert encode_properties({"b": 1, "a b": "x"}) == 'b: 1, `a b`: "x"'


def test_unrepresentable_numbers_raise_validation_errors():
    with pytest.raises(ValidationError, match="out of float range"):
        decode_value("1e999")
    with pytest.raises(ValidationError, match="cannot be decoded"):
        decode_value("9" * 5000)
