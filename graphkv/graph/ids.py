"""Validation helpers for integer node identifiers."""
from __future__ import annotations

from ..errors import ValidationError


def check_node_id(node_id: object) -> int:
    """Return ``node_id`` when it is a positive integer, raise otherwise."""

    if isinstance(node_id, bool) or not isinstance(node_id, int) or node_id < 1:
        raise ValidationError(f"Node ids are positive integers, got {node_id!r}")
    return node_id


def parse_member(member: str) -> int:
    """Convert a sorted-set member back into a node id."""

    return int(member)
