"""Persistence utilities for graphkv."""

from .files import export_to_file, import_from_file
from .snapshot import take_snapshot

__all__ = ["export_to_file", "import_from_file", "take_snapshot"]
