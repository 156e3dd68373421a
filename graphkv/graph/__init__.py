"""Graph subpackage containing the data model, storage and traversal."""

from .keys import KeySpace
from .model import Direction, Edge, GraphStats, Path, Properties, PropertyValue
from .store import GraphStore
from .traversal import Traversal

__all__ = [
    "Direction",
    "Edge",
    "GraphStats",
    "GraphStore",
    "KeySpace",
    "Path",
    "Properties",
    "PropertyValue",
    "Traversal",
]
