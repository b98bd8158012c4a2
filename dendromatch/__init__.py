"""Core dendrogram (sub)cluster matching package."""

from dendromatch.config import (
    ClusterMatchType,
    HighlightMode,
    LabelPolicy,
    SceneLayout,
)
from dendromatch.dendrogram import Dendrogram, load_dendrogram
from dendromatch.exceptions import (
    DendroMatchError,
    DendrogramStateError,
    NewickParseError,
)
from dendromatch.matching import ClusterMatch, find_matching_clusters
from dendromatch.parser import parse_dendrogram, strip_tree_wrapper
from dendromatch.scene import Scene
from dendromatch.tree import Node

__all__ = [
    "ClusterMatch",
    "ClusterMatchType",
    "Dendrogram",
    "DendroMatchError",
    "DendrogramStateError",
    "HighlightMode",
    "LabelPolicy",
    "NewickParseError",
    "Node",
    "Scene",
    "SceneLayout",
    "find_matching_clusters",
    "load_dendrogram",
    "parse_dendrogram",
    "strip_tree_wrapper",
]
