"""
Parser for the Newick-style text written by hierarchical clustering tools.

This module turns a comma separated, colon annotated child list into a
Node hierarchy with path-encoded ids.
"""

from .newick_parser import (
    parse_dendrogram,
    strip_tree_wrapper,
    split_into_children,
    split_distance,
    strip_quotes,
    check_balanced,
)

__all__ = [
    "parse_dendrogram",
    "strip_tree_wrapper",
    "split_into_children",
    "split_distance",
    "strip_quotes",
    "check_balanced",
]
