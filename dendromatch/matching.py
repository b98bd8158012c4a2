"""
Sub-cluster matching between two dendrograms.

Two sub-clusters match when the roots of their sub-trees carry the same
synthesized label. The search is coarse to fine: the most inclusive match
is reported and nothing nested below it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Tuple

from dendromatch.config import HighlightMode
from dendromatch.tree import Node

if TYPE_CHECKING:
    from dendromatch.dendrogram import Dendrogram

logger = logging.getLogger(__name__)

EdgeLists = Tuple[List[str], List[str]]


@dataclass(eq=False)
class ClusterMatch:
    """
    A node in a source dendrogram paired with a node in a target dendrogram.

    The match does not own either node. Its colour is assigned once all
    matches of a scene are known; the edge lists are filled on demand by
    init_equal_branches.
    """

    source: Node
    target: Node
    label: Optional[str] = field(init=False)
    color: Optional[str] = field(default=None, init=False)
    equal_branches: EdgeLists = field(default_factory=lambda: ([], []), init=False)

    def __post_init__(self) -> None:
        self.label = self.source.label

    def __repr__(self) -> str:
        return (
            f"ClusterMatch({self.label!r}, source='{self.source.id}', "
            f"target='{self.target.id}')"
        )

    def init_equal_branches(self, mode: HighlightMode | str) -> EdgeLists:
        from dendromatch.branches import compare_branches

        self.equal_branches = compare_branches(self.source, self.target, mode)
        return self.equal_branches


def is_trivial(node: Node, min_leaves: int) -> bool:
    return node.value < min_leaves


def match_cluster(node: Node, other: "Dendrogram", min_leaves: int) -> Optional[ClusterMatch]:
    """
    Find the first node of `other`, in pre-order, with the same label as `node`.

    Candidates below min_leaves are skipped. An unlabelled node never matches.
    """
    if node.label is None:
        return None
    found = other.root.find_first(
        lambda candidate: candidate.label is not None
        and candidate.value >= min_leaves
        and candidate.label == node.label
    )
    if found is None:
        return None
    return ClusterMatch(node, found)


def find_matching_clusters(
    node: Node, other: "Dendrogram", min_leaves: int = 3
) -> List[ClusterMatch]:
    """
    Match the sub-tree rooted at `node` against the other dendrogram.

    If `node` itself has a match, that single match is returned. Otherwise
    the search continues independently in each child and the results are
    concatenated. Trivial nodes (fewer than min_leaves leaves) and all their
    descendants are never matched.

    Args:
        node: Starting node, usually the root of the source dendrogram.
        other: Dendrogram searched for matching nodes.
        min_leaves: Minimum subtree size of a non-trivial cluster.

    Returns:
        List of ClusterMatch objects; empty if nothing matches.
    """
    if min_leaves < 1:
        raise ValueError(f"min_leaves must be at least 1, got {min_leaves}")

    matches: List[ClusterMatch] = []
    pending: List[Node] = [node]
    while pending:
        current = pending.pop()
        if is_trivial(current, min_leaves):
            continue
        match = match_cluster(current, other, min_leaves)
        if match is not None:
            matches.append(match)
            continue
        # reversed so that results come out in left-to-right child order
        pending.extend(reversed(current.children))

    logger.debug(
        "Found %d cluster matches below '%s' (min_leaves=%d)",
        len(matches),
        node.id,
        min_leaves,
    )
    return matches
