"""
Branch comparison inside a matched pair of sub-clusters.

Matched sub-clusters do not have to be isomorphic. Starting from the leaves,
corresponding nodes are paired level by level; the edges leading into paired
nodes are "equal" branches, all remaining edges of the sub-trees are
"different" branches.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Set, Tuple

from dendromatch.config import HighlightMode
from dendromatch.tree import Node

logger = logging.getLogger(__name__)


def _labels_equal(a: Optional[str], b: Optional[str]) -> bool:
    return a is not None and a == b


def _parent_label(node: Node) -> Optional[str]:
    parent = node.parent
    return parent.label if parent is not None else None


def is_partner(node: Node, candidate: Node) -> bool:
    """
    Whether `candidate` corresponds to `node` on the other side.

    Leaves correspond when their names and their parents' labels are equal.
    Internal nodes correspond when their own labels and their parents' labels
    are equal. Unset labels never compare equal.
    """
    if not _labels_equal(_parent_label(node), _parent_label(candidate)):
        return False
    if node.is_leaf():
        return candidate.is_leaf() and node.name == candidate.name
    return candidate.is_internal() and _labels_equal(node.label, candidate.label)


def _find_partner(node: Node, candidates: List[Node]) -> int:
    for index, candidate in enumerate(candidates):
        if is_partner(node, candidate):
            return index
    return -1


def find_equal_branches(source: Node, target: Node) -> Tuple[List[str], List[str]]:
    """
    Pair corresponding nodes of two sub-trees bottom-up.

    Both worklists start with the leaves. Whenever a node finds its partner,
    both parents join their worklists, so pairing climbs one level at a
    time. The sub-tree roots are never paired: their incoming edges lie
    outside the matched pair.

    Returns:
        The ids of the equal edges on the source and on the target side.
    """
    search: List[Node] = source.get_leaves()
    targets: List[Node] = target.get_leaves()
    queued_search: Set[Node] = set()
    queued_targets: Set[Node] = set()
    equal_search: List[str] = []
    equal_target: List[str] = []

    while search:
        node = search.pop()
        if node is source:
            continue
        index = _find_partner(node, targets)
        if index == -1:
            continue
        partner = targets.pop(index)
        equal_search.append(node.edge_id())  # type: ignore[arg-type]
        equal_target.append(partner.edge_id())  # type: ignore[arg-type]

        parent, partner_parent = node.parent, partner.parent
        if parent is not None and parent is not source and parent not in queued_search:
            queued_search.add(parent)
            search.append(parent)
        if (
            partner_parent is not None
            and partner_parent is not target
            and partner_parent not in queued_targets
        ):
            queued_targets.add(partner_parent)
            targets.append(partner_parent)

    return equal_search, equal_target


def compare_branches(
    source: Node, target: Node, mode: HighlightMode | str
) -> Tuple[List[str], List[str]]:
    """
    Compute the edge ids to highlight for one matched pair of sub-trees.

    Args:
        source: Root of the matched sub-tree in the source dendrogram.
        target: Root of the matched sub-tree in the target dendrogram.
        mode: "none" for no highlight, "simi" for the equal branches,
              "diff" for the branches that are not equal.

    Returns:
        A pair of edge id lists, one per side.
    """
    mode = HighlightMode.coerce(mode)
    if mode is HighlightMode.NONE:
        return [], []

    equal_search, equal_target = find_equal_branches(source, target)
    if mode is HighlightMode.SIMI:
        return equal_search, equal_target

    equal_search_set, equal_target_set = set(equal_search), set(equal_target)
    diff_search = [edge for edge in source.iter_edges() if edge not in equal_search_set]
    diff_target = [edge for edge in target.iter_edges() if edge not in equal_target_set]
    logger.debug(
        "Branches of '%s'/'%s': %d equal, %d/%d different",
        source.id,
        target.id,
        len(equal_search),
        len(diff_search),
        len(diff_target),
    )
    return diff_search, diff_target
