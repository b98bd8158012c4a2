from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from dendromatch import labels, layout
from dendromatch.config import LabelPolicy
from dendromatch.exceptions import DendrogramStateError
from dendromatch.parser import parse_dendrogram, strip_tree_wrapper
from dendromatch.tree import ROOT_ID, Node

if TYPE_CHECKING:
    from dendromatch.matching import ClusterMatch

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Undefined"
DEFAULT_CUTOFF = 1.5


class Dendrogram:
    """
    A rooted cluster tree together with its display and matching state.

    The dendrogram owns its root exclusively. The root is assigned once;
    every other operation mutates the nodes in place.
    """

    def __init__(self, title: str = DEFAULT_TITLE):
        self.title = title
        self._root: Optional[Node] = None
        self.leaf_count = -1
        # distance from the leaves up to which internal nodes are labelled
        self._cutoff = DEFAULT_CUTOFF
        # root drawn on the right when flipped
        self.flipped = False

    def __repr__(self) -> str:
        return f"Dendrogram('{self.title}', leaves={self.leaf_count})"

    # ------------------------------------------------------------------------
    # Root & cutoff
    # ------------------------------------------------------------------------
    @property
    def root(self) -> Node:
        if self._root is None:
            raise DendrogramStateError(f"Dendrogram '{self.title}' has no root yet")
        return self._root

    def has_root(self) -> bool:
        return self._root is not None

    def set_root(self, root: Node) -> None:
        if self._root is not None:
            raise DendrogramStateError(
                f"Dendrogram '{self.title}' already has a root assigned"
            )
        self._root = root

    @property
    def cutoff(self) -> float:
        return self._cutoff

    @cutoff.setter
    def cutoff(self, value: float) -> None:
        self.set_cutoff(value)

    def set_cutoff(self, value: float) -> float:
        """
        Set the labelling cutoff, clamped to [0, root.distance].

        The upper bound only applies once distances have been computed.
        """
        cutoff = float(value)
        upper = self._root.distance if self._root is not None else None
        clamped = max(cutoff, 0.0)
        if upper is not None and upper > 0:
            clamped = min(clamped, upper)
        if clamped != cutoff:
            logger.warning(
                "Cutoff %s for '%s' out of range, clamped to %s",
                cutoff,
                self.title,
                clamped,
            )
        self._cutoff = clamped
        return clamped

    # ------------------------------------------------------------------------
    # Bottom-up quantities
    # ------------------------------------------------------------------------
    def compute_subtree_sizes(self) -> None:
        self.root.count()

    def init_leaf_count(self) -> int:
        self.leaf_count = len(self.root.get_leaves())
        return self.leaf_count

    def set_distance(self) -> None:
        """
        Compute, for every node, the distance from the node down to its leaves.

        Leaves are at distance 0. Since all leaves of a cluster dendrogram are
        equidistant from any ancestor, the first child is enough:
        distance = first_child.length + first_child.distance.
        The cutoff is reset to half the root distance.
        """
        for node in self.root.traverse_postorder():
            if node.is_leaf():
                node.distance = 0.0
            else:
                first = node.children[0]
                node.distance = first.length + first.distance
        self._cutoff = self.root.distance / 2
        logger.debug(
            "'%s': root distance %s, cutoff reset to %s",
            self.title,
            self.root.distance,
            self._cutoff,
        )

    # ------------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------------
    def set_leaf_labels(self, trim: bool = True, separator: str = ".") -> None:
        labels.set_leaf_labels(self.root, trim=trim, separator=separator)

    def set_labels(
        self,
        keep_structure: bool = True,
        keep_duplicates: bool = True,
        separator: str = "-",
    ) -> int:
        return labels.set_labels(
            self.root,
            self._cutoff,
            keep_structure=keep_structure,
            keep_duplicates=keep_duplicates,
            separator=separator,
        )

    def relabel(self, policy: LabelPolicy) -> int:
        """Re-apply internal node labels for the given policy and current cutoff."""
        return self.set_labels(
            keep_structure=policy.keep_structure,
            keep_duplicates=policy.keep_duplicates,
            separator=policy.separator,
        )

    # ------------------------------------------------------------------------
    # Ordering & mirroring
    # ------------------------------------------------------------------------
    def sort(self) -> None:
        """
        Reorder children of every node by label, case-insensitively.

        Unlabelled nodes come first. The sort is stable, so unlabelled nodes
        and nodes with equal labels keep their relative order, which makes
        sorting idempotent. Nodes never move to a different branch.
        """
        for node in self.root.traverse():
            if node.children:
                node.children.sort(key=_label_sort_key)

    def flip_y_node(self, node: Node) -> None:
        layout.flip_y_node(node)

    def toggle_flipped(self) -> None:
        self.flipped = not self.flipped

    def update_coordinates(
        self,
        offset_x: float,
        offset_y: float,
        width: float,
        height: float,
        label_reserve: float,
    ) -> Tuple[float, float]:
        return layout.update_coordinates(
            self.root,
            offset_x,
            offset_y,
            width,
            height,
            label_reserve,
            flipped=self.flipped,
        )

    # ------------------------------------------------------------------------
    # Matching
    # ------------------------------------------------------------------------
    def find_matching_clusters(
        self,
        other: "Dendrogram",
        min_leaves: int = 3,
        node: Optional[Node] = None,
    ) -> List["ClusterMatch"]:
        from dendromatch.matching import find_matching_clusters

        return find_matching_clusters(
            node if node is not None else self.root, other, min_leaves
        )

    # ------------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "cutoff": self._cutoff,
            "flipped": self.flipped,
            "leaf_count": self.leaf_count,
            "root": self._root.to_dict() if self._root is not None else None,
        }


def _label_sort_key(node: Node) -> Tuple[bool, str]:
    if node.label is None:
        return (False, "")
    return (True, node.label.lower())


def load_dendrogram(
    text: str,
    title: str = DEFAULT_TITLE,
    policy: Optional[LabelPolicy] = None,
) -> Dendrogram:
    """
    Build a fully initialised dendrogram from a Newick line.

    Parses the text, then computes subtree sizes, the leaf count, distances
    (which resets the cutoff to half the root distance), leaf labels and
    internal labels.

    Raises:
        NewickParseError: If the text is malformed.
    """
    policy = policy or LabelPolicy()
    dendrogram = Dendrogram(title)
    dendrogram.set_root(parse_dendrogram(strip_tree_wrapper(text), ROOT_ID))
    dendrogram.compute_subtree_sizes()
    dendrogram.init_leaf_count()
    dendrogram.set_distance()
    dendrogram.set_leaf_labels(
        trim=policy.trim_leaf_names, separator=policy.leaf_separator
    )
    dendrogram.relabel(policy)
    logger.info(
        "Loaded dendrogram '%s' with %d leaves", title, dendrogram.leaf_count
    )
    return dendrogram
