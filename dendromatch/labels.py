"""
Label synthesis for dendrogram nodes.

Only leaves carry a name in the source text. Internal nodes receive a label
built from their children's labels, so that matching clusters across two
dendrograms reduces to comparing labels. Every function takes the tree-wide
parameters it needs (cutoff, separator, flags) explicitly.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from dendromatch.config import STRUCTURE_MARKER
from dendromatch.tree import Node

logger = logging.getLogger(__name__)


def trim_leaf_name(name: str, separator: str = ".") -> str:
    """
    Drop the last separator-delimited component of a leaf name.

    "ADX.x2" -> "ADX"; names without the separator are returned unchanged.
    """
    return name.rsplit(separator, 1)[0]


def set_leaf_labels(root: Node, trim: bool = True, separator: str = ".") -> None:
    for node in root.traverse():
        if node.is_leaf():
            node.label = trim_leaf_name(node.name, separator) if trim else node.name


def synthesize_label(
    child_labels: Sequence[str],
    keep_structure: bool = True,
    keep_duplicates: bool = True,
    separator: str = "-",
) -> str:
    """
    Combine the labels of a node's children into the node's own label.

    Labels are sorted before joining, which makes the result insensitive to
    branch rotation. Without duplicates, composite child labels are broken
    down into their atomic components first and each component is kept once.
    With structure, the joined label is wrapped in STRUCTURE_MARKER.
    """
    if keep_duplicates:
        tokens = sorted(child_labels)
    else:
        tokens = sorted(
            {component for label in child_labels for component in label.split(separator)}
        )
    label = separator.join(tokens)
    if keep_structure:
        label = f"{STRUCTURE_MARKER}{label}{STRUCTURE_MARKER}"
    return label


def set_labels(
    root: Node,
    cutoff: float,
    keep_structure: bool = True,
    keep_duplicates: bool = True,
    separator: str = "-",
) -> int:
    """
    Assign labels to internal nodes, children before parents.

    Nodes whose distance to their leaves exceeds the cutoff are left without
    a label; they are too close to the root to take part in matching. A node
    with an unlabelled child is left unlabelled as well.

    Returns:
        The number of internal nodes that received a label.
    """
    if not separator:
        raise ValueError("Label separator cannot be empty")

    labelled = 0
    for node in root.traverse_postorder():
        if node.is_leaf():
            continue
        if node.distance > cutoff:
            node.label = None
            continue
        child_labels: List[Optional[str]] = [child.label for child in node.children]
        if any(label is None for label in child_labels):
            node.label = None
            continue
        node.label = synthesize_label(
            child_labels,  # type: ignore[arg-type]
            keep_structure=keep_structure,
            keep_duplicates=keep_duplicates,
            separator=separator,
        )
        labelled += 1

    logger.debug("Labelled %d internal nodes below cutoff %s", labelled, cutoff)
    return labelled
