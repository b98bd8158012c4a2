"""
Layout calculation functions for dendrograms.

Nodes first receive a conventional top-down cluster layout (leaves evenly
spaced along the breadth axis, all leaves at the same depth). The points are
then rotated by -90 degrees and translated, so that the root sits on the left
and the leaves on the right. Finally the depth axis is rescaled to reflect the
clustering distance recorded on every node and, for flipped dendrograms,
mirrored.
"""

import logging
import math
from typing import Dict, List, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from dendromatch.tree import Node

logger = logging.getLogger(__name__)

PointLike = Union[Sequence[float], Sequence[Sequence[float]], NDArray[np.float64]]


# ===================================================================
# 1. POINT TRANSFORMS
# ===================================================================


def rotate(points: PointLike, radians: float) -> NDArray[np.float64]:
    """
    Rotate one (x, y) point or an (N, 2) array of points about the origin.
    """
    cos, sin = math.cos(radians), math.sin(radians)
    matrix = np.array([[cos, -sin], [sin, cos]])
    return np.asarray(points, dtype=float) @ matrix.T


def translate(points: PointLike, offset: Sequence[float]) -> NDArray[np.float64]:
    return np.asarray(points, dtype=float) + np.asarray(offset, dtype=float)


def scale(points: PointLike, factors: Sequence[float]) -> NDArray[np.float64]:
    return np.asarray(points, dtype=float) * np.asarray(factors, dtype=float)


def get_coordinates(nodes: List[Node]) -> NDArray[np.float64]:
    return np.array([(node.x, node.y) for node in nodes], dtype=float).reshape(-1, 2)


def set_coordinates(nodes: List[Node], points: NDArray[np.float64]) -> None:
    for node, (x, y) in zip(nodes, points):
        node.x = float(x)
        node.y = float(y)


# ===================================================================
# 2. CLUSTER LAYOUT
# ===================================================================


def cluster_layout(root: Node, breadth: float, depth: float) -> None:
    """
    Assign the conventional top-down dendrogram layout.

    x runs along the breadth axis: leaves are evenly spaced over [0, breadth]
    in their current order and every internal node sits at the mean x of its
    children. y runs along the depth axis: the root is at 0, all leaves are at
    `depth`, and internal nodes are placed by their height (longest chain of
    edges down to a leaf).
    """
    leaves = root.get_leaves()
    if len(leaves) == 1:
        leaves[0].x = breadth / 2
    else:
        step = breadth / (len(leaves) - 1)
        for index, leaf in enumerate(leaves):
            leaf.x = index * step

    heights: Dict[Node, int] = {}
    for node in root.traverse_postorder():
        if node.is_leaf():
            heights[node] = 0
            continue
        heights[node] = 1 + max(heights[child] for child in node.children)
        node.x = sum(child.x for child in node.children) / len(node.children)

    root_height = heights[root]
    for node, height in heights.items():
        node.y = (1 - height / root_height) * depth if root_height else 0.0


# ===================================================================
# 3. DISTANCE SCALING AND MIRRORING
# ===================================================================


def scale_x_coordinates(root: Node) -> None:
    """
    Space nodes along X proportionally to their clustering distance.

    The root keeps its X and the leaves keep theirs; an internal node is
    placed at the fraction (root.distance - node.distance) / root.distance of
    the span between them.
    """
    world = root.distance
    if world <= 0:
        logger.debug("Root distance is %s, depth axis left unscaled", world)
        return
    nodes = root.traverse()
    pixels = root.get_leaves()[0].x - root.x
    distances = np.array([node.distance for node in nodes], dtype=float)
    xs = (world - distances) / world * pixels + root.x
    for node, x in zip(nodes, xs):
        node.x = float(x)


def flip_x_coordinates(root: Node, label_reserve: float) -> None:
    """
    Mirror every node's X so that the leaves end up on the left.

    `label_reserve` pixels are kept free for the leaf labels at the new leaf end.
    """
    x_root = root.x
    x_leaf = root.get_leaves()[0].x
    for node in root.traverse():
        node.x = label_reserve + x_root + (x_leaf - node.x)


def flip_y_node(node: Node) -> None:
    """
    Mirror the Y coordinate of every node below `node` (inclusive).

    The mirror axis is the midpoint between the lowest and highest leaf of
    the subtree, so the subtree keeps occupying the same vertical band.
    """
    if node.is_leaf():
        return
    leaf_ys = [leaf.y for leaf in node.get_leaves()]
    min_y, max_y = min(leaf_ys), max(leaf_ys)
    for descendant in node.descendants():
        descendant.y = max_y - (descendant.y - min_y)


# ===================================================================
# 4. PUBLIC API
# ===================================================================


def update_coordinates(
    root: Node,
    offset_x: float,
    offset_y: float,
    width: float,
    height: float,
    label_reserve: float,
    flipped: bool = False,
) -> Tuple[float, float]:
    """
    Compute display coordinates for every node of a dendrogram.

    Args:
        root: Root of a tree whose subtree sizes and distances are set.
        offset_x: Pixels to displace all nodes along X.
        offset_y: Pixels to displace all nodes along Y.
        width: Pixel span between root and leaves.
        height: Pixel span covered by the leaves.
        label_reserve: Pixels reserved for leaf labels when flipped.
        flipped: Whether the root should be drawn on the right.

    Returns:
        The (x, y) position of the root.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Layout extents must be positive, got {width}x{height}")

    # the cluster layout runs top-down, so breadth is the height and depth the width
    cluster_layout(root, breadth=height, depth=width)

    nodes = root.traverse()
    points = rotate(get_coordinates(nodes), -math.pi / 2)
    points = translate(points, (offset_x, offset_y))
    set_coordinates(nodes, points)

    scale_x_coordinates(root)
    if flipped:
        flip_x_coordinates(root, label_reserve)
    return root.x, root.y
