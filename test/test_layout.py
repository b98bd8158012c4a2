import math

import numpy as np
import pytest

from dendromatch.layout import (
    cluster_layout,
    flip_x_coordinates,
    rotate,
    scale,
    translate,
    update_coordinates,
)
from dendromatch.parser import parse_dendrogram

OFFSET_X = 50
OFFSET_Y = 250
WIDTH = 350
HEIGHT = 150
LABEL_RESERVE = 100


def by_id(dendrogram):
    return {node.id: node for node in dendrogram.root.traverse()}


# ------------------------------------------------------------------------
# Point transforms
# ------------------------------------------------------------------------


def test_rotate_quarter_turn_clockwise():
    assert rotate((1.0, 0.0), -math.pi / 2) == pytest.approx([0.0, -1.0])
    assert rotate((0.0, 2.0), -math.pi / 2) == pytest.approx([2.0, 0.0])


def test_rotate_many_points():
    points = np.array([[1.0, 0.0], [0.0, 1.0], [3.0, 4.0]])
    rotated = rotate(points, math.pi)
    assert rotated.shape == (3, 2)
    np.testing.assert_allclose(rotated, -points, atol=1e-12)


def test_translate_and_scale():
    np.testing.assert_allclose(translate([[1, 2], [3, 4]], (10, -1)), [[11, 1], [13, 3]])
    np.testing.assert_allclose(scale((2, 3), (0.5, 2)), [1, 6])


# ------------------------------------------------------------------------
# Cluster layout
# ------------------------------------------------------------------------


def test_cluster_layout_spaces_leaves_evenly():
    root = parse_dendrogram("('A':1,'B':1):1,'C':2")
    cluster_layout(root, breadth=100, depth=10)
    leaves = root.get_leaves()
    assert [leaf.x for leaf in leaves] == pytest.approx([0, 50, 100])
    assert all(leaf.y == pytest.approx(10) for leaf in leaves)
    assert root.y == 0
    assert root.children[0].x == pytest.approx(25)
    # one level below the root of a two level tree
    assert root.children[0].y == pytest.approx(5)
    assert root.x == pytest.approx((25 + 100) / 2)


def test_cluster_layout_single_leaf():
    root = parse_dendrogram("'A':1")
    cluster_layout(root, breadth=80, depth=10)
    leaf = root.children[0]
    assert leaf.x == pytest.approx(40)
    assert root.x == pytest.approx(40)


# ------------------------------------------------------------------------
# Display coordinates
# ------------------------------------------------------------------------


def test_update_coordinates_root_left_leaves_right(five_leaves):
    root_xy = five_leaves.update_coordinates(OFFSET_X, OFFSET_Y, WIDTH, HEIGHT, LABEL_RESERVE)
    root = five_leaves.root
    assert root_xy == (root.x, root.y)
    assert root.x == pytest.approx(OFFSET_X)
    for leaf in root.get_leaves():
        assert leaf.x == pytest.approx(OFFSET_X + WIDTH)


def test_update_coordinates_spreads_leaves_over_height(five_leaves):
    five_leaves.update_coordinates(OFFSET_X, OFFSET_Y, WIDTH, HEIGHT, LABEL_RESERVE)
    ys = [leaf.y for leaf in five_leaves.root.get_leaves()]
    assert ys == pytest.approx([250, 212.5, 175, 137.5, 100])


def test_internal_nodes_placed_by_distance(five_leaves):
    five_leaves.update_coordinates(OFFSET_X, OFFSET_Y, WIDTH, HEIGHT, LABEL_RESERVE)
    nodes = by_id(five_leaves)
    # distance 0.6 out of a root distance of 1.0
    assert nodes["r0"].x == pytest.approx(OFFSET_X + 0.4 * WIDTH)
    assert nodes["r1"].x == pytest.approx(OFFSET_X + 0.4 * WIDTH)
    assert nodes["r10"].x == pytest.approx(OFFSET_X + 0.7 * WIDTH)


def test_parents_are_left_of_children(five_leaves):
    five_leaves.update_coordinates(OFFSET_X, OFFSET_Y, WIDTH, HEIGHT, LABEL_RESERVE)
    for node in five_leaves.root.descendants():
        if node.parent is not None:
            assert node.parent.x <= node.x


def test_flipped_layout(five_leaves):
    five_leaves.toggle_flipped()
    five_leaves.update_coordinates(OFFSET_X, OFFSET_Y, WIDTH, HEIGHT, LABEL_RESERVE)
    root = five_leaves.root
    assert root.x == pytest.approx(LABEL_RESERVE + OFFSET_X + WIDTH)
    for leaf in root.get_leaves():
        assert leaf.x == pytest.approx(LABEL_RESERVE + OFFSET_X)


def test_flipping_twice_restores_layout(five_leaves):
    five_leaves.update_coordinates(OFFSET_X, OFFSET_Y, WIDTH, HEIGHT, LABEL_RESERVE)
    before = [(node.x, node.y) for node in five_leaves.root.traverse()]

    five_leaves.toggle_flipped()
    five_leaves.update_coordinates(OFFSET_X, OFFSET_Y, WIDTH, HEIGHT, LABEL_RESERVE)
    five_leaves.toggle_flipped()
    five_leaves.update_coordinates(OFFSET_X, OFFSET_Y, WIDTH, HEIGHT, LABEL_RESERVE)

    after = [(node.x, node.y) for node in five_leaves.root.traverse()]
    assert after == before


def test_flip_x_is_an_involution_without_reserve(five_leaves):
    five_leaves.update_coordinates(OFFSET_X, OFFSET_Y, WIDTH, HEIGHT, LABEL_RESERVE)
    before = [node.x for node in five_leaves.root.traverse()]
    flip_x_coordinates(five_leaves.root, 0)
    flip_x_coordinates(five_leaves.root, 0)
    assert [node.x for node in five_leaves.root.traverse()] == pytest.approx(before)


def test_zero_root_distance_keeps_cluster_depths():
    from dendromatch.dendrogram import load_dendrogram

    dendrogram = load_dendrogram("('A':0,'B':0):0,'C':0", "flat")
    assert dendrogram.root.distance == 0
    dendrogram.update_coordinates(0, 100, 200, 100, 50)
    inner = dendrogram.root.children[0]
    assert inner.x == pytest.approx(100)
    assert dendrogram.root.children[1].x == pytest.approx(200)


@pytest.mark.parametrize("width, height", [(0, 100), (100, 0), (-5, 10)])
def test_non_positive_extents_are_rejected(five_leaves, width, height):
    with pytest.raises(ValueError):
        five_leaves.update_coordinates(0, 0, width, height, 0)


def test_update_coordinates_on_bare_tree():
    root = parse_dendrogram("'A':1,'B':1")
    update_coordinates(root, 10, 20, 100, 40, 0)
    assert root.x == pytest.approx(10)
    assert [leaf.y for leaf in root.get_leaves()] == pytest.approx([20, -20])


# ------------------------------------------------------------------------
# Mirroring a sub-tree
# ------------------------------------------------------------------------


def test_flip_y_node_mirrors_subtree(five_leaves):
    five_leaves.update_coordinates(OFFSET_X, OFFSET_Y, WIDTH, HEIGHT, LABEL_RESERVE)
    nodes = by_id(five_leaves)
    subtree = nodes["r1"]
    before = {node.id: node.y for node in subtree.descendants()}
    outside = {node.id: node.y for node in nodes["r0"].traverse()}

    five_leaves.flip_y_node(subtree)

    leaf_ys = [leaf.y for leaf in subtree.get_leaves()]
    assert leaf_ys == pytest.approx([100, 137.5, 175])
    assert sorted(leaf_ys) == pytest.approx(
        sorted(before[leaf.id] for leaf in subtree.get_leaves())
    )
    assert {node.id: node.y for node in nodes["r0"].traverse()} == outside
    # the sub-tree root is mirrored as well
    assert subtree.y == pytest.approx(275 - before["r1"])


def test_flip_y_node_twice_restores(five_leaves):
    five_leaves.update_coordinates(OFFSET_X, OFFSET_Y, WIDTH, HEIGHT, LABEL_RESERVE)
    subtree = by_id(five_leaves)["r1"]
    before = [node.y for node in subtree.traverse()]
    five_leaves.flip_y_node(subtree)
    five_leaves.flip_y_node(subtree)
    assert [node.y for node in subtree.traverse()] == pytest.approx(before)


def test_flip_y_node_on_leaf_is_noop(five_leaves):
    five_leaves.update_coordinates(OFFSET_X, OFFSET_Y, WIDTH, HEIGHT, LABEL_RESERVE)
    leaf = five_leaves.root.get_leaves()[0]
    y = leaf.y
    five_leaves.flip_y_node(leaf)
    assert leaf.y == y
